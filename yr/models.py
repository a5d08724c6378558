from typing import Any, Mapping, Sequence, Union

from pydantic import BaseModel, ConfigDict
import pydantic

from yr.exc import ValidationError


class LocationForecastArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @classmethod
    def coerce(
        cls, args: Union['LocationForecastArgs', Mapping[str, Any], Sequence]
    ) -> 'LocationForecastArgs':
        """Accept a mapping, a model or a ``(latitude, longitude)`` pair."""

        if isinstance(args, cls):
            return args
        if args is None:
            args = {}
        elif not isinstance(args, Mapping):
            args = dict(zip(('latitude', 'longitude'), args))
        if any(args.get(name) is None for name in ('latitude', 'longitude')):
            raise ValidationError('latitude and/or longitude is missing')
        try:
            return cls.model_validate(
                {name: args[name] for name in ('latitude', 'longitude')}
            )
        except pydantic.ValidationError as error:
            raise ValidationError(str(error)) from error


class TextForecastArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    forecast: str = 'land'
    language: str = 'nb'

    @classmethod
    def coerce(
        cls, args: Union['TextForecastArgs', Mapping[str, Any], Sequence, None]
    ) -> 'TextForecastArgs':
        """Accept a mapping, a model or a ``(forecast, language)`` pair.

        Never fails: empty values fall back to the defaults and everything
        else is used as a string.
        """

        if isinstance(args, cls):
            return args
        if not args:
            args = {}
        elif not isinstance(args, Mapping):
            args = dict(zip(('forecast', 'language'), args))
        return cls.model_validate({
            name: str(args[name])
            for name in ('forecast', 'language') if args.get(name)
        })
