"""Get weather information from yr.no."""
from asyncio import new_event_loop
import logging

from click import (
    ClickException, argument, echo, group, option, pass_context, pass_obj
)

from yr.client import URL_MAP, WeatherClient, singleton
from yr.exc import InvalidOperationError, NetworkError, ValidationError, YRError
from yr.models import LocationForecastArgs, TextForecastArgs

__all__ = [
    'WeatherClient', 'URL_MAP', 'singleton',
    'LocationForecastArgs', 'TextForecastArgs',
    'YRError', 'ValidationError', 'InvalidOperationError', 'NetworkError',
]


@group()
@option("--location-forecast-url", default=URL_MAP['location_forecast'],
        show_default=True)
@option("--text-forecast-url", default=URL_MAP['text_forecast'],
        show_default=True)
@option("-v", "--verbose", is_flag=True, default=False,
        help="Log requests to stderr.")
@pass_context
def cli(ctx, *, location_forecast_url, text_forecast_url, verbose):
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    loop = new_event_loop()
    ctx.obj = WeatherClient(
        url_map={
            'location_forecast': location_forecast_url,
            'text_forecast': text_forecast_url,
        },
        loop=loop
    )

    def close():
        loop.run_until_complete(ctx.obj.aclose())
        loop.close()

    ctx.call_on_close(close)


@cli.command(help="Forecast for a place")
@option("--select", help="CSS selector; print the text of matching elements.")
@argument("latitude", type=float)
@argument("longitude", type=float)
@pass_obj
def location_forecast(client, latitude, longitude, select):
    _show(lambda: client.location_forecast((latitude, longitude)), select)


@cli.command(help="Textual forecast for all parts of the country")
@option("--forecast", default="land", show_default=True)
@option("--language", default="nb", show_default=True)
@option("--select", help="CSS selector; print the text of matching elements.")
@pass_obj
def text_forecast(client, forecast, language, select):
    _show(
        lambda: client.text_forecast(
            {'forecast': forecast, 'language': language}
        ),
        select
    )


def _show(request, select):
    try:
        dom = request()
    except YRError as error:
        raise ClickException(str(error))

    if dom is None:
        raise ClickException("The response contained no forecast")
    if select:
        for tag in dom.select(select):
            echo(tag.get_text(strip=True))
    else:
        echo(dom.prettify())
