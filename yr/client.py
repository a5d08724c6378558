"""yr.no weather API client"""
from asyncio import (
    get_running_loop, new_event_loop, run_coroutine_threadsafe, wrap_future
)
import concurrent.futures
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag
import httpx

from yr.exc import InvalidOperationError, NetworkError, ValidationError
from yr.models import LocationForecastArgs, TextForecastArgs


log = logging.getLogger(__name__)

USER_AGENT = f"{__package__}/0.1 (+https://www.yr.no/)"

URL_MAP: Dict[str, str] = {
    'location_forecast': 'http://api.yr.no/weatherapi/locationforecast/1.8/',
    'text_forecast': 'http://api.yr.no/weatherapi/textforecast/1.6/',
}

Callback = Callable[[str, Optional[Tag]], Any]

_singleton = None


def singleton():
    """Process-wide event loop used when no other loop is available."""

    global _singleton
    if _singleton is None or _singleton.is_closed():
        _singleton = new_event_loop()
    return _singleton


def _running_loop():
    try:
        return get_running_loop()
    except RuntimeError:
        return None


def _propagate(pending, waiter):
    # A cancelled request still wakes the caller.
    if waiter.done():
        return
    if pending.cancelled():
        waiter.cancel()
    else:
        waiter.set_exception(pending.exception())


def first_child(document: BeautifulSoup) -> Optional[Tag]:
    # The root element only wraps the interesting part of the response.
    root = document.find(True, recursive=False)
    if root is None:
        return None
    return root.find(True, recursive=False)


class WeatherClient:
    """Fetch forecasts from yr.no.

    Every request method works in two ways.  Given a ``callback``, it
    returns the client right away and later calls ``callback(err, dom)``
    exactly once, with ``err`` being an empty string on success.  Without
    a callback, it waits for the response and returns the document, raising
    :class:`~yr.exc.NetworkError` if the request failed.
    """

    def __init__(self, url_map=None, http_client=None, loop=None,
        max_redirects=2
    ):
        self._url_map = dict(URL_MAP)
        if url_map:
            self.url_map = url_map
        self._http = http_client
        self._owns_http = http_client is None
        self.loop = loop
        self.max_redirects = max_redirects
        self._pending = set()

    @property
    def url_map(self) -> Mapping[str, str]:
        """Read-only view; assign a mapping to override endpoints."""
        return MappingProxyType(self._url_map)

    @url_map.setter
    def url_map(self, value: Dict[str, str]):
        for operation in value:
            if operation not in URL_MAP:
                raise InvalidOperationError(operation)
        self._url_map = {**self._url_map, **value}

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                follow_redirects=True, max_redirects=self.max_redirects,
                headers={'User-Agent': USER_AGENT}
            )
        return self._http

    async def aclose(self):
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.aclose()

    def location_forecast(self, args, callback: Optional[Callback] = None):
        """Weather forecast for a place.

        ``args`` is ``{'latitude': ..., 'longitude': ...}`` or the pair
        ``(latitude, longitude)``.  Query the result like this::

            meta = yr.location_forecast((60.39, 5.32))
            now = meta.find_next_sibling('product').find('time')
            temperature = now.find('temperature')
            print(temperature['value'], temperature['unit'])
        """

        try:
            args = LocationForecastArgs.coerce(args)
        except ValidationError as error:
            if callback is None:
                raise
            callback(str(error), None)
            return self

        return self._run_request(
            self.url_for('location_forecast', [
                ('lon', args.longitude),
                ('lat', args.latitude),
            ]),
            callback
        )

    def text_forecast(self, args=None, callback: Optional[Callback] = None):
        """Textual forecast for all parts of the country.

        ``args`` defaults to ``{'forecast': 'land', 'language': 'nb'}``::

            first = yr.text_forecast()
            today = first.parent.find('time')
            hordaland = today.select_one('area[name="Hordaland"]')
            print(hordaland.find('in').get_text())
        """

        if callback is None and callable(args):
            args, callback = None, args

        args = TextForecastArgs.coerce(args)

        return self._run_request(
            self.url_for('text_forecast', [
                ('forecast', args.forecast),
                ('language', args.language),
            ]),
            callback
        )

    def url_for(self, operation: str,
        query_params: Iterable[Tuple[str, Any]] = ()
    ) -> httpx.URL:
        try:
            base = self._url_map[operation]
        except KeyError:
            raise InvalidOperationError(operation) from None

        return httpx.URL(base, params=list(query_params))

    async def fetch(self, url) -> Optional[Tag]:
        log.debug("GET %s", url)
        try:
            response = await self.http.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            status = error.response.status_code
            log.warning("GET %s returned %s", url, status)
            raise NetworkError(
                f"{status} {error.response.reason_phrase}".strip(),
                status_code=status
            ) from error
        except httpx.HTTPError as error:
            log.warning("GET %s failed: %r", url, error)
            raise NetworkError(str(error) or type(error).__name__) from error

        log.debug("GET %s returned %s", url, response.status_code)
        return first_child(BeautifulSoup(response.content, features='xml'))

    def _loop(self):
        return self.loop or _running_loop() or singleton()

    def _dispatch(self, loop, url,
        done: Callable[[Optional[NetworkError], Optional[Tag]], Any]
    ):
        async def request():
            try:
                dom = await self.fetch(url)
            except NetworkError as error:
                done(error, None)
            except Exception as error:
                log.warning("GET %s failed: %r", url, error)
                done(NetworkError(str(error) or type(error).__name__), None)
            else:
                done(None, dom)

        if loop.is_running() and _running_loop() is not loop:
            pending = run_coroutine_threadsafe(request(), loop)
        else:
            pending = loop.create_task(request())
        self._pending.add(pending)
        pending.add_done_callback(self._pending.discard)
        return pending

    def _run_request(self, url, callback: Optional[Callback] = None):
        loop = self._loop()

        if callback is not None:
            def done(error, dom):
                if error is not None:
                    callback(str(error), None)
                else:
                    callback('', dom)

            self._dispatch(loop, url, done)
            return self

        if _running_loop() is loop:
            raise RuntimeError(
                "Cannot wait for a response inside the running event loop; "
                "pass a callback or await fetch() instead"
            )

        waiter: concurrent.futures.Future = concurrent.futures.Future()

        def resolve(error, dom):
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(dom)

        self._dispatch(loop, url, resolve).add_done_callback(
            lambda pending: _propagate(pending, waiter)
        )
        if not loop.is_running():
            loop.run_until_complete(wrap_future(waiter, loop=loop))
        return waiter.result()
