import asyncio

import httpx
from httpx import AsyncClient
import pytest

from yr import WeatherClient


LOCATION_XML = """<?xml version="1.0" encoding="utf-8"?>
<weatherdata created="2014-03-12T09:25:38Z">
  <meta>
    <model name="LOCAL" termin="2014-03-12T06:00:00Z" />
  </meta>
  <product class="pointData">
    <time datatype="forecast" from="2014-03-12T10:00:00Z" to="2014-03-12T10:00:00Z">
      <location altitude="10" latitude="60.3900" longitude="5.3200">
        <temperature id="TTT" unit="celsius" value="6.4"/>
        <windSpeed id="ff" mps="3.2" beaufort="2" name="Svak vind"/>
      </location>
    </time>
  </product>
</weatherdata>
""".encode()

TEXT_XML = """<?xml version="1.0" encoding="utf-8"?>
<textforecast>
  <time from="2014-03-12T00:00:00" to="2014-03-13T00:00:00">
    <forecasttype name="land">
      <area name="Hordaland" id="0503">
        <header>Vestlandet sør for Stad</header>
        <in>Sørvest frisk bris, regn.</in>
      </area>
      <area name="Rogaland" id="0502">
        <in>Vest laber bris, skyet.</in>
      </area>
    </forecasttype>
  </time>
</textforecast>
""".encode()


class Server:
    """Stands in for yr.no behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.status = 200
        self.body = LOCATION_XML
        self.error = None

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error(f"Cannot connect to {request.url.host}",
                             request=request)
        return httpx.Response(self.status, content=self.body)

    def http_client(self, **kwargs):
        return AsyncClient(transport=httpx.MockTransport(self), **kwargs)


@pytest.fixture
def server():
    return Server()


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def client(server, loop):
    return WeatherClient(http_client=server.http_client(), loop=loop)
