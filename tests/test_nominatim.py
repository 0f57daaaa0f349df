"""Tests for the reverse geocoding client."""

import asyncio

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession
from weatherbot.errors import DataShapeError, TransportError
from weatherbot.weather import NominatimClient


def _client(*responses) -> NominatimClient:
    client = NominatimClient()
    client._session = FakeSession(*responses)
    return client


def test_resolve_suburb_returns_address_suburb():
    client = _client(FakeResponse(200, {"address": {"suburb": "Gohlis", "city": "Leipzig"}}))

    suburb = asyncio.run(client.resolve_suburb(51.3079, 12.3761))

    assert suburb == "Gohlis"
    call = client._session.calls[0]
    assert call["params"] == {"lat": 51.3079, "lon": 12.3761, "format": "json"}


def test_missing_suburb_is_data_shape_error():
    client = _client(FakeResponse(200, {"address": {"city": "Leipzig"}}))

    with pytest.raises(DataShapeError):
        asyncio.run(client.resolve_suburb(51.3, 12.3))


def test_error_response_without_address_is_data_shape_error():
    client = _client(FakeResponse(200, {"error": "Unable to geocode"}))

    with pytest.raises(DataShapeError):
        asyncio.run(client.resolve_suburb(0.0, 0.0))


def test_http_error_is_transport_error():
    client = _client(FakeResponse(403, text="blocked"))

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(client.resolve_suburb(51.3, 12.3))

    assert exc_info.value.status == 403


def test_network_error_is_transport_error():
    client = _client(aiohttp.ClientConnectionError("dns failure"))

    with pytest.raises(TransportError):
        asyncio.run(client.resolve_suburb(51.3, 12.3))


def test_timeout_is_transport_error():
    client = _client(asyncio.TimeoutError())

    with pytest.raises(TransportError):
        asyncio.run(client.resolve_suburb(51.3, 12.3))
