import json

import httpx
import pytest

from haulops.errors import GeocodingError
from haulops.models.domain import Coordinate
from haulops.services.routing.geocoding import PostcodesIOClient


def _client(handler, **kwargs) -> PostcodesIOClient:
    return PostcodesIOClient(base_url="https://geo.test", transport=httpx.MockTransport(handler), **kwargs)


def test_resolve_sends_one_bulk_request_and_marks_not_found():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = json.loads(request.content)
        assert body == {"postcodes": ["WN50LR", "ZZ99ZZ"]}
        return httpx.Response(
            200,
            json={
                "status": 200,
                "result": [
                    {"query": "WN5 0LR", "result": {"latitude": 53.54, "longitude": -2.68}},
                    {"query": "ZZ99ZZ", "result": None},
                ],
            },
        )

    results = _client(handler).resolve(["wn5 0lr", "WN50LR", "ZZ99ZZ"])

    assert len(requests) == 1
    assert str(requests[0].url) == "https://geo.test/postcodes"
    assert results == {"WN50LR": Coordinate(53.54, -2.68), "ZZ99ZZ": None}


def test_resolve_never_omits_a_submitted_key():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"status": 200, "result": [{"query": "M11AE", "result": {"latitude": 53.47, "longitude": -2.23}}]},
        )

    results = _client(handler).resolve(["M11AE", "B338TH"])

    assert set(results) == {"M11AE", "B338TH"}
    assert results["B338TH"] is None


def test_resolve_splits_batches_over_the_limit():
    sizes = []

    def handler(request: httpx.Request) -> httpx.Response:
        postcodes = json.loads(request.content)["postcodes"]
        sizes.append(len(postcodes))
        return httpx.Response(
            200,
            json={"result": [{"query": pc, "result": {"latitude": 51.0, "longitude": -1.0}} for pc in postcodes]},
        )

    results = _client(handler, batch_limit=2).resolve(["AA11AA", "BB11BB", "CC11CC"])

    assert sizes == [2, 1]
    assert all(results[key] is not None for key in results)


def test_resolve_empty_input_makes_no_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert _client(handler).resolve(["", "   "]) == {}


def test_error_status_raises_geocoding_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream exploded")

    with pytest.raises(GeocodingError, match=r"postcodes.io failed \(500\): upstream exploded"):
        _client(handler).resolve(["WN50LR"])


def test_malformed_payload_raises_geocoding_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": 200})

    with pytest.raises(GeocodingError):
        _client(handler).resolve(["WN50LR"])


def test_transport_failure_raises_geocoding_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GeocodingError, match="not reachable"):
        _client(handler).resolve(["WN50LR"])
