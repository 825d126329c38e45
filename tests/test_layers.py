import logging

import requests

from layers import fetch_geojson, geojson_to_paths, load_base_layer
from scene import PLATE_BOUNDARIES

GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {"geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}},
        {
            "geometry": {
                "type": "MultiPolygon",
                "coordinates": [[[[10, 10], [11, 10], [11, 11], [10, 10]]]],
            }
        },
        {"geometry": {"type": "Point", "coordinates": [5, 5]}},
        {"geometry": None},
    ],
}


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def test_geojson_to_paths_breaks_between_parts():
    lons, lats = geojson_to_paths(GEOJSON)
    assert lons == [0.0, 1.0, None, 10.0, 11.0, 11.0, 10.0, None]
    assert lats == [0.0, 1.0, None, 10.0, 10.0, 11.0, 10.0, None]


def test_fetch_geojson_queries_feature_service(monkeypatch):
    calls = {}

    def fake_get(url, params=None, timeout=None):
        calls["url"] = url
        calls["params"] = params
        return FakeResponse(GEOJSON)

    monkeypatch.setattr(requests, "get", fake_get)
    fetch_geojson("https://example.org/FeatureServer/0/", timeout=5)
    assert calls["url"] == "https://example.org/FeatureServer/0/query"
    assert calls["params"]["f"] == "geojson"


def test_fetch_geojson_reads_plain_files(monkeypatch):
    calls = {}

    def fake_get(url, timeout=None, **kwargs):
        calls["url"] = url
        calls["kwargs"] = kwargs
        return FakeResponse(GEOJSON)

    monkeypatch.setattr(requests, "get", fake_get)
    fetch_geojson("https://example.org/plates.geojson")
    assert calls["url"] == "https://example.org/plates.geojson"
    assert calls["kwargs"] == {}


def test_load_base_layer_success(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(GEOJSON))
    layer = load_base_layer(PLATE_BOUNDARIES)
    assert not layer.empty
    assert layer.config is PLATE_BOUNDARIES


def test_load_base_layer_logs_http_failure(monkeypatch, caplog):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse({}, status=503))
    with caplog.at_level(logging.ERROR):
        layer = load_base_layer(PLATE_BOUNDARIES)
    assert layer.empty
    assert "Failed to load base layer Plate boundaries" in caplog.text


def test_load_base_layer_logs_service_error(monkeypatch, caplog):
    monkeypatch.setattr(
        requests, "get", lambda *args, **kwargs: FakeResponse({"error": {"code": 400}})
    )
    with caplog.at_level(logging.ERROR):
        layer = load_base_layer(PLATE_BOUNDARIES)
    assert layer.empty


def test_load_base_layer_logs_network_failure(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", boom)
    assert load_base_layer(PLATE_BOUNDARIES).empty
