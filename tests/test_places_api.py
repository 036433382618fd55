from unittest.mock import patch
from urllib.parse import parse_qs

import httpx

from app.enrichment.image_cache import ImageCache
from app.enrichment.image_resolver import ImageResolver
from app.routers import places as places_router
from app.services.geoapify_client import GeoapifyClient
from app.services.overpass_client import OverpassClient
from app.services.places_pipeline import PlacesPipeline

from conftest import overpass_element


class StubUpstream:
    """Records calls and answers every request with a fixed response."""

    def __init__(self, response):
        self.response = response
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return self.response


def _pipeline(overpass=None, geoapify=None, geoapify_key=None):
    searcher = GeoapifyClient(transport=httpx.MockTransport(geoapify) if geoapify else None)
    searcher.api_key = geoapify_key
    return PlacesPipeline(
        fetcher=OverpassClient(transport=httpx.MockTransport(overpass) if overpass else None),
        searcher=searcher,
        resolver=ImageResolver(providers=[], cache=ImageCache(capacity=16)),
    )


def test_temple_category_end_to_end(client):
    upstream = StubUpstream(
        httpx.Response(
            200,
            json={
                "elements": [
                    overpass_element(
                        101,
                        {"name": "Meenakshi Amman Temple", "amenity": "place_of_worship"},
                        lat=9.9195,
                        lon=78.1193,
                    )
                ]
            },
        )
    )

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=upstream)):
        resp = client.get("/api/places", params={"category": "temple"})

    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    place = data[0]
    assert place["category"] == "temple"
    assert "Culture" in place["tags"]
    assert place["imageUrl"]
    assert place["externalId"] == "overpass-node-101"
    assert place["coordinates"] == {"lon": 78.1193, "lat": 9.9195}
    assert upstream.calls == 1


def test_listing_drops_incomplete_records_and_keeps_order(client):
    upstream = StubUpstream(
        httpx.Response(
            200,
            json={
                "elements": [
                    overpass_element(1, {"name": "Marina Beach", "natural": "beach"}),
                    overpass_element(2, {"natural": "beach"}),
                    overpass_element(3, {"name": "Elephant Camp", "attraction": "animal"}),
                ]
            },
        )
    )

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=upstream)):
        resp = client.get("/api/places")

    assert resp.status_code == 200
    data = resp.json()
    assert [p["name"] for p in data] == ["Marina Beach", "Elephant Camp"]
    assert data[1]["category"] == "other"
    assert data[1]["tags"] == ["Wildlife"]


def test_unknown_category_is_400_without_upstream_call(client):
    upstream = StubUpstream(httpx.Response(200, json={"elements": []}))

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=upstream)):
        resp = client.get("/api/places", params={"category": "bogus"})

    assert resp.status_code == 400
    assert "error" in resp.json()
    assert upstream.calls == 0


def test_upstream_error_status_is_502(client):
    upstream = StubUpstream(httpx.Response(503, text="busy"))

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=upstream)):
        resp = client.get("/api/places", params={"category": "beach"})

    assert resp.status_code == 502
    assert list(resp.json().keys()) == ["error"]


def test_malformed_upstream_payload_is_500(client):
    upstream = StubUpstream(httpx.Response(200, json={"remark": "no elements here"}))

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=upstream)):
        resp = client.get("/api/places")

    assert resp.status_code == 500
    assert "error" in resp.json()


def test_empty_result_is_empty_array(client):
    upstream = StubUpstream(httpx.Response(200, json={"elements": []}))

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=upstream)):
        resp = client.get("/api/places", params={"category": "waterfall"})

    assert resp.status_code == 200
    assert resp.json() == []


def test_search_uses_geoapify_osm_tags(client):
    upstream = StubUpstream(
        httpx.Response(
            200,
            json={
                "features": [
                    {
                        "properties": {
                            "name": "Marina Beach",
                            "lat": 13.05,
                            "lon": 80.28,
                            "place_id": "abc123",
                            "formatted": "Marina Beach, Chennai, Tamil Nadu",
                            "datasource": {"raw": {"natural": "beach", "osm_id": 42}},
                        }
                    }
                ]
            },
        )
    )

    pipeline = _pipeline(geoapify=upstream, geoapify_key="geo-key")
    with patch.object(places_router, "places_pipeline", pipeline):
        resp = client.get("/api/places/search", params={"query": "marina"})

    assert resp.status_code == 200
    place = resp.json()[0]
    assert place["category"] == "beach"
    assert place["tags"] == ["Relaxation"]
    assert place["address"] == "Marina Beach, Chennai, Tamil Nadu"
    assert place["externalId"] == "geoapify-abc123"


def test_search_requires_query(client):
    with patch.object(places_router, "places_pipeline", _pipeline(geoapify_key="geo-key")):
        resp = client.get("/api/places/search")
    assert resp.status_code == 400


def test_search_without_key_is_502(client):
    upstream = StubUpstream(httpx.Response(200, json={"features": []}))

    with patch.object(places_router, "places_pipeline", _pipeline(geoapify=upstream)):
        resp = client.get("/api/places/search", params={"query": "ooty"})

    assert resp.status_code == 502
    assert upstream.calls == 0


def test_listing_near_a_point_uses_an_around_circle(client):
    queries = []

    def overpass(request: httpx.Request) -> httpx.Response:
        queries.append(parse_qs(request.content.decode())["data"][0])
        return httpx.Response(
            200, json={"elements": [overpass_element(7, {"name": "Kapaleeshwarar Temple", "amenity": "place_of_worship"})]}
        )

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=overpass)):
        resp = client.get("/api/places", params={"category": "temple", "lat": "13.0339", "lon": "80.2697"})

    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["Kapaleeshwarar Temple"]
    assert "(around:50000,13.0339,80.2697);" in queries[0]
    assert "8.0,76.0,13.5,80.3" not in queries[0]


def test_listing_near_a_point_honours_radius(client):
    queries = []

    def overpass(request: httpx.Request) -> httpx.Response:
        queries.append(parse_qs(request.content.decode())["data"][0])
        return httpx.Response(200, json={"elements": []})

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=overpass)):
        resp = client.get("/api/places", params={"lat": "11.41", "lon": "76.70", "radius": "5000"})

    assert resp.status_code == 200
    assert "(around:5000,11.41,76.7);" in queries[0]


def test_bad_near_parameters_are_400_without_upstream_call(client):
    upstream = StubUpstream(httpx.Response(200, json={"elements": []}))

    with patch.object(places_router, "places_pipeline", _pipeline(overpass=upstream)):
        lone_lat = client.get("/api/places", params={"lat": "13.05"})
        out_of_range = client.get("/api/places", params={"lat": "95", "lon": "80.2"})
        not_a_number = client.get("/api/places", params={"lat": "north", "lon": "80.2"})
        huge_radius = client.get("/api/places", params={"lat": "13.0", "lon": "80.2", "radius": "900000"})

    for resp in (lone_lat, out_of_range, not_a_number, huge_radius):
        assert resp.status_code == 400
        assert "error" in resp.json()
    assert upstream.calls == 0


def test_search_near_a_point_uses_a_circle_filter(client):
    seen = []

    def geoapify(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.params)
        return httpx.Response(200, json={"features": []})

    pipeline = _pipeline(geoapify=geoapify, geoapify_key="geo-key")
    with patch.object(places_router, "places_pipeline", pipeline):
        resp = client.get("/api/places/search", params={"query": "falls", "lat": "11.35", "lon": "77.15"})

    assert resp.status_code == 200
    assert seen[0]["filter"] == "circle:77.15,11.35,50000"
    assert seen[0]["bias"] == "proximity:77.15,11.35"
