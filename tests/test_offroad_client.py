from unittest.mock import MagicMock

import pytest
import requests

from trackfinder.clients.offroad_client import (
    OffroadClient,
    UnexpectedResponseError,
    build_legacy_url,
    build_search_url,
    encode_uri,
)


def make_client(payload, status_error=None):
    session = MagicMock()
    response = MagicMock()
    response.json.return_value = payload
    if status_error:
        response.raise_for_status.side_effect = status_error
    session.get.return_value = response
    return OffroadClient(session=session), session


@pytest.fixture(autouse=True)
def clear_url_overrides(monkeypatch):
    for name in ("OFFROAD_SEARCH_URL", "OFFROAD_LEGACY_URL", "OFFROAD_BY_USER_URL"):
        monkeypatch.delenv(name, raising=False)


def test_search_url_appends_query():
    assert build_search_url("Red Canyon") == "https://tracks.off-road.io/v1/tracks?limit=200&query=Red Canyon"
    assert build_search_url(None).endswith("query=")


def test_legacy_url_with_all_levels_and_area():
    url = build_legacy_url([5, 1, 3], "NEGEV_NORTH")

    assert url == (
        "https://api.off-road.io/_ah/api/tracks/filter?activityType=OffRoading"
        "&diffLevel=easy,moderate,hard&area=NEGEV_NORTH"
    )


def test_legacy_url_without_filters():
    assert build_legacy_url() == "https://api.off-road.io/_ah/api/tracks/filter?activityType=OffRoading"


def test_legacy_url_with_unknown_level_only():
    assert build_legacy_url([2]).endswith("&diffLevel=")


def test_encode_uri_matches_javascript():
    assert encode_uri("https://x.io/a?q=Red Canyon&b=1,2") == "https://x.io/a?q=Red%20Canyon&b=1,2"
    assert encode_uri("https://x.io/?q=מכתש") == "https://x.io/?q=%D7%9E%D7%9B%D7%AA%D7%A9"


def test_search_tracks_unwraps_items():
    client, session = make_client({"items": [{"id": 1}, {"id": 2}]})

    assert client.search_tracks("a b") == [{"id": 1}, {"id": 2}]
    session.get.assert_called_once()
    assert session.get.call_args.args[0] == "https://tracks.off-road.io/v1/tracks?limit=200&query=a%20b"


def test_legacy_tracks_unwraps_nested_track():
    client, _ = make_client({"items": [{"track": {"id": 1}}, {"track": {"id": 2}}]})

    assert client.filter_legacy_tracks([3], "NEGEV_NORTH") == [{"id": 1}, {"id": 2}]


def test_tracks_by_user_unwraps_track_results():
    client, session = make_client({"userDisplayName": "dana", "trackResults": [{"track": {"id": 9}}]})

    assert client.get_tracks_by_user("42") == [{"id": 9}]
    assert session.get.call_args.args[0] == "https://api.off-road.io/_ah/api/offroadApi/v2/getMoreByUser/42"


def test_tracks_by_user_without_id_skips_request():
    client, session = make_client({})

    assert client.get_tracks_by_user(None) == []
    assert client.get_tracks_by_user("") == []
    session.get.assert_not_called()


def test_missing_envelope_raises():
    client, _ = make_client({"tracks": []})

    with pytest.raises(UnexpectedResponseError):
        client.search_tracks()


def test_item_without_track_raises():
    client, _ = make_client({"items": [{"id": 1}]})

    with pytest.raises(UnexpectedResponseError):
        client.filter_legacy_tracks()


def test_http_error_propagates():
    client, _ = make_client({}, status_error=requests.HTTPError("503 Server Error"))

    with pytest.raises(requests.HTTPError):
        client.search_tracks()


def test_base_url_override(monkeypatch):
    monkeypatch.setenv("OFFROAD_SEARCH_URL", "http://localhost:8000/tracks?query=")
    client, session = make_client({"items": []})

    client.search_tracks("x")

    assert session.get.call_args.args[0] == "http://localhost:8000/tracks?query=x"
