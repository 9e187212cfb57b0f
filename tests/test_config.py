import json
from datetime import datetime, timezone

import pytest

from trackfinder.config import FilterSet, load_user_directory, parse_date, resolve_user_id


def write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_filters_file(tmp_path):
    path = write(
        tmp_path / "filters.json",
        {
            "query": "Wadi",
            "userDisplayName": "dana",
            "minGrade": 4,
            "minReviews": 2,
            "difficultyLevels": [3, 5],
            "minDistance": 20,
            "maxDistance": 60,
            "minDate": "2018-01-01T00:00:00",
            "geoArea": "NEGEV_NORTH",
        },
    )

    filters = FilterSet.load(path)

    assert filters == FilterSet(
        query="Wadi",
        user_display_name="dana",
        min_grade=4,
        min_reviews=2,
        difficulty_levels=frozenset({3, 5}),
        min_distance=20,
        max_distance=60,
        min_date=datetime(2018, 1, 1, tzinfo=timezone.utc),
        geo_area="NEGEV_NORTH",
    )


def test_missing_file_disables_all_filters(tmp_path):
    assert FilterSet.load(tmp_path / "nope.json") == FilterSet()


def test_broken_file_is_rejected(tmp_path):
    path = tmp_path / "filters.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="filters.json"):
        FilterSet.load(path)


def test_unknown_key_is_skipped_and_other_filters_kept(tmp_path, caplog):
    path = write(tmp_path / "filters.json", {"geoArea": "NEGEV_NORTH", "difficultyLevels": [5], "maxDistanse": 60})

    filters = FilterSet.load(path)

    assert filters == FilterSet(geo_area="NEGEV_NORTH", difficulty_levels=frozenset({5}))
    assert "Ignoring unknown filter 'maxDistanse'" in caplog.text


def test_legacy_reviews_key_is_accepted(tmp_path):
    path = write(tmp_path / "filters.json", {"geoArea": "NEGEV_NORTH", "difficultyLevels": [5], "minReviws": 2})

    assert FilterSet.load(path) == FilterSet(geo_area="NEGEV_NORTH", difficulty_levels=frozenset({5}), min_reviews=2)


@pytest.mark.parametrize(
    "data",
    [
        {"minDate": "not a date"},
        {"minGrade": "four"},
        {"minReviews": 2.5},
        {"difficultyLevels": "3,5"},
        {"difficultyLevels": [3, "hard"]},
        {"geoArea": 7},
    ],
)
def test_invalid_value_is_rejected(tmp_path, data):
    path = write(tmp_path / "filters.json", data)

    with pytest.raises(ValueError, match="invalid value for filter"):
        FilterSet.load(path)


def test_filters_must_be_an_object(tmp_path):
    with pytest.raises(ValueError):
        FilterSet.load(write(tmp_path / "filters.json", [1, 2]))


def test_null_values_disable_filters():
    filters = FilterSet.from_dict(
        {"query": None, "difficultyLevels": None, "minDate": None, "geoArea": "", "adventureUserId": 42}
    )

    assert filters.query == ""
    assert filters.difficulty_levels == frozenset()
    assert filters.min_date is None
    assert filters.geo_area is None
    assert filters.adventure_user_id == "42"


def test_overrides_skip_none():
    base = FilterSet(min_grade=4, geo_area="NEGEV_NORTH")

    updated = base.with_overrides(min_grade=None, geo_area="NEGEV_CENTER_MACHTESHIM", difficulty_levels=[1])

    assert updated.min_grade == 4
    assert updated.geo_area == "NEGEV_CENTER_MACHTESHIM"
    assert updated.difficulty_levels == frozenset({1})
    assert base.geo_area == "NEGEV_NORTH"


def test_parse_date_keeps_explicit_offset():
    assert parse_date("2020-05-01T03:00:00+03:00") == datetime(2020, 5, 1, tzinfo=timezone.utc)
    assert parse_date("2020-05-01") == datetime(2020, 5, 1, tzinfo=timezone.utc)


def test_resolve_user_id(tmp_path):
    path = write(
        tmp_path / "users.json",
        [{"ownerDisplayName": "dana", "myAdventureUserId": 123}, {"ownerDisplayName": "noa", "myAdventureUserId": "456"}],
    )
    users = load_user_directory(path)

    assert resolve_user_id(users, "dana") == "123"
    assert resolve_user_id(users, "noa") == "456"
    assert resolve_user_id(users, "someone else") is None
    assert resolve_user_id(users, None) is None


def test_user_directory_must_be_a_list(tmp_path):
    assert load_user_directory(write(tmp_path / "users.json", {"dana": 1})) == []
    assert load_user_directory(tmp_path / "missing.json") == []
