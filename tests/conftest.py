import pytest

# 2019-06-01T10:00:00Z
CREATED_MS = 1559383200000
# 2019-07-15T00:00:00Z
UPDATED_MS = 1563148800000
# 02:30:15
DURATION_MS = "9015000"


def make_primary(**overrides):
    track = {
        "id": "abc123",
        "title": "Wadi Track",
        "description": "Sandy descent to the wadi",
        "activityType": "OffRoading",
        "difficultyLevel": 3,
        "area": "NEGEV_NORTH",
        "distance": 42.7,
        "grade": 4.5,
        "reviews": 12,
        "created": CREATED_MS,
        "updated": UPDATED_MS,
        "duration": DURATION_MS,
        "ownerDisplayName": "dana",
    }
    track.update(overrides)
    return track


def make_legacy(**overrides):
    track = make_primary()
    del track["distance"]
    track["layersStatistics"] = {"distance": 35.2}
    track["shortDescription"] = "Short and sandy"
    track.update(overrides)
    return track


@pytest.fixture
def primary_track():
    return make_primary()


@pytest.fixture
def legacy_track():
    return make_legacy()
