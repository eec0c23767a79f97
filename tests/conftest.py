import pytest


@pytest.fixture
def scenario_interactions():
    """Ratings from the reference scenario: u2 overlaps u1 on i1, i2 and also rated i3."""
    return [
        ("u1", "i1", 5.0),
        ("u1", "i2", 3.0),
        ("u2", "i1", 4.0),
        ("u2", "i2", 5.0),
        ("u2", "i3", 2.0),
    ]


@pytest.fixture
def movie_interactions():
    return [
        ("alice", "m1", 5.0),
        ("alice", "m2", 4.0),
        ("bob", "m1", 5.0),
        ("bob", "m2", 4.0),
        ("bob", "m3", 5.0),
        ("carol", "m1", 1.0),
        ("carol", "m4", 5.0),
        ("carol", "m5", 4.0),
        ("dave", "m4", 4.0),
        ("dave", "m5", 5.0),
    ]


@pytest.fixture
def movie_features():
    return {
        "m1": {"action": 1.0, "sci-fi": 1.0},
        "m2": {"action": 1.0, "thriller": 1.0},
        "m3": {"action": 1.0, "sci-fi": 1.0},
        "m4": {"drama": 1.0, "romance": 1.0},
        "m5": {"drama": 1.0},
        "m6": {"sci-fi": 1.0},
    }


@pytest.fixture
def movie_context(movie_interactions, movie_features):
    return {"interactions": movie_interactions, "item_features": movie_features}
