import math

import numpy as np
import pytest

from common.exceptions import InvalidArgumentError
from recommenders.orchestrator import recommend, resolve_config

FULL_POOL = ["m1", "m2", "m3", "m4", "m5", "m6"]


def _ids(recommendations):
    return [rec["candidate_id"] for rec in recommendations]


class TestRecommendScenarios:
    """Reference scenarios for the hybrid blender"""

    def test_only_uninteracted_candidate_returned(self, scenario_interactions):
        context = {"interactions": scenario_interactions, "item_features": {}}
        result = recommend(context, "u1", ["i1", "i2", "i3"], 1, 0, 2)

        assert len(result) <= 1
        assert _ids(result) == ["i3"]
        assert result[0]["blended_score"] == pytest.approx(2.0 / 5.0)

    def test_cold_start_actor_scores_zero_in_id_order(self, movie_context):
        result = recommend(movie_context, "zoe", ["m3", "m1", "m2"], 0.7, 0.3, 10)

        assert _ids(result) == ["m1", "m2", "m3"]
        assert all(rec["blended_score"] == 0.0 for rec in result)
        assert all(rec["source_breakdown"] == {"collaborative": 0.0, "content": 0.0} for rec in result)


class TestRecommendRanking:
    """Unit tests for blending, ordering and truncation"""

    def test_collaborative_only(self, movie_context):
        result = recommend(movie_context, "alice", FULL_POOL, 1.0, 0.0, 10, config={"k": 2})

        assert set(_ids(result)[:2]) == {"m3", "m4"}
        assert _ids(result)[2:] == ["m5", "m6"]
        assert [rec["blended_score"] for rec in result] == pytest.approx([1.0, 1.0, 0.8, 0.0])

    def test_content_only(self, movie_context):
        result = recommend(movie_context, "alice", FULL_POOL, 0.0, 1.0, 10)

        assert _ids(result) == ["m3", "m6", "m4", "m5"]
        assert result[2]["blended_score"] == 0.0

    def test_blended_score_is_weighted_sum(self, movie_context):
        result = recommend(movie_context, "alice", FULL_POOL, 0.6, 0.9, 10, config={"k": 2})

        for rec in result:
            breakdown = rec["source_breakdown"]
            assert 0.0 <= breakdown["collaborative"] <= 1.0
            assert 0.0 <= breakdown["content"] <= 1.0
            assert rec["blended_score"] == pytest.approx(0.6 * breakdown["collaborative"] + 0.9 * breakdown["content"])

    def test_sorted_descending_with_id_tiebreak(self, movie_context):
        result = recommend(movie_context, "alice", FULL_POOL, 0.5, 0.5, 10)
        keys = [(-rec["blended_score"], rec["candidate_id"]) for rec in result]

        assert keys == sorted(keys)

    def test_truncates_to_top_n(self, movie_context):
        assert len(recommend(movie_context, "alice", FULL_POOL, 0.5, 0.5, 2)) == 2

    def test_top_n_zero(self, movie_context):
        assert recommend(movie_context, "alice", FULL_POOL, 0.5, 0.5, 0) == []

    def test_empty_pool(self, movie_context):
        assert recommend(movie_context, "alice", [], 0.5, 0.5, 5) == []

    def test_empty_interactions(self, movie_features):
        context = {"interactions": [], "item_features": movie_features}
        result = recommend(context, "alice", ["m2", "m1"], 0.5, 0.5, 5)

        assert _ids(result) == ["m1", "m2"]
        assert all(rec["blended_score"] == 0.0 for rec in result)

    def test_duplicate_candidates_scored_once(self, movie_context):
        result = recommend(movie_context, "alice", ["m3", "m3", "m4"], 0.5, 0.5, 10)
        assert sorted(_ids(result)) == ["m3", "m4"]

    def test_weights_need_not_sum_to_one(self, movie_context):
        base = recommend(movie_context, "alice", FULL_POOL, 0.5, 0.5, 10)
        doubled = recommend(movie_context, "alice", FULL_POOL, 1.0, 1.0, 10)

        assert _ids(base) == _ids(doubled)
        assert [rec["blended_score"] for rec in doubled] == pytest.approx([2 * rec["blended_score"] for rec in base])


class TestRecommendInvariants:
    def test_deterministic(self, movie_context):
        first = recommend(movie_context, "alice", FULL_POOL, 0.4, 0.6, 10)
        second = recommend(movie_context, "alice", FULL_POOL, 0.4, 0.6, 10)
        assert first == second

    @pytest.mark.parametrize("actor", ["alice", "bob", "carol", "dave"])
    def test_interacted_items_excluded(self, movie_context, movie_interactions, actor):
        interacted = {target for a, target, _ in movie_interactions if a == actor}
        result = recommend(movie_context, actor, FULL_POOL, 0.5, 0.5, 10)

        assert not interacted & set(_ids(result))

    def test_exclusion_can_be_disabled(self, movie_context):
        result = recommend(movie_context, "alice", FULL_POOL, 0.5, 0.5, 10, config={"exclude_interacted": False})
        assert {"m1", "m2"} <= set(_ids(result))

    def test_collaborative_weight_monotonicity(self, movie_context):
        # m4: collaborative evidence from carol, no content overlap with alice's profile
        ranks = []
        for weight in [0.0, 0.5, 1.0, 2.0]:
            result = recommend(movie_context, "alice", FULL_POOL, weight, 1.0, 10, config={"k": 2})
            m4 = next(rec for rec in result if rec["candidate_id"] == "m4")
            assert m4["source_breakdown"]["collaborative"] > m4["source_breakdown"]["content"]
            ranks.append(_ids(result).index("m4"))

        assert ranks == sorted(ranks, reverse=True)
        assert ranks[0] > ranks[-1]

    def test_does_not_mutate_inputs(self, movie_context, movie_interactions, movie_features):
        pool = list(FULL_POOL)
        interactions_snapshot = list(movie_interactions)
        features_snapshot = {key: dict(value) for key, value in movie_features.items()}

        recommend(movie_context, "alice", pool, 0.5, 0.5, 10)

        assert pool == FULL_POOL
        assert movie_interactions == interactions_snapshot
        assert movie_features == features_snapshot


class TestRecommendValidation:
    @pytest.mark.parametrize("weights", [(-0.1, 0.5), (0.5, -1), (math.nan, 0.5), (0.5, math.inf), ("1", 0.5)])
    def test_invalid_weights_raise(self, movie_context, weights):
        with pytest.raises(InvalidArgumentError):
            recommend(movie_context, "alice", FULL_POOL, weights[0], weights[1], 5)

    def test_invalid_weights_raise_even_for_empty_pool(self, movie_context):
        with pytest.raises(InvalidArgumentError):
            recommend(movie_context, "alice", [], -1.0, 0.5, 5)

    @pytest.mark.parametrize("top_n", [-1, 2.5])
    def test_invalid_top_n_raises(self, movie_context, top_n):
        with pytest.raises(InvalidArgumentError):
            recommend(movie_context, "alice", FULL_POOL, 0.5, 0.5, top_n)

    @pytest.mark.parametrize("top_n", [np.int64(2), np.int32(2)])
    def test_numpy_integer_top_n(self, movie_context, top_n):
        assert len(recommend(movie_context, "alice", FULL_POOL, 0.5, 0.5, top_n)) == 2

    @pytest.mark.parametrize(
        "config",
        [{"mode": "session"}, {"metric": "pearson"}, {"norm": "softmax"}, {"k": 0}, {"max_score": 0}],
    )
    def test_invalid_config_raises(self, config):
        with pytest.raises(InvalidArgumentError):
            resolve_config(config)


class TestRecommendOptions:
    def test_item_mode(self, movie_context):
        result = recommend(movie_context, "alice", FULL_POOL, 1.0, 0.0, 10, config={"mode": "item"})

        assert set(_ids(result)) == {"m3", "m4", "m5", "m6"}
        assert all(0.0 <= rec["source_breakdown"]["collaborative"] <= 1.0 for rec in result)

    def test_precomputed_actor_features(self, movie_context):
        context = {**movie_context, "actor_features": {"zoe": {"drama": 1.0}}}
        result = recommend(context, "zoe", FULL_POOL, 0.0, 1.0, 2)

        assert _ids(result) == ["m5", "m4"]

    def test_seed_items_for_cold_actor(self, movie_context):
        context = {**movie_context, "seed_item_ids": {"zoe": ["m6"]}}
        result = recommend(context, "zoe", FULL_POOL, 0.0, 1.0, 2)

        assert _ids(result) == ["m6", "m1"]

    def test_fills_similarity_cache(self, movie_context):
        cache = {}
        context = {**movie_context, "similarity_cache": cache}
        first = recommend(context, "alice", FULL_POOL, 0.5, 0.5, 10)
        second = recommend(context, "alice", FULL_POOL, 0.5, 0.5, 10)

        assert frozenset(("alice", "bob")) in cache
        assert first == second

    def test_minmax_norm(self, movie_context):
        result = recommend(movie_context, "alice", ["m5", "m6"], 1.0, 0.0, 10, config={"k": 2, "norm": "minmax"})

        assert result[0]["candidate_id"] == "m5"
        assert result[0]["source_breakdown"]["collaborative"] == pytest.approx(1.0)

    def test_max_score(self, scenario_interactions):
        context = {"interactions": scenario_interactions}
        result = recommend(context, "u1", ["i3"], 1.0, 0.0, 1, config={"max_score": 2.0})

        assert result[0]["blended_score"] == pytest.approx(1.0)
