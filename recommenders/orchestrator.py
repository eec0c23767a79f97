"""
Hybrid blender that coordinates collaborative and content-based scoring.
Both sources are scored per candidate, blended with caller-supplied weights,
then ranked and truncated to top-N.

Blended scores are only comparable within one blend configuration: the
weights are not required to sum to 1.
"""

import math
from numbers import Integral, Real
from typing import List, Optional, Sequence

import numpy as np

from common.constants import PATHS, RECOMMEND
from common.exceptions import InvalidArgumentError
from common.helpers import normalize_scores
from common.utils import setup_logging

from .collaborative import MODES, build_rating_vectors, get_collaborative_scores
from .content_based import build_actor_profile, get_content_scores
from .data_models import EntityId, Recommendation, RecommendationConfig, RecommendationContext
from .similarity import METRICS

logger = setup_logging(__name__, PATHS["app_log_file"])

NORMS = ("scale", "minmax", "zscore")


def _validate_weight(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value) or value < 0:
        raise InvalidArgumentError(f"{name} must be a finite non-negative number, got {value!r}")
    return float(value)


def resolve_config(config: Optional[RecommendationConfig] = None) -> RecommendationConfig:
    """Merge per-call overrides onto RECOMMEND defaults and validate them."""
    resolved: RecommendationConfig = {**RECOMMEND, **(config or {})}

    if resolved["mode"] not in MODES:
        raise InvalidArgumentError(f"Unknown mode: {resolved['mode']!r} (expected one of {MODES})")
    if resolved["metric"] not in METRICS:
        raise InvalidArgumentError(f"Unknown similarity metric: {resolved['metric']!r} (expected one of {METRICS})")
    if resolved["norm"] not in NORMS:
        raise InvalidArgumentError(f"Unknown normalization: {resolved['norm']!r} (expected one of {NORMS})")
    if resolved["k"] < 1:
        raise InvalidArgumentError(f"k must be at least 1, got {resolved['k']}")
    if not resolved["max_score"] > 0:
        raise InvalidArgumentError(f"max_score must be positive, got {resolved['max_score']}")
    return resolved


def _unique(candidate_pool: Sequence[EntityId]) -> List[EntityId]:
    seen = set()
    unique = []
    for candidate_id in candidate_pool:
        if candidate_id not in seen:
            seen.add(candidate_id)
            unique.append(candidate_id)
    return unique


def recommend(
    context: RecommendationContext,
    target_actor: EntityId,
    candidate_pool: Sequence[EntityId],
    collaborative_weight: float,
    content_weight: float,
    top_n: int,
    config: Optional[RecommendationConfig] = None,
) -> List[Recommendation]:
    """
    Generate ranked recommendations for one actor.

    - collaborative score: neighborhood prediction scaled into [0, 1]
    - content score: cosine similarity between actor profile and candidate features
    - blended = collaborative_weight * collaborative + content_weight * content

    Ordering is blended score descending, candidate id ascending. Candidates the
    actor already interacted with are skipped unless config["exclude_interacted"]
    is False. A cold-start actor gets every candidate at 0.0, ordered by id.
    """
    collaborative_weight = _validate_weight("collaborative_weight", collaborative_weight)
    content_weight = _validate_weight("content_weight", content_weight)
    if isinstance(top_n, bool) or not isinstance(top_n, Integral) or top_n < 0:
        raise InvalidArgumentError(f"top_n must be a non-negative integer, got {top_n!r}")
    config = resolve_config(config)

    logger.info(
        f"actor={target_actor}, pool={len(candidate_pool)}, w_cf={collaborative_weight}, "
        f"w_content={content_weight}, top_n={top_n}, mode={config['mode']}"
    )

    if top_n == 0 or len(candidate_pool) == 0:
        logger.info("Empty candidate pool or top_n=0, nothing to rank")
        return []

    interactions = context.get("interactions", [])
    item_features = context.get("item_features", {})

    # ===================================================================
    # Candidate filtering
    # ===================================================================
    candidates = _unique(candidate_pool)
    if config["exclude_interacted"]:
        interacted = build_rating_vectors(
            interactions, axis="user", duplicate_policy=config["duplicate_policy"]
        ).get(target_actor, {})
        candidates = [c for c in candidates if c not in interacted]
        logger.info(f"Excluding {len(interacted)} interacted items, {len(candidates)} candidates left")

    if not candidates:
        logger.info("No candidates available")
        return []

    # ===================================================================
    # Collaborative scores
    # ===================================================================
    raw_cf = get_collaborative_scores(
        target_actor,
        candidates,
        interactions,
        k=config["k"],
        mode=config["mode"],
        metric=config["metric"],
        similarity_cache=context.get("similarity_cache"),
        duplicate_policy=config["duplicate_policy"],
    )
    cf_scores = normalize_scores(
        np.array([raw_cf[c] for c in candidates], dtype=np.float64), config["norm"], config["max_score"]
    )

    # ===================================================================
    # Content scores
    # ===================================================================
    profile = context.get("actor_features", {}).get(target_actor)
    if not profile:
        profile = build_actor_profile(
            target_actor,
            interactions,
            item_features,
            duplicate_policy=config["duplicate_policy"],
            seed_item_ids=context.get("seed_item_ids", {}).get(target_actor),
        )
    content_scores = get_content_scores(profile, candidates, item_features)

    # ===================================================================
    # Blend and rank
    # ===================================================================
    recommendations: List[Recommendation] = []
    for candidate_id, cf_score in zip(candidates, cf_scores):
        cf_score = float(cf_score)
        content_score = content_scores[candidate_id]
        recommendations.append(
            {
                "candidate_id": candidate_id,
                "blended_score": collaborative_weight * cf_score + content_weight * content_score,
                "source_breakdown": {"collaborative": cf_score, "content": content_score},
            }
        )

    recommendations.sort(key=lambda rec: (-rec["blended_score"], rec["candidate_id"]))
    recommendations = recommendations[:top_n]

    logger.info(f"Final results: {len(recommendations)} items")
    if recommendations:
        logger.info(f"Top scores: {[round(r['blended_score'], 4) for r in recommendations[:3]]}")
    return recommendations
