"""
Content-based scoring over feature vectors.
Actor profiles are synthesized from the features of items the actor interacted with.
"""

from typing import Dict, Iterable, Optional, Sequence

from common.constants import PATHS
from common.utils import setup_logging

from .collaborative import build_rating_vectors
from .data_models import EntityId, FeatureVector, InteractionLike
from .similarity import similarity

logger = setup_logging(__name__, PATHS["app_log_file"])


def build_actor_profile(
    actor_id: EntityId,
    interactions: Sequence[InteractionLike],
    item_features: Dict[EntityId, FeatureVector],
    duplicate_policy: str = "last",
    seed_item_ids: Optional[Iterable[EntityId]] = None,
    seed_boost: float = 1.0,
) -> FeatureVector:
    """
    Create an actor's feature profile from interaction history + seeds.

    Each interacted item's feature vector is weighted by the interaction score;
    seed items (onboarding picks) are weighted by seed_boost. Items without a
    feature vector are skipped.

    Returns:
        Weighted average feature vector, or {} when there is no usable history
    """
    ratings = build_rating_vectors(interactions, axis="user", duplicate_policy=duplicate_policy).get(actor_id, {})

    weighted_items = [(item_id, score) for item_id, score in ratings.items() if item_id in item_features]
    if seed_item_ids:
        weighted_items.extend((item_id, seed_boost) for item_id in seed_item_ids if item_id in item_features)

    profile: FeatureVector = {}
    total_weight = 0.0
    for item_id, weight in weighted_items:
        if weight <= 0:
            continue
        total_weight += weight
        for label, value in item_features[item_id].items():
            profile[label] = profile.get(label, 0.0) + weight * value

    if total_weight == 0:
        logger.debug(f"[CB] actor={actor_id} has no feature history, returning empty profile")
        return {}

    logger.debug(
        f"[CB] actor={actor_id} profile from {len(weighted_items)} items, "
        f"total weight={total_weight:.2f}, {len(profile)} labels"
    )
    return {label: value / total_weight for label, value in profile.items()}


def get_content_scores(
    profile: FeatureVector,
    candidate_ids: Iterable[EntityId],
    item_features: Dict[EntityId, FeatureVector],
    metric: str = "cosine",
) -> Dict[EntityId, float]:
    """Similarity between the actor profile and each candidate; missing features score 0.0."""
    scores = {
        candidate_id: similarity(profile, item_features.get(candidate_id, {}), metric)
        for candidate_id in candidate_ids
    }
    if scores:
        logger.debug(f"[CB] Scored {len(scores)} candidates, max={max(scores.values()):.4f}")
    return scores
