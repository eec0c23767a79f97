"""
Neighborhood collaborative filtering.
One generic predictor; user-based and item-based modes differ only in which
axis of the interaction set is grouped into vectors.
"""

import logging
import math
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Sequence

from common.constants import PATHS
from common.exceptions import DuplicateInteractionError, InvalidArgumentError
from common.utils import setup_logging

from .data_models import EntityId, InteractionLike, Neighbor, SimilarityCache, SparseVector
from .similarity import neighbors

logger = setup_logging(__name__, PATHS["app_log_file"], logging.DEBUG)

MODES = ("user", "item")
DUPLICATE_POLICIES = ("last", "first", "mean", "reject")


def unpack_interaction(interaction: InteractionLike):
    """Return (actor_id, target_id, score) from a triple or a mapping row."""
    if isinstance(interaction, Mapping):
        return interaction["actor_id"], interaction["target_id"], float(interaction["score"])
    actor_id, target_id, score = interaction
    return actor_id, target_id, float(score)


def build_rating_vectors(
    interactions: Iterable[InteractionLike],
    axis: str = "user",
    duplicate_policy: str = "last",
) -> Dict[EntityId, SparseVector]:
    """
    Group interactions into sparse rating vectors.

    axis="user" gives {actor_id: {target_id: score}}; axis="item" gives
    {target_id: {actor_id: score}}. Repeated (actor, target) rows are resolved
    by duplicate_policy: "last" (last write wins), "first", "mean", or
    "reject" (raises DuplicateInteractionError).
    """
    if axis not in MODES:
        raise InvalidArgumentError(f"Unknown axis: {axis!r} (expected one of {MODES})")
    if duplicate_policy not in DUPLICATE_POLICIES:
        raise InvalidArgumentError(
            f"Unknown duplicate policy: {duplicate_policy!r} (expected one of {DUPLICATE_POLICIES})"
        )

    vectors: Dict[EntityId, SparseVector] = {}
    counts = {}

    for interaction in interactions:
        actor_id, target_id, score = unpack_interaction(interaction)
        key, other = (actor_id, target_id) if axis == "user" else (target_id, actor_id)
        row = vectors.setdefault(key, {})

        if other not in row:
            row[other] = score
            counts[(key, other)] = 1
            continue

        if duplicate_policy == "reject":
            raise DuplicateInteractionError(f"Duplicate interaction for actor={actor_id!r}, target={target_id!r}")
        elif duplicate_policy == "last":
            row[other] = score
        elif duplicate_policy == "mean":
            row[other] += score  # Running sum, divided below
            counts[(key, other)] += 1
        # "first" keeps the stored score

    if duplicate_policy == "mean":
        for (key, other), count in counts.items():
            if count > 1:
                vectors[key][other] /= count

    return vectors


def _validate(k: int, mode: str):
    if mode not in MODES:
        raise InvalidArgumentError(f"Unknown mode: {mode!r} (expected one of {MODES})")
    if k < 1:
        raise InvalidArgumentError(f"k must be at least 1, got {k}")


def _orient(target_actor: EntityId, candidate_id: EntityId, mode: str):
    """Swap roles so the grouped axis always comes first."""
    if mode == "user":
        return target_actor, candidate_id
    return candidate_id, target_actor


def _weighted_average(neighborhood: List[Neighbor], vectors: Dict[EntityId, SparseVector], other: EntityId) -> float:
    """Similarity-weighted mean of the neighbors' scores for `other`; 0.0 without evidence."""
    weighted_scores = []
    weights = []
    for neighbor_id, sim in neighborhood:
        score = vectors[neighbor_id].get(other)
        if score is None:
            continue
        weighted_scores.append(sim * score)
        weights.append(sim)

    if not weights:
        return 0.0
    return math.fsum(weighted_scores) / math.fsum(weights)


def _neighborhood(
    entity: EntityId,
    vectors: Dict[EntityId, SparseVector],
    k: int,
    metric: str,
    similarity_cache: Optional[SimilarityCache],
) -> List[Neighbor]:
    target_vector = vectors.get(entity)
    if not target_vector:
        return []
    return neighbors(target_vector, vectors, k, metric=metric, target_id=entity, similarity_cache=similarity_cache)


def predict(
    target_actor: EntityId,
    candidate_id: EntityId,
    interactions: Sequence[InteractionLike],
    k: int,
    mode: str = "user",
    metric: str = "cosine",
    similarity_cache: Optional[SimilarityCache] = None,
    duplicate_policy: str = "last",
) -> float:
    """
    Predict target_actor's score for candidate_id from its k nearest neighbors.

    mode="user": neighbors are actors similar to target_actor, averaged over
    their scores for candidate_id.
    mode="item": neighbors are items similar to candidate_id, averaged over
    target_actor's scores for them.

    Returns 0.0 when no neighbor carries evidence. A similarity_cache must only
    be shared between calls using the same mode and metric.
    """
    _validate(k, mode)
    vectors = build_rating_vectors(interactions, axis=mode, duplicate_policy=duplicate_policy)
    entity, other = _orient(target_actor, candidate_id, mode)

    neighborhood = _neighborhood(entity, vectors, k, metric, similarity_cache)
    prediction = _weighted_average(neighborhood, vectors, other)

    logger.debug(
        f"[CF] mode={mode} actor={target_actor} candidate={candidate_id} "
        f"neighbors={len(neighborhood)} prediction={prediction:.4f}"
    )
    return prediction


def get_collaborative_scores(
    target_actor: EntityId,
    candidate_ids: Iterable[EntityId],
    interactions: Sequence[InteractionLike],
    k: int,
    mode: str = "user",
    metric: str = "cosine",
    similarity_cache: Optional[SimilarityCache] = None,
    duplicate_policy: str = "last",
) -> Dict[EntityId, float]:
    """Batch form of predict(): vectors are grouped once, user neighborhoods are reused."""
    _validate(k, mode)
    vectors = build_rating_vectors(interactions, axis=mode, duplicate_policy=duplicate_policy)

    scores: Dict[EntityId, float] = {}
    if mode == "user":
        neighborhood = _neighborhood(target_actor, vectors, k, metric, similarity_cache)
        logger.debug(f"[CF] actor={target_actor} has {len(neighborhood)} neighbors")
        for candidate_id in candidate_ids:
            scores[candidate_id] = _weighted_average(neighborhood, vectors, candidate_id)
    else:
        for candidate_id in candidate_ids:
            neighborhood = _neighborhood(candidate_id, vectors, k, metric, similarity_cache)
            scores[candidate_id] = _weighted_average(neighborhood, vectors, target_actor)

    if scores:
        n_evidence = sum(1 for s in scores.values() if s > 0)
        logger.debug(f"[CF] mode={mode} scored {len(scores)} candidates, {n_evidence} with evidence")
    return scores
