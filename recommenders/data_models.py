"""
Type definitions for the recommendation scoring core.
Using TypedDicts for structured data with type hints.
"""

from typing import Any, Dict, FrozenSet, Hashable, List, Optional, Sequence, Tuple, TypedDict, Union

EntityId = Hashable  # Opaque user or item identifier; ids in one pool must be mutually orderable

Interaction = Tuple[EntityId, EntityId, float]  # (actor_id, target_id, score)
SparseVector = Dict[Any, float]  # dimension key (entity id or tag) → non-negative weight
FeatureVector = Dict[Any, float]  # category/tag label → non-negative weight
Neighbor = Tuple[EntityId, float]  # (entity_id, similarity)
SimilarityCache = Dict[FrozenSet[EntityId], float]  # Caller-owned, keyed by frozenset({id_a, id_b})

InteractionLike = Union[Interaction, Dict[str, Any]]


class SourceBreakdown(TypedDict):
    """Per-source scores before weighting, both in [0, 1]."""
    collaborative: float
    content: float


class Recommendation(TypedDict):
    """One ranked candidate, produced fresh for each scoring call."""
    candidate_id: EntityId
    blended_score: float
    source_breakdown: SourceBreakdown


class RecommendationContext(TypedDict, total=False):
    """
    World state for a scoring call - caller-supplied, read-only data.
    Nothing here is mutated by the core, except entries added to similarity_cache.
    """
    interactions: Sequence[InteractionLike]  # Full interaction set relevant to the request
    item_features: Dict[EntityId, FeatureVector]  # Feature vector per candidate item
    actor_features: Dict[EntityId, FeatureVector]  # Optional precomputed actor profiles
    similarity_cache: SimilarityCache  # Optional externally-owned similarity cache
    seed_item_ids: Dict[EntityId, List[EntityId]]  # Optional onboarding picks per actor


class RecommendationConfig(TypedDict, total=False):
    """
    Configuration for how recommendation scores are computed and merged.
    Runtime behavior parameters; unset keys fall back to RECOMMEND defaults.
    """
    k: int  # Neighborhood size for collaborative prediction
    max_score: float  # Top of the rating scale
    mode: str  # "user" or "item"
    metric: str  # "cosine" or "jaccard"
    norm: str  # "scale", "minmax", or "zscore"
    exclude_interacted: bool  # Exclude already-interacted candidates
    duplicate_policy: str  # "last", "first", "mean", or "reject"


class EvalConfig(TypedDict, total=False):
    """
    Configuration for offline evaluation of blend weights.
    """
    k_values: List[int]  # Top-N cutoffs to evaluate [5, 10, ...]
    collaborative_weights: List[float]  # Collaborative weights to sweep; content weight = 1 - w
    test_size: float  # Fraction of interactions held out
    random_state: int  # Seed for the holdout split
    min_holdout_items: int  # Minimum held-out items for an actor to be evaluated
    min_score: float  # Held-out interactions above this score count as relevant
    recommendation: Optional[RecommendationConfig]  # Passed through to recommend()
