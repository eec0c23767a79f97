"""
Recommendation scoring components.
Pure functions with TypedDicts.
"""

from .data_models import (
    Recommendation,
    RecommendationContext,
    RecommendationConfig,
    EvalConfig,
)
from .similarity import build_similarity_cache, cosine_similarity, jaccard_similarity, neighbors, similarity
from .collaborative import build_rating_vectors, get_collaborative_scores, predict
from .content_based import build_actor_profile, get_content_scores
from .orchestrator import recommend

__all__ = [
    "Recommendation",
    "RecommendationContext",
    "RecommendationConfig",
    "EvalConfig",
    "similarity",
    "cosine_similarity",
    "jaccard_similarity",
    "neighbors",
    "build_similarity_cache",
    "build_rating_vectors",
    "predict",
    "get_collaborative_scores",
    "build_actor_profile",
    "get_content_scores",
    "recommend",
]
