"""
Similarity engine over sparse vectors.
Pure functions: cosine for weighted vectors, Jaccard for tag/category sets.
"""

import math
from collections.abc import Mapping
from typing import Iterable, List, Optional

import numpy as np
import scipy.sparse as sp
from sklearn.metrics.pairwise import cosine_similarity as sk_cosine_similarity

from common.constants import PATHS
from common.exceptions import InvalidArgumentError
from common.utils import setup_logging

from .data_models import EntityId, Neighbor, SimilarityCache, SparseVector

logger = setup_logging(__name__, PATHS["app_log_file"])

METRICS = ("cosine", "jaccard")


def cosine_similarity(vector_a: SparseVector, vector_b: SparseVector) -> float:
    """
    Cosine similarity between two sparse vectors.

    Keys missing from one vector count as zero in that vector. Returns 0.0 when
    either vector has zero magnitude.
    """
    if not vector_a or not vector_b:
        return 0.0

    max_a = max(abs(w) for w in vector_a.values())
    max_b = max(abs(w) for w in vector_b.values())
    if max_a == 0 or max_b == 0:
        return 0.0

    # Rescale so the largest weight is 1; squares can neither overflow nor all underflow
    scaled_a = {key: w / max_a for key, w in vector_a.items()}
    scaled_b = {key: w / max_b for key, w in vector_b.items()}

    common_keys = scaled_a.keys() & scaled_b.keys()
    dot = math.fsum(scaled_a[key] * scaled_b[key] for key in common_keys)
    sum_sq_a = math.fsum(w * w for w in scaled_a.values())
    sum_sq_b = math.fsum(w * w for w in scaled_b.values())

    # sqrt of the product keeps sim(a, a) exactly 1.0
    score = dot / math.sqrt(sum_sq_a * sum_sq_b)
    return max(-1.0, min(1.0, score))


def _as_label_set(vector) -> set:
    if isinstance(vector, Mapping):
        return {key for key, weight in vector.items() if weight > 0}
    return set(vector)


def jaccard_similarity(vector_a, vector_b) -> float:
    """
    Jaccard similarity |A ∩ B| / |A ∪ B|.

    Accepts label sets or weighted vectors; a vector's set is its keys with
    positive weight. Two empty sets score 0.0.
    """
    set_a = _as_label_set(vector_a)
    set_b = _as_label_set(vector_b)

    union = len(set_a | set_b)
    if union == 0:
        return 0.0
    return len(set_a & set_b) / union


def similarity(vector_a, vector_b, metric: str = "cosine") -> float:
    if metric == "cosine":
        return cosine_similarity(vector_a, vector_b)
    elif metric == "jaccard":
        return jaccard_similarity(vector_a, vector_b)
    raise InvalidArgumentError(f"Unknown similarity metric: {metric!r} (expected one of {METRICS})")


def neighbors(
    target: SparseVector,
    candidates: Mapping,
    k: int,
    metric: str = "cosine",
    target_id: Optional[EntityId] = None,
    similarity_cache: Optional[SimilarityCache] = None,
) -> List[Neighbor]:
    """
    Rank candidate vectors by similarity to the target.

    Candidates with similarity <= 0 are dropped. Order is similarity descending,
    then candidate id ascending. When target_id is given the target itself is
    skipped, and similarity_cache (caller-owned) is read and filled.

    Returns:
        Up to k (candidate_id, similarity) pairs
    """
    if k < 0:
        raise InvalidArgumentError(f"k must be non-negative, got {k}")
    if metric not in METRICS:
        raise InvalidArgumentError(f"Unknown similarity metric: {metric!r} (expected one of {METRICS})")
    if k == 0 or not candidates:
        return []

    use_cache = similarity_cache is not None and target_id is not None
    cache_hits = 0

    scored = []
    for candidate_id, candidate_vector in candidates.items():
        if target_id is not None and candidate_id == target_id:
            continue

        if use_cache:
            pair = frozenset((target_id, candidate_id))
            score = similarity_cache.get(pair)
            if score is None:
                score = similarity(target, candidate_vector, metric)
                similarity_cache[pair] = score
            else:
                cache_hits += 1
        else:
            score = similarity(target, candidate_vector, metric)

        if score > 0:
            scored.append((candidate_id, score))

    scored.sort(key=lambda pair: (-pair[1], pair[0]))

    logger.debug(
        f"[SIM] target={target_id} metric={metric} candidates={len(candidates)} "
        f"positive={len(scored)} cache_hits={cache_hits} k={k}"
    )
    return scored[:k]


def build_similarity_cache(vectors: Mapping, metric: str = "cosine") -> SimilarityCache:
    """
    Precompute pairwise similarities for a set of vectors.

    The result is a plain dict owned by the caller, suitable as the
    similarity_cache argument of neighbors() and the predictors.
    """
    if metric not in METRICS:
        raise InvalidArgumentError(f"Unknown similarity metric: {metric!r} (expected one of {METRICS})")

    ids = list(vectors.keys())
    cache: SimilarityCache = {}
    if len(ids) < 2:
        return cache

    if metric == "jaccard":
        for i, id_a in enumerate(ids):
            for id_b in ids[i + 1 :]:
                cache[frozenset((id_a, id_b))] = jaccard_similarity(vectors[id_a], vectors[id_b])
        return cache

    matrix = _to_sparse_matrix(vectors[entity_id] for entity_id in ids)
    sim_matrix = np.clip(sk_cosine_similarity(matrix), -1.0, 1.0)

    for i, id_a in enumerate(ids):
        for j in range(i + 1, len(ids)):
            cache[frozenset((id_a, ids[j]))] = float(sim_matrix[i, j])

    logger.info(f"[SIM] Built similarity cache: {len(ids)} vectors, {len(cache)} pairs")
    return cache


def _to_sparse_matrix(vectors: Iterable[SparseVector]) -> sp.csr_matrix:
    """Stack sparse dict vectors into a CSR matrix over a shared key vocabulary."""
    vocabulary = {}
    rows, cols, data = [], [], []
    n_rows = 0
    for row_idx, vector in enumerate(vectors):
        n_rows = row_idx + 1
        for key, weight in vector.items():
            col_idx = vocabulary.setdefault(key, len(vocabulary))
            rows.append(row_idx)
            cols.append(col_idx)
            data.append(float(weight))

    return sp.csr_matrix((data, (rows, cols)), shape=(n_rows, max(len(vocabulary), 1)), dtype=np.float64)
