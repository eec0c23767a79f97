import numpy as np


# region Normalization
def scale_normalize(scores: np.ndarray, max_score: float) -> np.ndarray:
    """Divide by the top of the rating scale and clip into [0, 1]."""
    scores = np.asarray(scores, dtype=np.float64)
    if max_score <= 0:
        raise ValueError(f"max_score must be positive, got {max_score}")
    return np.clip(scores / max_score, 0.0, 1.0)


def minmax_normalize(scores: np.ndarray) -> np.ndarray:
    """Normalize to [0, 1] range using min-max scaling."""
    scores = np.asarray(scores, dtype=np.float64)
    if scores.size == 0:
        return scores
    min_score = scores.min()
    max_score = scores.max()
    if max_score - min_score == 0:
        # A pool with no evidence stays at zero
        return np.zeros_like(scores) if max_score == 0 else np.ones_like(scores)
    return (scores - min_score) / (max_score - min_score)


def zscore_normalize(scores: np.ndarray) -> np.ndarray:
    """Normalize using z-score + sigmoid squashing."""
    scores = np.asarray(scores, dtype=np.float64)
    if scores.size == 0:
        return scores
    mu, sigma = scores.mean(), scores.std()
    if sigma < 1e-8:
        return np.zeros_like(scores) if mu == 0 else np.ones_like(scores) * 0.5
    z = (scores - mu) / sigma
    return 1.0 / (1.0 + np.exp(-z))


def normalize_scores(scores: np.ndarray, norm: str, max_score: float = 5.0) -> np.ndarray:
    """Normalize scores using specified method."""
    if norm == "scale":
        return scale_normalize(scores, max_score)
    elif norm == "minmax":
        return minmax_normalize(scores)
    elif norm == "zscore":
        return zscore_normalize(scores)
    raise ValueError(f"Unknown normalization: {norm!r}")


# endregion


# region Metrics
def precision_at_k(recommended_ids, relevant_ids, k):
    """
    Compute Precision@K for a single actor.
    Interpretation: Of the K items we recommended, how many did the actor actually interact with?
    """
    if len(relevant_ids) == 0 or k <= 0:
        return np.nan

    hits = len(set(recommended_ids[:k]) & set(relevant_ids))
    return hits / k


def recall_at_k(recommended_ids, relevant_ids, k):
    """
    Compute Recall@K for a single actor.
    Interpretation: Of all the held-out items, we found N of them in our top-K.
    """
    if len(relevant_ids) == 0:
        return np.nan

    hits = len(set(recommended_ids[:k]) & set(relevant_ids))
    return hits / len(relevant_ids)


def ap_at_k(recommended_ids, relevant_ids, k):
    """Compute Average Precision@K, which penalizes relevant items ranked low."""
    if len(relevant_ids) == 0 or k <= 0:
        return np.nan

    relevant = set(relevant_ids)
    score = 0.0
    num_hits = 0
    for i, candidate_id in enumerate(recommended_ids[:k]):
        if candidate_id in relevant:
            num_hits += 1
            score += num_hits / (i + 1)

    return score / min(k, len(relevant))


def ndcg_at_k(recommended_ids, relevant_ids, k):
    """
    Compute Normalized Discounted Cumulative Gain@K with binary relevance.
    """
    if len(relevant_ids) == 0 or k <= 0:
        return np.nan

    relevant = set(relevant_ids)
    dcg = sum(
        1.0 / np.log2(i + 2) for i, candidate_id in enumerate(recommended_ids[:k]) if candidate_id in relevant
    )
    ideal_dcg = sum(1.0 / np.log2(i + 2) for i in range(min(k, len(relevant))))

    return dcg / ideal_dcg


def compute_aggregate_metrics(metric_dict):
    """Compute mean and std of per-actor metrics, filtering out NaN values."""
    aggregated = {}

    for metric_name, scores in metric_dict.items():
        scores_arr = np.asarray(scores, dtype=np.float64)
        valid_scores = scores_arr[~np.isnan(scores_arr)]

        if len(valid_scores) > 0:
            aggregated[metric_name] = {
                "mean": float(valid_scores.mean()),
                "std": float(valid_scores.std()),
                "count": len(valid_scores),
            }
        else:
            aggregated[metric_name] = {"mean": np.nan, "std": np.nan, "count": 0}

    return aggregated


# endregion
