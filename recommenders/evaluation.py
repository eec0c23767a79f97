"""
Offline evaluation of blend weights against held-out interactions.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
from sklearn.model_selection import train_test_split

from common.constants import EVALUATION, PATHS
from common.helpers import ap_at_k, compute_aggregate_metrics, ndcg_at_k, precision_at_k, recall_at_k
from common.logging import _get_strategy_name, log_evaluation_summary
from common.utils import setup_logging

from .collaborative import unpack_interaction
from .data_models import EntityId, EvalConfig, InteractionLike, RecommendationContext
from .orchestrator import recommend

logger = setup_logging(__name__, PATHS["eval_log_file"])


def split_interactions(
    interactions_df: pd.DataFrame,
    test_size: float = EVALUATION["test_size"],
    random_state: int = EVALUATION["random_state"],
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Hold out a random fraction of interaction rows; returns (train_df, holdout_df)."""
    train_df, holdout_df = train_test_split(interactions_df, test_size=test_size, random_state=random_state)
    logger.info(f"Train interactions: {len(train_df):,} | Holdout interactions: {len(holdout_df):,}")
    return train_df, holdout_df


def _relevant_by_actor(holdout: Sequence[InteractionLike], min_score: float) -> Dict[EntityId, set]:
    relevant = defaultdict(set)
    for interaction in holdout:
        actor_id, target_id, score = unpack_interaction(interaction)
        if score > min_score:
            relevant[actor_id].add(target_id)
    return relevant


def evaluate(
    context: RecommendationContext,
    holdout: Sequence[InteractionLike],
    candidate_pool: Sequence[EntityId],
    collaborative_weight: float,
    content_weight: float,
    k: int,
    config: Optional[EvalConfig] = None,
) -> Dict[str, List[float]]:
    """
    Evaluate one blend configuration on held-out interactions.

    The context should only carry training interactions. Actors with fewer than
    min_holdout_items relevant held-out items are skipped.

    Returns:
        Per-actor metric lists keyed by "precision@k", "recall@k", "ap@k", "ndcg@k"
    """
    config = {**EVALUATION, **(config or {})}
    relevant = _relevant_by_actor(holdout, config["min_score"])
    actors = sorted(a for a, items in relevant.items() if len(items) >= config["min_holdout_items"])
    logger.info(f"Number of actors to evaluate: {len(actors)}")

    metrics = {"precision@k": [], "recall@k": [], "ap@k": [], "ndcg@k": []}
    for actor_id in actors:
        recommendations = recommend(
            context,
            actor_id,
            candidate_pool,
            collaborative_weight,
            content_weight,
            top_n=k,
            config=config.get("recommendation"),
        )
        recommended_ids = [rec["candidate_id"] for rec in recommendations]
        true_ids = relevant[actor_id]

        metrics["precision@k"].append(precision_at_k(recommended_ids, true_ids, k))
        metrics["recall@k"].append(recall_at_k(recommended_ids, true_ids, k))
        metrics["ap@k"].append(ap_at_k(recommended_ids, true_ids, k))
        metrics["ndcg@k"].append(ndcg_at_k(recommended_ids, true_ids, k))

    return metrics


def run_weight_sweep(
    context: RecommendationContext,
    holdout: Sequence[InteractionLike],
    candidate_pool: Sequence[EntityId],
    config: Optional[EvalConfig] = None,
):
    """
    Evaluate every (k, collaborative weight) pair; content weight is 1 - weight.

    Returns:
        results[k][collaborative_weight] = {"metrics": aggregated, "strategy": name}
    """
    config = {**EVALUATION, **(config or {})}
    results = {}

    for k in config["k_values"]:
        results[k] = {}
        for weight in config["collaborative_weights"]:
            strategy_name = _get_strategy_name(weight)
            logger.info("-" * 80)
            logger.info(f"EVALUATION @ K={k} | Strategy: {strategy_name}")
            logger.info("-" * 80)

            metrics = evaluate(context, holdout, candidate_pool, weight, 1.0 - weight, k, config)
            aggregated = compute_aggregate_metrics(metrics)
            for metric_name, stats in aggregated.items():
                logger.info(f"  {metric_name:12s}: {stats['mean']:.4f} ± {stats['std']:.4f} (n_actors={stats['count']})")

            results[k][weight] = {"metrics": aggregated, "strategy": strategy_name}

    log_evaluation_summary(logger, results)
    return results
