import numpy as np


def log_interaction_summary(logger, interactions):
    actors = {row[0] for row in interactions}
    targets = {row[1] for row in interactions}
    pairs = {(row[0], row[1]) for row in interactions}
    n_rows = len(interactions)

    logger.info("=== Interactions ===")
    logger.info("Rows: %s", f"{n_rows:,}")
    logger.info("Actors: %s | Targets: %s", f"{len(actors):,}", f"{len(targets):,}")
    if actors and targets:
        logger.info("Density: %.4f%%", 100 * len(pairs) / (len(actors) * len(targets)))
    if n_rows > len(pairs):
        logger.warning(f"{n_rows - len(pairs):,} duplicate (actor, target) rows present")

    if n_rows == 0:
        return

    scores = np.array([float(row[2]) for row in interactions])
    logger.info("=== Score Distribution ===")
    logger.info(f"Min score: {scores.min()}")
    logger.info(f"Max score: {scores.max()}")
    logger.info(f"Mean score: {scores.mean():.2f}")

    per_actor = np.unique([row[0] for row in interactions], return_counts=True)[1]
    logger.info("=== Actor Interaction Distribution ===")
    logger.info(f"Min interactions per actor: {per_actor.min()}")
    logger.info(f"Max interactions per actor: {per_actor.max()}")
    logger.info(f"Median interactions per actor: {np.median(per_actor):.2f}")


def log_split_summary(logger, results, k, collaborative_weights):
    logger.info(f"Results for K={k}:")
    logger.info("-" * 80)
    logger.info(f"{'Strategy':<28} {'Precision@K':>12} {'Recall@K':>12} {'MAP@K':>12} {'NDCG@K':>12}")
    logger.info("-" * 80)

    for weight in collaborative_weights:
        agg = results[k][weight]["metrics"]
        logger.info(
            f"{_get_strategy_name(weight):<28} "
            f"{agg['precision@k']['mean']:>12.4f} "
            f"{agg['recall@k']['mean']:>12.4f} "
            f"{agg['ap@k']['mean']:>12.4f} "
            f"{agg['ndcg@k']['mean']:>12.4f}"
        )

    logger.info("-" * 80)

    best = {
        "Precision": max(collaborative_weights, key=lambda w: _nan_safe(results[k][w]["metrics"]["precision@k"]["mean"])),
        "Recall": max(collaborative_weights, key=lambda w: _nan_safe(results[k][w]["metrics"]["recall@k"]["mean"])),
        "MAP": max(collaborative_weights, key=lambda w: _nan_safe(results[k][w]["metrics"]["ap@k"]["mean"])),
        "NDCG": max(collaborative_weights, key=lambda w: _nan_safe(results[k][w]["metrics"]["ndcg@k"]["mean"])),
    }
    for metric, weight in best.items():
        logger.info(f"Best {metric}@{k}: {_get_strategy_name(weight)}")


def log_evaluation_summary(logger, results):
    logger.info("=" * 80)
    logger.info("SUMMARY: Blend Comparison")
    logger.info("=" * 80)
    for k in results:
        log_split_summary(logger, results, k, list(results[k].keys()))


def _nan_safe(value):
    return -np.inf if np.isnan(value) else value


def _get_strategy_name(collaborative_weight):
    if collaborative_weight == 0.0:
        return "Pure Content (w_cf=0.0)"
    if collaborative_weight == 1.0:
        return "Pure CF (w_cf=1.0)"
    return f"Hybrid (w_cf={collaborative_weight})"
