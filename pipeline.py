import argparse
import sys

from common.constants import EVALUATION, PATHS, RECOMMEND, REPEATS
from common.logging import log_interaction_summary
from common.utils import feature_vectors_from_dataframe, interactions_from_dataframe, safe_read_csv, setup_logging
from recommenders.evaluation import run_weight_sweep, split_interactions


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Offline evaluation of hybrid blend weights.")
    parser.add_argument("--interactions", default=PATHS["interactions"], help="CSV with actor_id,target_id,score")
    parser.add_argument("--features", default=None, help="CSV with entity_id,label[,weight]")
    parser.add_argument("--test-size", type=float, default=EVALUATION["test_size"])
    parser.add_argument("--random-state", type=int, default=EVALUATION["random_state"])
    parser.add_argument("--k-values", type=int, nargs="+", default=EVALUATION["k_values"])
    parser.add_argument("--weights", type=float, nargs="+", default=EVALUATION["collaborative_weights"])
    parser.add_argument("--neighbors", type=int, default=RECOMMEND["k"])
    parser.add_argument("--mode", choices=["user", "item"], default=RECOMMEND["mode"])
    parser.add_argument("--max-score", type=float, default=RECOMMEND["max_score"])
    return parser.parse_args(argv)


def run_pipeline(logger, args):
    """Load data, hold out interactions and sweep blend weights."""
    logger.info("=" * REPEATS)
    logger.info("STAGE 1: Load Data")
    logger.info("=" * REPEATS)

    interactions_df = safe_read_csv(args.interactions, ["actor_id", "target_id", "score"])
    item_features = {}
    if args.features:
        item_features = feature_vectors_from_dataframe(safe_read_csv(args.features))
    logger.info(f"Loaded {len(interactions_df)} interactions, {len(item_features)} feature vectors")

    log_interaction_summary(logger, interactions_from_dataframe(interactions_df))

    logger.info("=" * REPEATS)
    logger.info("STAGE 2: Holdout Split")
    logger.info("=" * REPEATS)

    train_df, holdout_df = split_interactions(interactions_df, args.test_size, args.random_state)
    train = interactions_from_dataframe(train_df)
    holdout = interactions_from_dataframe(holdout_df)

    logger.info("=" * REPEATS)
    logger.info("STAGE 3: Evaluate Blend Weights")
    logger.info("=" * REPEATS)

    candidate_pool = sorted(set(interactions_df["target_id"].tolist()) | set(item_features.keys()))
    context = {"interactions": train, "item_features": item_features, "similarity_cache": {}}
    config = {
        "k_values": args.k_values,
        "collaborative_weights": args.weights,
        "recommendation": {"k": args.neighbors, "mode": args.mode, "max_score": args.max_score},
    }
    results = run_weight_sweep(context, holdout, candidate_pool, config)

    logger.info("=" * REPEATS)
    logger.info("✓ Pipeline completed successfully!")
    logger.info("=" * REPEATS)
    return results


def main(argv=None):
    """Parse arguments and run the evaluation pipeline."""
    args = parse_args(argv)
    logger = setup_logging("pipeline", PATHS["eval_log_file"])
    run_pipeline(logger, args)
    print(f"Evaluation finished, see {PATHS['eval_log_file']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
