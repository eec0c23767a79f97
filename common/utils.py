import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd


def setup_logging(stage_name: str, log_file: str, level=logging.INFO):
    """Configure a module logger.

    Args:
        stage_name: Name for the logger (typically __name__)
        log_file: Path to the log file to write to
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(stage_name)
    logger.handlers.clear()

    # Disable propagation to root logger to prevent duplicate logging
    logger.propagate = False

    logger.setLevel(level)

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8", delay=True)
    file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(file_handler)

    return logger


def safe_read_csv(filepath: str, usecols: Optional[list[str]] = None) -> pd.DataFrame:
    """Safely read CSV file"""
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")

    try:
        df = pd.read_csv(filepath)
    except pd.errors.ParserError as e:
        raise pd.errors.ParserError(f"Error parsing {filepath}: {e}")

    df.columns = df.columns.str.strip().str.lower()
    if usecols:
        missing_cols = [c for c in usecols if c.lower() not in df.columns]
        if missing_cols:
            raise ValueError(f"Missing columns in input CSV: {missing_cols}")
        return df[[c.lower() for c in usecols]]
    return df


def interactions_from_dataframe(
    df: pd.DataFrame,
    actor_col: str = "actor_id",
    target_col: str = "target_id",
    score_col: str = "score",
) -> List[Tuple]:
    """Convert an interactions table into (actor_id, target_id, score) triples, keeping row order."""
    missing_cols = [c for c in (actor_col, target_col, score_col) if c not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing interaction columns: {missing_cols}")

    scores = pd.to_numeric(df[score_col], errors="raise").astype(float)
    return list(zip(df[actor_col].tolist(), df[target_col].tolist(), scores.tolist()))


def feature_vectors_from_dataframe(
    df: pd.DataFrame,
    entity_col: str = "entity_id",
    label_col: str = "label",
    weight_col: str = "weight",
) -> Dict[object, Dict[str, float]]:
    """
    Convert a long-format features table into one FeatureVector per entity.

    Rows sharing an (entity, label) pair are summed. A table without a weight
    column is read as tag sets with weight 1.0 per label.
    """
    missing_cols = [c for c in (entity_col, label_col) if c not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing feature columns: {missing_cols}")

    df = df.copy()
    if weight_col in df.columns:
        df[weight_col] = pd.to_numeric(df[weight_col], errors="raise").astype(float)
    else:
        df[weight_col] = 1.0

    if (df[weight_col] < 0).any():
        raise ValueError("Feature weights must be non-negative")

    grouped = df.groupby([entity_col, label_col], sort=False)[weight_col].sum()

    vectors: Dict[object, Dict[str, float]] = {}
    for (entity_id, label), weight in grouped.items():
        vectors.setdefault(entity_id, {})[label] = float(weight)
    return vectors
