"""
Centralized configuration for the recommendation scoring core.
Defines log paths, scoring defaults and evaluation parameters.
"""

import os
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent.absolute()
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = Path(os.environ.get("HYBRID_RECS_LOG_DIR", PROJECT_ROOT / "logs"))
APP_LOGS_DIR = LOGS_DIR / "app_logs"
EVAL_LOGS_DIR = LOGS_DIR / "eval_logs"

date_str = datetime.now().strftime("%m%d%Y")

REPEATS = 80

RECOMMEND = {
    "k": 20,  # Neighborhood size for collaborative prediction
    "max_score": 5.0,  # Upper bound of the rating scale, used to scale predictions into [0, 1]
    "mode": "user",  # "user" (similar actors) or "item" (similar items)
    "metric": "cosine",  # "cosine" or "jaccard" for neighbor search
    "norm": "scale",  # "scale" (divide by max_score), "minmax", "zscore"
    "exclude_interacted": True,  # Exclude already-interacted candidates
    "duplicate_policy": "last",  # "last", "first", "mean", "reject"
}

EVALUATION = {
    "k_values": [5, 10],
    "collaborative_weights": [0.0, 0.25, 0.5, 0.75, 1.0],  # content weight = 1 - collaborative weight
    "test_size": 0.2,
    "random_state": 42,
    "min_holdout_items": 1,
    "min_score": 0.0,  # Held-out interactions at or below this score are not treated as relevant
}

PATHS = {
    "app_log_file": str(APP_LOGS_DIR / f"{date_str}_app.log"),
    "eval_log_file": str(EVAL_LOGS_DIR / f"{date_str}_eval.log"),
    "interactions": str(DATA_DIR / "interactions.csv"),
    "item_features": str(DATA_DIR / "item_features.csv"),
}
