"""Random train/test partitioning of rows."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from svmlab.exception import ValidationError
from svmlab.logger import logging


@dataclass
class SplitResult:
    """Training/testing feature rows (target removed) with their labels."""

    training_data: List[Dict[str, Any]] = field(default_factory=list)
    testing_data: List[Dict[str, Any]] = field(default_factory=list)
    training_labels: List[Any] = field(default_factory=list)
    testing_labels: List[Any] = field(default_factory=list)

    @property
    def n_rows(self):
        return len(self.training_data) + len(self.testing_data)


def holdout_size(n_rows, split_ratio):
    """Number of testing rows: floor(n * ratio)."""
    return int(math.floor(n_rows * split_ratio))


def train_test_split_rows(rows, target_variable, split_ratio, random_state=None):
    """
    Shuffle rows and split them into training and testing subsets.

    Args:
        rows (list[dict]): Rows including the target column
        target_variable (str): Column holding the labels
        split_ratio (float): Share of rows to hold out, in (0, 1)
        random_state (int): Optional seed; None draws fresh randomness per call

    Returns:
        SplitResult
    """
    if not 0 < split_ratio < 1:
        raise ValidationError(f"Train/test split ratio must be between 0 and 1 (exclusive), got {split_ratio}")

    rng = np.random.default_rng(random_state)
    order = rng.permutation(len(rows))
    shuffled = [rows[i] for i in order]

    n_test = holdout_size(len(shuffled), split_ratio)
    split_index = len(shuffled) - n_test
    training_rows = shuffled[:split_index]
    testing_rows = shuffled[split_index:]

    def strip_target(row):
        return {k: v for k, v in row.items() if k != target_variable}

    result = SplitResult(
        training_data=[strip_target(row) for row in training_rows],
        testing_data=[strip_target(row) for row in testing_rows],
        training_labels=[row.get(target_variable) for row in training_rows],
        testing_labels=[row.get(target_variable) for row in testing_rows],
    )
    logging.info(f"Split {len(rows)} rows into {len(training_rows)} training / {len(testing_rows)} testing")
    return result
