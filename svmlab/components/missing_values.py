"""
Missing-value handling.

Strategies:
- remove: drop every row missing any of the named features
- mean / median / mode: fill from that feature's valid (non-missing, numeric) values
- constant: fill with a single supplied value

A feature with no valid values is left untouched by mean/median/mode.
The input rows are never mutated.
"""

import numpy as np

from svmlab.exception import ValidationError
from svmlab.logger import logging
from svmlab.utils.constants import IMPUTATION_STRATEGIES
from svmlab.utils.preprocessing_utils import is_missing, is_valid_number


def _mode(values):
    """Value whose running count first reaches the overall maximum frequency."""
    frequency = {}
    max_freq = 0
    mode = values[0]
    for value in values:
        frequency[value] = frequency.get(value, 0) + 1
        if frequency[value] > max_freq:
            max_freq = frequency[value]
            mode = value
    return mode


def compute_replacement_value(values, strategy):
    """
    Compute the fill value for one feature.

    Args:
        values (list): Every cell of the feature, missing ones included
        strategy (str): 'mean', 'median' or 'mode'

    Returns:
        float | None: The replacement, or None when there is nothing valid to compute from
    """
    valid_values = [v for v in values if is_valid_number(v)]
    if not valid_values:
        return None

    if strategy == 'mean':
        return float(np.mean(valid_values))
    if strategy == 'median':
        # np.median averages the two central values for even-length input
        return float(np.median(valid_values))
    if strategy == 'mode':
        return _mode(valid_values)

    raise ValidationError(f"Cannot compute a replacement value for strategy '{strategy}'")


def handle_missing_values(rows, features, strategy, constant_value=None):
    """
    Resolve missing values in the named features.

    Args:
        rows (list[dict]): Input rows, left unmodified
        features (list[str]): Features to impute
        strategy (str): One of IMPUTATION_STRATEGIES
        constant_value: Fill value for the 'constant' strategy

    Returns:
        list[dict]: New rows with missing values resolved
    """
    if strategy not in IMPUTATION_STRATEGIES:
        raise ValidationError(
            f"Unknown missing value strategy '{strategy}'. Expected one of {IMPUTATION_STRATEGIES}"
        )

    processed = [dict(row) for row in rows]
    if not processed:
        return processed

    present = [f for f in features if f in processed[0]]
    for feature in features:
        if feature not in present:
            logging.warning(f"Column '{feature}' not found in rows, skipping imputation")

    if strategy == 'remove':
        kept = [row for row in processed if not any(is_missing(row.get(f)) for f in present)]
        logging.info(f"Removed {len(processed) - len(kept)} rows with missing values in {present}")
        return kept

    for feature in present:
        if strategy == 'constant':
            replacement = constant_value
        else:
            replacement = compute_replacement_value([row.get(feature) for row in processed], strategy)

        if replacement is None:
            logging.warning(f"No valid values to compute '{strategy}' for '{feature}', leaving it unchanged")
            continue

        imputed = 0
        for row in processed:
            if is_missing(row.get(feature)):
                row[feature] = replacement
                imputed += 1

        if imputed:
            logging.info(f"Imputed {imputed} missing values in '{feature}' with {strategy}={replacement}")

    return processed
