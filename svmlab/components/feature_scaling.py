"""
Feature scaling.

Methods:
- none: identity, no parameters
- minmax: (x - min) / (max - min)
- standard: (x - mean) / std, population std
- robust: (x - median) / IQR, quartiles taken by index on the sorted values

A feature whose range, std or IQR is zero keeps its original values. Only
features holding a number in the first row are scaled.
"""

import math
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Mapping, Optional

import numpy as np

from svmlab.exception import ValidationError
from svmlab.logger import logging
from svmlab.utils.constants import SCALING_METHODS
from svmlab.utils.preprocessing_utils import is_numeric, is_valid_number


@dataclass(frozen=True)
class FeatureScaleParams:
    """Statistics learned for one feature."""

    method: str
    min: Optional[float] = None
    max: Optional[float] = None
    mean: Optional[float] = None
    std: Optional[float] = None
    median: Optional[float] = None
    iqr: Optional[float] = None
    q1: Optional[float] = None
    q3: Optional[float] = None

    @property
    def center(self):
        if self.method == 'minmax':
            return self.min
        if self.method == 'standard':
            return self.mean
        return self.median

    @property
    def spread(self):
        if self.method == 'minmax':
            return self.max - self.min
        if self.method == 'standard':
            return self.std
        return self.iqr

    @property
    def has_zero_spread(self):
        """True when the spread is 0 within floating-point tolerance of the center."""
        atol = 10 * np.finfo(float).eps * max(1.0, abs(self.center))
        return bool(np.isclose(self.spread, 0.0, rtol=0.0, atol=atol))

    def apply(self, value):
        """Scale one value; zero spread and non-numeric values pass through."""
        if not is_valid_number(value) or self.has_zero_spread:
            return value
        return (value - self.center) / self.spread

    def to_dict(self):
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class ScaleParameters:
    """Per-feature parameters of one scaling run, reusable on unseen rows."""

    method: str
    features: Mapping[str, FeatureScaleParams]

    def __post_init__(self):
        object.__setattr__(self, 'features', MappingProxyType(dict(self.features)))

    def __len__(self):
        return len(self.features)

    def __contains__(self, feature):
        return feature in self.features

    def __getitem__(self, feature):
        return self.features[feature]

    def transform_row(self, row):
        """Return a copy of ``row`` with every known feature scaled."""
        scaled = dict(row)
        for feature, params in self.features.items():
            if feature in scaled:
                scaled[feature] = params.apply(scaled[feature])
        return scaled

    def to_dict(self):
        return {feature: params.to_dict() for feature, params in self.features.items()}


def fit_feature_params(values, method):
    """
    Learn the statistics of one feature.

    Args:
        values (list[float]): Valid numeric values of the feature
        method (str): 'minmax', 'standard' or 'robust'

    Returns:
        FeatureScaleParams
    """
    if method == 'minmax':
        return FeatureScaleParams(method=method, min=float(min(values)), max=float(max(values)))

    if method == 'standard':
        arr = np.asarray(values, dtype=float)
        return FeatureScaleParams(method=method, mean=float(arr.mean()), std=float(arr.std(ddof=0)))

    if method == 'robust':
        sorted_values = sorted(values)
        n = len(sorted_values)
        q1 = float(sorted_values[math.floor(n * 0.25)])
        q3 = float(sorted_values[math.floor(n * 0.75)])
        median = float(sorted_values[math.floor(n * 0.5)])
        return FeatureScaleParams(method=method, median=median, iqr=q3 - q1, q1=q1, q3=q3)

    raise ValidationError(f"Cannot fit scale parameters for method '{method}'")


def scale_features(rows, features, method):
    """
    Scale the named features.

    Args:
        rows (list[dict]): Input rows, left unmodified
        features (list[str]): Features to scale
        method (str): One of SCALING_METHODS

    Returns:
        tuple: (scaled rows, ScaleParameters)
    """
    if method not in SCALING_METHODS:
        raise ValidationError(f"Unknown scaling method '{method}'. Expected one of {SCALING_METHODS}")

    if method == 'none' or not rows:
        return [dict(row) for row in rows], ScaleParameters(method=method, features={})

    first_row = rows[0]
    learned = {}
    for feature in features:
        if feature not in first_row or not is_numeric(first_row[feature]):
            logging.debug(f"Skipping scaling for non-numeric feature '{feature}'")
            continue

        values = [row.get(feature) for row in rows]
        valid_values = [v for v in values if is_valid_number(v)]
        if not valid_values:
            continue

        params = fit_feature_params(valid_values, method)
        if params.has_zero_spread:
            logging.warning(f"Feature '{feature}' has zero spread under {method} scaling, leaving it unscaled")
        learned[feature] = params

    scale_params = ScaleParameters(method=method, features=learned)
    scaled_rows = [scale_params.transform_row(row) for row in rows]
    logging.info(f"Applied {method} scaling to {len(learned)} features: {list(learned)}")
    return scaled_rows, scale_params
