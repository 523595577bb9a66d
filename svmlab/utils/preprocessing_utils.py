"""
Cell-level helpers shared by the preprocessing components.

A cell is "missing" when it is None, absent, an empty string or NaN.
A cell is "numeric" when it is a real number (booleans excluded).
"""

import numbers

import numpy as np
import pandas as pd


def is_missing(value):
    """Return True for None, empty strings and NaN-like scalars."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if pd.api.types.is_scalar(value):
        return bool(pd.isna(value))
    return False


def is_numeric(value):
    """Return True for ints/floats (numpy scalars included), never for bools."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, numbers.Real)


def is_valid_number(value):
    return is_numeric(value) and not is_missing(value)


def to_python_scalar(value):
    """Unwrap numpy scalars so rows only ever hold plain Python values."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def normalize_missing_and_strip(df):
    """
    Strip surrounding whitespace from string cells and turn every missing
    marker (NaN, NaT, pd.NA, empty string) into None.

    Args:
        df (pd.DataFrame): Raw dataframe

    Returns:
        pd.DataFrame: Object-dtype copy safe to turn into row mappings
    """
    cleaned = df.copy()
    for col in cleaned.columns:
        if pd.api.types.is_object_dtype(cleaned[col]) or pd.api.types.is_string_dtype(cleaned[col]):
            cleaned[col] = cleaned[col].map(lambda v: v.strip() if isinstance(v, str) else v)
    cleaned = cleaned.astype(object)
    return cleaned.where(~cleaned.map(is_missing), None)
