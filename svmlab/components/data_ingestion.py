"""
Dataset value object.

The surrounding application parses uploaded files; this module only receives
the parsed table, either as a list of records or as a pandas DataFrame, and
normalises it into ordered rows that all share the same column set.
"""

import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from svmlab.exception import CustomException, ValidationError
from svmlab.logger import logging
from svmlab.utils.preprocessing_utils import normalize_missing_and_strip, to_python_scalar

Row = Dict[str, Any]


@dataclass
class Dataset:
    """
    Parsed tabular data.

    Attributes:
        rows: Ordered rows mapping column name to value (None when missing)
        columns: Ordered column names
        filename: Name of the uploaded file, if any
        size: Size of the uploaded file in bytes
        uploaded_at: When the data was received
    """

    rows: List[Row]
    columns: List[str]
    filename: Optional[str] = None
    size: int = 0
    uploaded_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        self.columns = list(self.columns)
        # Missing entries are stored as None, never omitted
        self.rows = [{col: to_python_scalar(row.get(col)) for col in self.columns} for row in self.rows]

    def __len__(self):
        return len(self.rows)

    @classmethod
    def from_records(cls, records, columns=None, filename=None, size=0):
        """
        Build a dataset from a sequence of mappings.

        Args:
            records (list[dict]): Parsed rows
            columns (list[str]): Column order; defaults to first-seen key order
            filename (str): Source file name
            size (int): Source file size in bytes

        Returns:
            Dataset
        """
        records = list(records)
        if columns is None:
            columns = []
            for record in records:
                for key in record:
                    if key not in columns:
                        columns.append(key)

        if len(set(columns)) != len(columns):
            raise ValidationError(f"Duplicate column names in dataset: {columns}")

        logging.info(f"Dataset received: {len(records)} rows, {len(columns)} columns ({filename or 'in-memory'})")
        return cls(rows=records, columns=columns, filename=filename, size=size)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, filename=None, size=0):
        """Build a dataset from a DataFrame; NaN cells become None and strings are stripped."""
        try:
            if df.columns.duplicated().any():
                raise ValidationError(f"Duplicate column names in dataset: {list(df.columns)}")

            cleaned = normalize_missing_and_strip(df)
            columns = [str(col) for col in cleaned.columns]
            cleaned.columns = columns
            records = cleaned.to_dict(orient="records")
            return cls.from_records(records, columns=columns, filename=filename, size=size)
        except CustomException:
            raise
        except Exception as e:
            raise CustomException(e, sys)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.columns)
