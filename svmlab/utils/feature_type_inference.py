"""
Feature Type Inference Module
Classifies each column from its non-missing values, for the dataset summary
and the feature picker.

Column types:
- integer: every non-missing value is a whole number
- float: numeric with at least one fractional value
- string: text values
- boolean: True/False values
- categorical: string or integer column with few distinct values
  (at most 20, and fewer than half the non-missing count)
- unknown: no non-missing values
"""

import pandas as pd

from svmlab.exception import CustomException
from svmlab.logger import logging
from svmlab.utils.constants import CATEGORICAL_MAX_UNIQUE
from svmlab.utils.formatting import format_date, format_file_size
from svmlab.utils.preprocessing_utils import is_missing

NUMERIC_KINDS = ('integer', 'floating', 'mixed-integer-float', 'decimal')


class FeatureTypeInference:
    """
    Infers the type of each column and counts its missing values.
    """

    def __init__(self, dataset, target_column=None):
        """
        Initialize feature type inference.

        Args:
            dataset (Dataset): Parsed dataset
            target_column (str): Name of target column (will be excluded from classification)
        """
        self.dataset = dataset
        self.target_column = target_column
        # Empty strings count as missing alongside None and NaN
        frame = dataset.to_dataframe()
        self.df = frame.where(~frame.map(is_missing))
        self.feature_types = {}
        logging.info(f"FeatureTypeInference initialized with {len(dataset.rows)} rows, {len(dataset.columns)} columns")

    def infer_types(self):
        """
        Infer type for each column (except target).

        Returns:
            dict: {column_name: {'type': str, 'n_missing': int, 'n_unique': int}}
        """
        try:
            for col in self.dataset.columns:
                if col == self.target_column:
                    logging.debug(f"Skipping target column: {col}")
                    continue

                self.feature_types[col] = self._classify_feature(col)

            logging.info(f"Feature type inference complete. Classified {len(self.feature_types)} columns")
            return self.feature_types

        except Exception as e:
            logging.error(f"Error in feature type inference: {str(e)}")
            raise CustomException(f"Feature type inference failed: {str(e)}")

    def _classify_feature(self, col):
        data = self.df[col]
        non_null = data.dropna()
        n_missing = int(data.isnull().sum())
        n_unique = int(data.nunique())

        # infer_dtype looks at the values, so object columns classify like typed ones
        kind = pd.api.types.infer_dtype(non_null, skipna=True)
        ftype = 'unknown'
        if not non_null.empty:
            if pd.api.types.is_bool_dtype(data) or kind == 'boolean':
                ftype = 'boolean'
            elif pd.api.types.is_numeric_dtype(data) or kind in NUMERIC_KINDS:
                all_integers = bool((non_null.astype(float) % 1 == 0).all())
                ftype = 'integer' if all_integers else 'float'
            elif kind == 'string':
                ftype = 'string'

        if ftype in ('string', 'integer'):
            if n_unique <= CATEGORICAL_MAX_UNIQUE and n_unique < len(non_null) / 2:
                ftype = 'categorical'

        logging.debug(f"Classified column '{col}': type={ftype}, n_unique={n_unique}, n_missing={n_missing}")
        return {
            'type': ftype,
            'n_missing': n_missing,
            'n_unique': n_unique,
        }

    def get_columns_by_type(self, feature_type):
        """
        Get all columns of a specific type.

        Returns:
            list: Column names matching the specified type
        """
        if not self.feature_types:
            self.infer_types()

        return [col for col, info in self.feature_types.items() if info.get('type') == feature_type]

    def get_summary(self):
        """
        Dataset overview: metadata, per-column types and missing counts.

        Returns:
            dict
        """
        if not self.feature_types:
            self.infer_types()

        type_counts = {}
        for info in self.feature_types.values():
            type_counts[info['type']] = type_counts.get(info['type'], 0) + 1

        summary = {
            'filename': self.dataset.filename,
            'size': format_file_size(self.dataset.size),
            'rows': len(self.dataset.rows),
            'columns': len(self.dataset.columns),
            'uploaded_at': format_date(self.dataset.uploaded_at),
            'column_types': {col: info['type'] for col, info in self.feature_types.items()},
            'missing_values': {col: info['n_missing'] for col, info in self.feature_types.items()},
            'type_distribution': type_counts,
        }

        logging.info(f"Feature type summary: {type_counts}")
        return summary
