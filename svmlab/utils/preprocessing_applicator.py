"""
Preprocessing Applicator Module

Applies the configured preprocessing steps to the dataset rows:
1. Missing value handling (mean/median/mode/constant/remove)
2. Feature scaling (none/minmax/standard/robust)

Tracks every step in a structured log for reporting.
"""

import pandas as pd

from svmlab.components.feature_scaling import ScaleParameters, scale_features
from svmlab.components.missing_values import handle_missing_values
from svmlab.logger import logging
from svmlab.utils.preprocessing_utils import is_missing


class PreprocessingApplicator:
    """
    Applies preprocessing actions to the rows and records each decision.

    Each ``apply_*`` call replaces the working rows with a new list; the rows
    passed to the constructor are never modified.
    """

    def __init__(self, rows, columns, target_column=None):
        """
        Initialize preprocessing applicator.

        Args:
            rows (list[dict]): Input rows
            columns (list[str]): Column names present in the rows
            target_column (str): Name of target column
        """
        self.rows = [dict(row) for row in rows]
        self.original_rows = rows
        self.columns = list(columns)
        self.target_column = target_column
        self.scale_parameters = ScaleParameters(method='none', features={})
        self.preprocessing_log = []

        logging.info(f"PreprocessingApplicator initialized with {len(rows)} rows, {len(self.columns)} columns")

    def _count_missing(self, features):
        """Missing cells per feature in the working rows."""
        frame = pd.DataFrame(self.rows, columns=list(features))
        counts = frame.map(is_missing).sum()
        return {col: int(counts[col]) for col in features}

    def apply_missing_value_imputation(self, features, strategy, constant_value=None):
        """
        Resolve missing values in ``features``.

        Args:
            features (list[str]): Columns to impute
            strategy (str): 'mean', 'median', 'mode', 'remove' or 'constant'
            constant_value: Fill value for 'constant'

        Returns:
            dict: Summary of imputation applied
        """
        logging.info(f"Applying missing value handling ({strategy})...")

        missing_before = self._count_missing(features)
        rows_before = len(self.rows)

        self.rows = handle_missing_values(self.rows, features, strategy, constant_value)

        missing_after = self._count_missing(features)

        summary = {
            'action': 'missing_value_handling',
            'strategy': strategy,
            'columns_affected': [col for col in features if missing_before[col] != missing_after[col]],
            'details': {
                col: {
                    'missing_before': missing_before[col],
                    'missing_after': missing_after[col],
                }
                for col in features
            },
            'rows_removed': rows_before - len(self.rows),
            'rows_remaining': len(self.rows),
        }
        if strategy == 'constant':
            summary['fill_value'] = constant_value

        self.preprocessing_log.append(summary)
        return summary

    def apply_feature_scaling(self, features, method):
        """
        Scale numeric features and keep the learned parameters.

        Returns:
            dict: Summary of scaling applied
        """
        logging.info(f"Applying feature scaling ({method})...")

        self.rows, self.scale_parameters = scale_features(self.rows, features, method)

        summary = {
            'action': 'feature_scaling',
            'method': method,
            'columns_affected': list(self.scale_parameters.features),
            'details': self.scale_parameters.to_dict(),
            'skipped_columns': [col for col in features if col not in self.scale_parameters],
        }

        self.preprocessing_log.append(summary)
        return summary

    def get_processed_rows(self):
        return self.rows

    def get_scale_parameters(self):
        return self.scale_parameters

    def get_preprocessing_log(self):
        """
        Get the complete preprocessing log for reporting.

        Returns:
            list: List of preprocessing steps applied with details
        """
        return self.preprocessing_log

    def get_summary(self):
        """
        Get a summary of all preprocessing applied.

        Returns:
            dict: Summary statistics
        """
        return {
            'rows_original': len(self.original_rows),
            'rows_final': len(self.rows),
            'rows_removed': len(self.original_rows) - len(self.rows),
            'columns': len(self.columns),
            'preprocessing_steps': len(self.preprocessing_log),
            'steps': self.preprocessing_log,
        }
