import sys
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from svmlab.components.data_ingestion import Dataset
from svmlab.components.data_split import SplitResult, train_test_split_rows
from svmlab.components.feature_scaling import ScaleParameters
from svmlab.exception import CustomException, ValidationError
from svmlab.logger import logging
from svmlab.utils.constants import DEFAULT_PREPROCESSING_OPTIONS, IMPUTATION_STRATEGIES, SCALING_METHODS
from svmlab.utils.preprocessing_applicator import PreprocessingApplicator


@dataclass(frozen=True)
class PreprocessingOptions:
    """User choices for turning a raw dataset into training-ready rows."""

    target_variable: str = ""
    features: Tuple[str, ...] = ()
    missing_value_strategy: str = DEFAULT_PREPROCESSING_OPTIONS['missing_value_strategy']
    constant_value: Optional[Any] = None
    scaling: str = DEFAULT_PREPROCESSING_OPTIONS['scaling']
    train_test_split: float = DEFAULT_PREPROCESSING_OPTIONS['train_test_split']
    random_state: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'features', tuple(self.features))

    def replace(self, **changes):
        return replace(self, **changes)

    def validate(self, columns: Optional[Sequence[str]] = None):
        """
        Check the options against each other and, when given, the dataset columns.

        Raises:
            ValidationError: with a message the user can act on
        """
        if not self.target_variable:
            raise ValidationError("Please select a target variable")
        if not self.features:
            raise ValidationError("Please select at least one feature")
        if self.target_variable in self.features:
            raise ValidationError(f"Target variable '{self.target_variable}' cannot also be a feature")
        if len(set(self.features)) != len(self.features):
            raise ValidationError(f"Duplicate features selected: {list(self.features)}")
        if self.missing_value_strategy not in IMPUTATION_STRATEGIES:
            raise ValidationError(
                f"Unknown missing value strategy '{self.missing_value_strategy}'. "
                f"Expected one of {IMPUTATION_STRATEGIES}"
            )
        if self.missing_value_strategy == 'constant' and self.constant_value is None:
            raise ValidationError("A constant value is required for the 'constant' missing value strategy")
        if self.scaling not in SCALING_METHODS:
            raise ValidationError(f"Unknown scaling method '{self.scaling}'. Expected one of {SCALING_METHODS}")
        if not 0 < self.train_test_split < 1:
            raise ValidationError(
                f"Train/test split ratio must be between 0 and 1 (exclusive), got {self.train_test_split}"
            )

        if columns is not None:
            if self.target_variable not in columns:
                raise ValidationError(f"Target column {self.target_variable} not found")
            missing = [f for f in self.features if f not in columns]
            if missing:
                raise ValidationError(f"Feature columns not found in dataset: {', '.join(missing)}")


@dataclass
class PreprocessingResult:
    """Everything a preprocessing run produces."""

    split: SplitResult
    scale_parameters: ScaleParameters
    options: PreprocessingOptions
    preprocessing_log: List[Dict[str, Any]] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def feature_names(self):
        return list(self.options.features)


class DataTransformation:
    """Impute, scale and split a dataset according to PreprocessingOptions."""

    def __init__(self, options: PreprocessingOptions):
        self.options = options

    def initiate_data_transformation(self, dataset: Dataset) -> PreprocessingResult:
        """
        Run imputation, scaling and the train/test split, in that order.

        Scaling statistics come from the full post-imputation dataset, before
        the split.

        Args:
            dataset (Dataset): Parsed input data

        Returns:
            PreprocessingResult
        """
        options = self.options
        options.validate(dataset.columns)

        try:
            target = options.target_variable
            features = list(options.features)
            selected = features + [target]

            # Only the configured columns take part; feature order follows the options
            rows = [{col: row.get(col) for col in selected} for row in dataset.rows]
            logging.info(f"Preprocessing {len(rows)} rows: target='{target}', features={features}")

            applicator = PreprocessingApplicator(rows, selected, target_column=target)
            applicator.apply_missing_value_imputation(
                selected, options.missing_value_strategy, options.constant_value
            )
            applicator.apply_feature_scaling(features, options.scaling)

            processed_rows = applicator.get_processed_rows()
            split = train_test_split_rows(
                processed_rows, target, options.train_test_split, random_state=options.random_state
            )

            preprocessing_log = applicator.get_preprocessing_log()
            preprocessing_log.append(
                {
                    'action': 'train_test_split',
                    'columns_affected': [target],
                    'details': {
                        'split_ratio': options.train_test_split,
                        'training_rows': len(split.training_data),
                        'testing_rows': len(split.testing_data),
                        'random_state': options.random_state,
                    },
                    'description': f"Held out {len(split.testing_data)} of {len(processed_rows)} rows for testing.",
                }
            )

            return PreprocessingResult(
                split=split,
                scale_parameters=applicator.get_scale_parameters(),
                options=options,
                preprocessing_log=preprocessing_log,
                summary=applicator.get_summary(),
            )

        except CustomException:
            raise
        except Exception as e:
            logging.error(f"Error in data transformation: {e}")
            raise CustomException(e, sys)


def preprocess_data(dataset: Dataset, options: PreprocessingOptions) -> PreprocessingResult:
    return DataTransformation(options).initiate_data_transformation(dataset)
