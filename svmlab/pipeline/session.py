"""
Workflow session.

Holds the state of one user session across the data, model and prediction
steps, and keeps the steps consistent with each other:

- a new dataset or new preprocessing options discard the processed data and
  the trained model
- a new model configuration discards the trained model
- a failed step records its message with status ``error`` and clears that
  step's result before the exception propagates
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from svmlab.components.data_ingestion import Dataset
from svmlab.components.data_transformation import PreprocessingOptions, PreprocessingResult, preprocess_data
from svmlab.components.feature_importance import FeatureImportance, calculate_feature_importance
from svmlab.components.model_evaluation import ModelMetrics, calculate_metrics
from svmlab.components.model_trainer import ModelTrainer, SVMConfig, TrainedModel
from svmlab.components.predictor import PredictionResult, check_required_features, predict, predict_batch
from svmlab.exception import CustomException, PredictionError, ValidationError
from svmlab.logger import logging
from svmlab.utils.feature_type_inference import FeatureTypeInference
from svmlab.utils.formatting import format_duration, format_percent


class DataProcessingStatus(str, Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    SUCCESS = 'success'
    ERROR = 'error'


class ModelStatus(str, Enum):
    UNTRAINED = 'untrained'
    TRAINING = 'training'
    TRAINED = 'trained'
    ERROR = 'error'


@dataclass
class DataState:
    dataset: Optional[Dataset] = None
    status: DataProcessingStatus = DataProcessingStatus.IDLE
    error: Optional[str] = None
    preprocessing_options: PreprocessingOptions = field(default_factory=PreprocessingOptions)
    processed: Optional[PreprocessingResult] = None


@dataclass
class ModelState:
    config: SVMConfig = field(default_factory=SVMConfig)
    status: ModelStatus = ModelStatus.UNTRAINED
    error: Optional[str] = None
    model: Optional[TrainedModel] = None
    metrics: Optional[ModelMetrics] = None
    feature_importance: List[FeatureImportance] = field(default_factory=list)
    training_duration: Optional[float] = None


@dataclass
class PredictionState:
    input_data: Dict[str, Any] = field(default_factory=dict)
    prediction_result: Optional[PredictionResult] = None
    batch_inputs: List[Dict[str, Any]] = field(default_factory=list)
    batch_results: List[PredictionResult] = field(default_factory=list)
    status: DataProcessingStatus = DataProcessingStatus.IDLE
    error: Optional[str] = None


class WorkflowSession:
    """
    Drives dataset -> preprocessing -> training -> prediction for one user.

    Example:
        session = WorkflowSession()
        session.load_dataset(df)
        session.update_preprocessing_options(target_variable='label', features=['a', 'b'])
        session.run_preprocessing()
        session.train_model()
        session.predict_single({'a': 1.0, 'b': 2.0})
    """

    def __init__(self, model_trainer=None):
        self.data = DataState()
        self.model = ModelState()
        self.prediction = PredictionState()
        self.model_trainer = model_trainer or ModelTrainer()

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------
    def load_dataset(self, dataset, filename=None, size=0):
        """
        Make ``dataset`` the session's data; a DataFrame is converted first.

        Options are reset to their defaults since the new columns may differ.
        """
        self.data.status = DataProcessingStatus.LOADING
        try:
            if isinstance(dataset, pd.DataFrame):
                dataset = Dataset.from_dataframe(dataset, filename=filename, size=size)
        except CustomException as e:
            self._fail_data(e)
            raise

        self.data = DataState(dataset=dataset, status=DataProcessingStatus.SUCCESS)
        self._invalidate_model()
        self.reset_predictions()
        logging.info(f"Session dataset loaded: {len(dataset)} rows, columns={dataset.columns}")
        return dataset

    def clear_dataset(self):
        self.data = DataState()
        self._invalidate_model()
        self.reset_predictions()
        logging.info("Session dataset cleared")

    def dataset_summary(self):
        if self.data.dataset is None:
            raise ValidationError("Please upload a dataset first")
        return FeatureTypeInference(self.data.dataset).get_summary()

    def update_preprocessing_options(self, **changes):
        self.data.preprocessing_options = self.data.preprocessing_options.replace(**changes)
        self.data.processed = None
        self._invalidate_model()
        return self.data.preprocessing_options

    def run_preprocessing(self) -> PreprocessingResult:
        if self.data.dataset is None:
            raise ValidationError("Please upload a dataset first")

        self.data.status = DataProcessingStatus.LOADING
        self.data.error = None
        try:
            result = preprocess_data(self.data.dataset, self.data.preprocessing_options)
        except CustomException as e:
            self._fail_data(e)
            raise

        self.data.processed = result
        self.data.status = DataProcessingStatus.SUCCESS
        self._invalidate_model()
        logging.info(
            f"Preprocessing finished: {len(result.split.training_data)} training rows, "
            f"{len(result.split.testing_data)} testing rows"
        )
        return result

    # ------------------------------------------------------------------
    # Model
    # ------------------------------------------------------------------
    def update_model_config(self, **changes):
        self.model.config = self.model.config.replace(**changes)
        self._invalidate_model()
        return self.model.config

    def apply_preset(self, name):
        self.model.config = SVMConfig.from_preset(name)
        self._invalidate_model()
        logging.info(f"Applied '{name}' preset: {self.model.config.to_dict()}")
        return self.model.config

    def train_model(self, cross_validate=False, random_state=None) -> ModelMetrics:
        """
        Train on the processed training split and evaluate on the testing split.

        Args:
            cross_validate (bool): Also score the configuration with stratified
                k-fold cross-validation on the training split
            random_state (int): Seed for the cross-validation folds

        Returns:
            ModelMetrics
        """
        processed = self.data.processed
        if processed is None:
            raise ValidationError("Please preprocess the data before training")

        split = processed.split
        feature_names = processed.feature_names
        config = self.model.config

        self._invalidate_model()
        self.model.status = ModelStatus.TRAINING
        try:
            training = self.model_trainer.initiate_model_trainer(
                split.training_data, split.training_labels, config, feature_names
            )
            metrics = calculate_metrics(training.model, split.testing_data, split.testing_labels)
            if cross_validate:
                metrics.cross_validation = self.model_trainer.cross_validate(
                    split.training_data, split.training_labels, config, feature_names, random_state=random_state
                )
            importance = calculate_feature_importance(training.model, feature_names)
        except CustomException as e:
            self.model.status = ModelStatus.ERROR
            self.model.error = str(e)
            logging.error(f"Training failed: {e}")
            raise

        self.model.model = training.model
        self.model.metrics = metrics
        self.model.feature_importance = importance
        self.model.training_duration = training.training_time
        self.model.status = ModelStatus.TRAINED
        logging.info(
            f"Model trained in {format_duration(training.training_time)}, "
            f"accuracy {format_percent(metrics.accuracy)}"
        )
        return metrics

    def reset_model(self):
        self._invalidate_model()
        self.reset_predictions()

    def _invalidate_model(self):
        self.model = ModelState(config=self.model.config)

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def _require_model(self):
        if self.model.model is None or self.data.processed is None:
            raise PredictionError("Please train a model before making predictions")
        return self.model.model, self.data.processed

    def predict_single(self, input_data) -> PredictionResult:
        model, processed = self._require_model()

        self.prediction.input_data = dict(input_data)
        self.prediction.status = DataProcessingStatus.LOADING
        self.prediction.error = None
        try:
            result = predict(model, input_data, processed.feature_names, processed.scale_parameters)
        except CustomException as e:
            self.prediction.prediction_result = None
            self._fail_prediction(e)
            raise

        self.prediction.prediction_result = result
        self.prediction.status = DataProcessingStatus.SUCCESS
        return result

    def predict_batch(self, inputs) -> List[PredictionResult]:
        model, processed = self._require_model()

        inputs = [dict(item) for item in inputs]
        self.prediction.batch_inputs = inputs
        self.prediction.status = DataProcessingStatus.LOADING
        self.prediction.error = None
        try:
            check_required_features(inputs, processed.feature_names)
            results = predict_batch(model, inputs, processed.feature_names, processed.scale_parameters)
        except CustomException as e:
            self.prediction.batch_results = []
            self._fail_prediction(e)
            raise

        self.prediction.batch_results = results
        self.prediction.status = DataProcessingStatus.SUCCESS
        return results

    def reset_predictions(self):
        self.prediction = PredictionState()

    # ------------------------------------------------------------------
    # Failure bookkeeping
    # ------------------------------------------------------------------
    def _fail_data(self, error):
        self.data.status = DataProcessingStatus.ERROR
        self.data.error = str(error)
        self.data.processed = None
        logging.error(f"Data step failed: {error}")

    def _fail_prediction(self, error):
        self.prediction.status = DataProcessingStatus.ERROR
        self.prediction.error = str(error)
        logging.error(f"Prediction failed: {error}")
