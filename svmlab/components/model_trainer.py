import numbers
import os
import pickle
import sys
import time
from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, List, Optional, Protocol, Sequence, Union

import numpy as np
import pandas as pd
from scipy.sparse import issparse
from sklearn.model_selection import StratifiedKFold, cross_val_score
from sklearn.svm import SVC

from svmlab.exception import CustomException, ModelTrainingError, PredictionError, ValidationError
from svmlab.logger import logging
from svmlab.utils import load_object, save_object
from svmlab.utils.constants import (
    DEFAULT_SVM_CONFIG,
    GAMMA_MODES,
    KERNEL_TYPES,
    LABEL_KIND_CATEGORICAL,
    LABEL_KIND_NUMERIC,
    MAX_CV_FOLDS,
    MIN_CV_FOLDS,
    SVM_PRESETS,
)
from svmlab.utils.preprocessing_utils import is_missing, is_numeric, is_valid_number, to_python_scalar


@dataclass(frozen=True)
class SVMConfig:
    kernel: str = DEFAULT_SVM_CONFIG['kernel']
    C: float = DEFAULT_SVM_CONFIG['C']
    gamma: Union[str, float] = DEFAULT_SVM_CONFIG['gamma']
    degree: int = DEFAULT_SVM_CONFIG['degree']
    coef0: float = DEFAULT_SVM_CONFIG['coef0']
    probabilistic: bool = DEFAULT_SVM_CONFIG['probabilistic']

    @classmethod
    def from_preset(cls, name):
        if name not in SVM_PRESETS:
            raise ValidationError(f"Unknown preset '{name}'. Expected one of {list(SVM_PRESETS)}")
        return cls(**SVM_PRESETS[name])

    def replace(self, **changes):
        return replace(self, **changes)

    def validate(self):
        if self.kernel not in KERNEL_TYPES:
            raise ValidationError(f"Unknown kernel '{self.kernel}'. Expected one of {list(KERNEL_TYPES)}")
        if not is_valid_number(self.C) or self.C <= 0:
            raise ValidationError(f"Regularization parameter C must be a positive number, got {self.C}")
        if isinstance(self.gamma, str):
            if self.gamma not in GAMMA_MODES:
                raise ValidationError(f"Gamma must be one of {GAMMA_MODES} or a positive number, got '{self.gamma}'")
        elif not is_valid_number(self.gamma) or self.gamma <= 0:
            raise ValidationError(f"Gamma must be one of {GAMMA_MODES} or a positive number, got {self.gamma}")
        if not isinstance(self.degree, numbers.Integral) or isinstance(self.degree, bool) or self.degree < 1:
            raise ValidationError(f"Polynomial degree must be a positive integer, got {self.degree}")
        if not is_valid_number(self.coef0):
            raise ValidationError(f"coef0 must be a number, got {self.coef0}")

    def to_dict(self):
        return asdict(self)


@dataclass
class ModelTrainerConfig:
    trained_model_file_path = os.path.join("artifacts", "svm_model.pkl")


class SVMEstimator(Protocol):
    """Capabilities the core needs from an SVM solver."""

    classes_: Any

    def fit(self, X, y): ...

    def predict(self, X): ...


def build_svc(config: SVMConfig) -> SVC:
    """
    Build an unfitted scikit-learn SVC.

    gamma is passed only for the rbf kernel, degree and coef0 only for the
    polynomial kernel; other kernels keep the solver defaults.
    """
    params = {
        "kernel": KERNEL_TYPES[config.kernel],
        "C": float(config.C),
        "probability": bool(config.probabilistic),
    }
    if config.kernel == "rbf":
        params["gamma"] = config.gamma
    if config.kernel == "polynomial":
        params["degree"] = int(config.degree)
        params["coef0"] = float(config.coef0)
    return SVC(**params)


# ---------------------------------------------------------------------------
# Label encoding
# ---------------------------------------------------------------------------
def encode_label(label):
    """
    Map a label into the solver's numeric label space.

    Numbers pass through; anything else becomes the code point of its first
    character, so distinct labels sharing a first character collide.
    """
    if is_missing(label):
        raise ValidationError("Target labels must not be missing")
    if is_numeric(label):
        return to_python_scalar(label)
    return ord(str(label)[0])


def encode_labels(labels):
    return [encode_label(label) for label in labels]


def label_kind_for(labels):
    if all(is_numeric(label) for label in labels):
        return LABEL_KIND_NUMERIC
    return LABEL_KIND_CATEGORICAL


def decode_label(encoded, label_kind):
    """Inverse of encode_label; categorical labels come back as one character."""
    encoded = to_python_scalar(encoded)
    if label_kind == LABEL_KIND_CATEGORICAL:
        return chr(int(encoded))
    return encoded


def to_feature_matrix(data, feature_names: Optional[Sequence[str]] = None) -> np.ndarray:
    """
    Convert rows into a dense float matrix.

    Args:
        data: list of row mappings, list of sequences, ndarray, DataFrame or
            scipy sparse matrix
        feature_names: Column order for row mappings / DataFrames; rows keep
            their own key order when omitted

    Returns:
        np.ndarray: shape (n_rows, n_features); missing and non-numeric cells are 0
    """
    if issparse(data):
        return np.asarray(data.toarray(), dtype=float)

    if isinstance(data, pd.DataFrame):
        columns = list(feature_names) if feature_names is not None else list(data.columns)
        data = data.reindex(columns=columns).to_dict(orient="records")

    matrix = []
    for row in data:
        if isinstance(row, Mapping):
            values = [row.get(f) for f in feature_names] if feature_names is not None else list(row.values())
        else:
            values = list(row)
        matrix.append([float(v) if is_valid_number(v) else 0.0 for v in values])

    if not matrix:
        return np.empty((0, len(feature_names) if feature_names is not None else 0))
    return np.asarray(matrix, dtype=float)


# ---------------------------------------------------------------------------
# Trained model handle
# ---------------------------------------------------------------------------
class TrainedModel:
    """
    Fitted solver plus what is needed to interpret its outputs.

    The handle is created by one training call and never retrained in place.
    """

    def __init__(self, estimator, config: SVMConfig, feature_names=None, label_kind=LABEL_KIND_NUMERIC):
        self.estimator = estimator
        self.config = config
        self.feature_names = list(feature_names) if feature_names is not None else None
        self.label_kind = label_kind

    @property
    def kernel(self):
        return self.config.kernel

    @property
    def classes(self) -> List[Any]:
        return [to_python_scalar(c) for c in self.estimator.classes_]

    @property
    def class_labels(self) -> List[Any]:
        return [self.decode(c) for c in self.classes]

    @property
    def supports_probability(self) -> bool:
        return bool(self.config.probabilistic) and hasattr(self.estimator, "predict_proba")

    def decode(self, encoded):
        return decode_label(encoded, self.label_kind)

    def predict(self, X) -> List[Any]:
        """Encoded predictions for every row of X."""
        predictions = self.estimator.predict(X)
        return [to_python_scalar(p) for p in np.ravel(predictions)]

    def predict_probability(self, X) -> List[dict]:
        """Per-row mapping of encoded class to probability."""
        if not self.supports_probability:
            raise PredictionError("Model was trained without probability estimates")
        probabilities = self.estimator.predict_proba(X)
        classes = self.classes
        return [
            {label: float(p) for label, p in zip(classes, row)}
            for row in np.atleast_2d(probabilities)
        ]

    def linear_weights(self) -> Optional[np.ndarray]:
        """
        Absolute weights of w = sum(alpha_i * y_i * x_i) for a linear kernel.

        With more than two classes the one-vs-one weight vectors are summed in
        absolute value. Returns None for any other kernel.
        """
        if self.kernel != "linear":
            return None

        coef = getattr(self.estimator, "coef_", None)
        if coef is None:
            coef = self.estimator.dual_coef_ @ self.estimator.support_vectors_
        if issparse(coef):
            coef = coef.toarray()
        return np.abs(np.atleast_2d(np.asarray(coef, dtype=float))).sum(axis=0)

    def serialize(self) -> bytes:
        try:
            return pickle.dumps(
                {
                    "estimator": self.estimator,
                    "config": self.config.to_dict(),
                    "feature_names": self.feature_names,
                    "label_kind": self.label_kind,
                }
            )
        except Exception as e:
            raise CustomException(e, sys)

    @classmethod
    def deserialize(cls, payload: bytes) -> "TrainedModel":
        try:
            state = pickle.loads(payload)
            return cls(
                estimator=state["estimator"],
                config=SVMConfig(**state["config"]),
                feature_names=state["feature_names"],
                label_kind=state["label_kind"],
            )
        except Exception as e:
            raise CustomException(e, sys)

    def save(self, file_path=None):
        file_path = file_path or ModelTrainerConfig.trained_model_file_path
        save_object(file_path, self.serialize())
        logging.info(f"Model saved to {file_path}")
        return file_path

    @classmethod
    def load(cls, file_path=None) -> "TrainedModel":
        file_path = file_path or ModelTrainerConfig.trained_model_file_path
        return cls.deserialize(load_object(file_path))

    def __repr__(self):
        return f"TrainedModel(kernel={self.kernel!r}, classes={self.class_labels!r})"


@dataclass
class TrainingResult:
    model: TrainedModel
    training_time: float


class ModelTrainer:
    def __init__(self, estimator_factory: Callable[[SVMConfig], SVMEstimator] = build_svc):
        self.model_trainer_config = ModelTrainerConfig()
        self.estimator_factory = estimator_factory

    def _prepare(self, training_data, training_labels, config, feature_names):
        config.validate()

        X = to_feature_matrix(training_data, feature_names)
        labels = list(training_labels)
        if X.shape[0] == 0:
            raise ValidationError("Training data is empty")
        if X.shape[0] != len(labels):
            raise ValidationError(
                f"Training data has {X.shape[0]} rows but {len(labels)} labels were given"
            )
        y = np.asarray(encode_labels(labels))
        return X, y, label_kind_for(labels)

    def initiate_model_trainer(
        self,
        training_data,
        training_labels,
        config: SVMConfig,
        feature_names: Optional[Sequence[str]] = None,
    ) -> TrainingResult:
        """Fit an SVM and return the trained handle with the elapsed training time (seconds)."""
        X, y, label_kind = self._prepare(training_data, training_labels, config, feature_names)

        try:
            logging.info(
                f"Training SVM ({config.kernel}, C={config.C}) on {X.shape[0]} rows x {X.shape[1]} features"
            )
            start_time = time.perf_counter()
            estimator = self.estimator_factory(config)
            estimator.fit(X, y)
            training_time = time.perf_counter() - start_time

            model = TrainedModel(estimator, config, feature_names=feature_names, label_kind=label_kind)
            logging.info(f"Training finished in {training_time:.3f}s, classes={model.class_labels}")
            return TrainingResult(model=model, training_time=training_time)

        except Exception as e:
            logging.error(f"Exception occurred in model training: {e}")
            raise ModelTrainingError(e, sys)

    def cross_validate(
        self,
        training_data,
        training_labels,
        config: SVMConfig,
        feature_names: Optional[Sequence[str]] = None,
        random_state: Optional[int] = None,
    ) -> List[float]:
        """
        Accuracy of each fold of a stratified k-fold cross-validation.

        Folds = min(5, smallest class size), never fewer than 2.
        """
        X, y, _ = self._prepare(training_data, training_labels, config, feature_names)

        try:
            _, counts = np.unique(y, return_counts=True)
            cv_splits = min(MAX_CV_FOLDS, int(counts.min()))
            if cv_splits < MIN_CV_FOLDS:
                logging.warning(f"Dataset too small or imbalanced for cross-validation. Min class size: {counts.min()}")
                cv_splits = MIN_CV_FOLDS

            cv = StratifiedKFold(n_splits=cv_splits, shuffle=True, random_state=random_state)
            scores = cross_val_score(self.estimator_factory(config), X, y, cv=cv, scoring="accuracy")
            logging.info(f"Cross-validation ({cv_splits} folds) accuracy: {np.round(scores, 4).tolist()}")
            return [float(s) for s in scores]

        except Exception as e:
            logging.error(f"Exception occurred in cross-validation: {e}")
            raise ModelTrainingError(e, sys)


def train_svm_model(training_data, training_labels, config: SVMConfig, feature_names=None) -> TrainingResult:
    return ModelTrainer().initiate_model_trainer(training_data, training_labels, config, feature_names)


def cross_validate_model(training_data, training_labels, config: SVMConfig, feature_names=None, random_state=None):
    return ModelTrainer().cross_validate(training_data, training_labels, config, feature_names, random_state)
