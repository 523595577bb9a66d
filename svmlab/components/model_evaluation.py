"""
Model evaluation.

Predicts every testing row and derives the confusion matrix and per-class
precision, recall and F1. Classes are the sorted union of the encoded true and
predicted labels, so the matrix also covers labels that only one side produced.
"""

import sys
from dataclasses import asdict, dataclass
from typing import Any, List, Optional

from sklearn.metrics import accuracy_score, confusion_matrix, precision_recall_fscore_support

from svmlab.components.model_trainer import TrainedModel, encode_labels, to_feature_matrix
from svmlab.exception import CustomException, ModelEvaluationError
from svmlab.logger import logging


@dataclass
class ModelMetrics:
    accuracy: float
    precision: List[float]
    recall: List[float]
    f1_score: List[float]
    confusion_matrix: List[List[int]]
    class_labels: List[Any]
    cross_validation: Optional[List[float]] = None

    def macro_average(self, metric):
        """Unweighted mean of 'precision', 'recall' or 'f1_score' over classes."""
        values = getattr(self, metric)
        return sum(values) / len(values) if values else 0.0

    def to_dict(self):
        return asdict(self)


def calculate_metrics(model: TrainedModel, testing_data, testing_labels) -> ModelMetrics:
    """
    Evaluate a trained model on held-out rows.

    Args:
        model (TrainedModel): Trained handle
        testing_data: Testing rows (same shape as the training rows)
        testing_labels (list): True labels as they appear in the dataset

    Returns:
        ModelMetrics
    """
    X = to_feature_matrix(testing_data, model.feature_names)
    labels = list(testing_labels)
    if X.shape[0] == 0:
        raise ModelEvaluationError("Cannot evaluate a model on an empty testing set")
    if X.shape[0] != len(labels):
        raise ModelEvaluationError(f"Testing data has {X.shape[0]} rows but {len(labels)} labels were given")

    try:
        y_true = encode_labels(labels)
        y_pred = model.predict(X)

        classes = sorted(set(y_true) | set(y_pred))
        cm = confusion_matrix(y_true, y_pred, labels=classes)
        precision, recall, f1, _ = precision_recall_fscore_support(
            y_true, y_pred, labels=classes, average=None, zero_division=0
        )
        accuracy = accuracy_score(y_true, y_pred)

        metrics = ModelMetrics(
            accuracy=float(accuracy),
            precision=[float(v) for v in precision],
            recall=[float(v) for v in recall],
            f1_score=[float(v) for v in f1],
            confusion_matrix=cm.astype(int).tolist(),
            class_labels=[model.decode(c) for c in classes],
        )
        logging.info(
            f"Evaluation on {len(y_true)} rows - Acc: {metrics.accuracy:.4f}, "
            f"macro F1: {metrics.macro_average('f1_score'):.4f}, classes: {metrics.class_labels}"
        )
        return metrics

    except CustomException:
        raise
    except Exception as e:
        logging.error(f"Error in calculate_metrics: {e}")
        raise ModelEvaluationError(e, sys)
