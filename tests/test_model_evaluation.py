"""
Metrics - perfect classifier, confusion matrix sums, class union
"""

import numpy as np
import pytest

from svmlab.components.model_evaluation import calculate_metrics
from svmlab.components.model_trainer import SVMConfig, TrainedModel
from svmlab.exception import ModelEvaluationError
from svmlab.utils.constants import LABEL_KIND_CATEGORICAL


class LookupEstimator:
    """Predicts the label stored for each row's first feature."""

    def __init__(self, mapping):
        self.mapping = mapping
        self.classes_ = np.array(sorted(set(mapping.values())))

    def fit(self, X, y):
        return self

    def predict(self, X):
        return np.array([self.mapping[float(row[0])] for row in X])


def make_model(mapping, label_kind='numeric'):
    return TrainedModel(
        LookupEstimator(mapping),
        SVMConfig(kernel='linear', probabilistic=False),
        feature_names=['key'],
        label_kind=label_kind,
    )


def rows_for(keys):
    return [{'key': float(k)} for k in keys]


def test_perfect_classifier():
    """Predictions equal the truth: every metric is 1 and the matrix is diagonal"""
    model = make_model({0.0: 0, 1.0: 1, 2.0: 2})
    keys = [0, 1, 2, 2, 1, 0, 0]
    metrics = calculate_metrics(model, rows_for(keys), keys)

    assert metrics.accuracy == 1.0
    assert metrics.precision == [1.0, 1.0, 1.0]
    assert metrics.recall == [1.0, 1.0, 1.0]
    assert metrics.f1_score == [1.0, 1.0, 1.0]
    cm = np.array(metrics.confusion_matrix)
    assert (cm == np.diag(np.diag(cm))).all(), f"Confusion matrix not diagonal: {cm}"
    assert metrics.class_labels == [0, 1, 2]


def test_confusion_matrix_sums_match_label_counts():
    """Rows sum to true counts, columns sum to predicted counts"""
    model = make_model({0.0: 0, 1.0: 1, 2.0: 1, 3.0: 0})
    keys = [0, 1, 2, 3, 3, 1]
    truth = [0, 1, 0, 1, 0, 1]
    predicted = [0, 1, 1, 0, 0, 1]
    metrics = calculate_metrics(model, rows_for(keys), truth)
    cm = np.array(metrics.confusion_matrix)

    assert cm.sum(axis=1).tolist() == [truth.count(0), truth.count(1)]
    assert cm.sum(axis=0).tolist() == [predicted.count(0), predicted.count(1)]
    assert metrics.accuracy == pytest.approx(4 / 6)
    # class 0: tp=2, fp=1, fn=1
    assert metrics.precision[0] == pytest.approx(2 / 3)
    assert metrics.recall[0] == pytest.approx(2 / 3)


def test_classes_are_union_of_true_and_predicted():
    """A label only the model predicts still gets a row and a column"""
    model = make_model({0.0: 0, 1.0: 5})
    metrics = calculate_metrics(model, rows_for([0, 1]), [0, 0])

    assert metrics.class_labels == [0, 5]
    assert metrics.confusion_matrix == [[1, 1], [0, 0]]
    assert metrics.precision[1] == 0.0, "Undefined precision should be 0"
    assert metrics.recall[1] == 0.0


def test_categorical_labels_are_decoded():
    model = make_model({0.0: ord('a'), 1.0: ord('b')}, label_kind=LABEL_KIND_CATEGORICAL)
    metrics = calculate_metrics(model, rows_for([0, 1, 1]), ['apple', 'banana', 'berry'])

    assert metrics.class_labels == ['a', 'b']
    assert metrics.accuracy == 1.0


def test_macro_average_and_dict():
    model = make_model({0.0: 0, 1.0: 1})
    metrics = calculate_metrics(model, rows_for([0, 1]), [0, 1])

    assert metrics.macro_average('f1_score') == 1.0
    as_dict = metrics.to_dict()
    assert as_dict['accuracy'] == 1.0 and as_dict['cross_validation'] is None


def test_empty_testing_set_raises():
    with pytest.raises(ModelEvaluationError):
        calculate_metrics(make_model({0.0: 0}), [], [])


def test_length_mismatch_raises():
    with pytest.raises(ModelEvaluationError):
        calculate_metrics(make_model({0.0: 0}), rows_for([0, 0]), [0])
