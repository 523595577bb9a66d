"""
Feature importance - linear weights normalised to [0, 1], zeros otherwise
"""

import numpy as np
import pytest

from svmlab.components.feature_importance import calculate_feature_importance
from svmlab.components.model_trainer import SVMConfig, TrainedModel, train_svm_model


class FixedWeights:
    def __init__(self, coef):
        self.coef_ = np.array(coef)
        self.classes_ = np.array([0, 1])


def test_linear_importance_is_normalised_and_sorted():
    """Largest absolute weight maps to exactly 1.0"""
    model = TrainedModel(FixedWeights([[0.5, -2.0, 1.0]]), SVMConfig(kernel='linear'), ['a', 'b', 'c'])
    importances = calculate_feature_importance(model)

    assert [item.feature for item in importances] == ['b', 'c', 'a']
    assert [item.importance for item in importances] == [1.0, 0.5, 0.25]


def test_multiclass_weights_are_summed_in_absolute_value():
    model = TrainedModel(
        FixedWeights([[1.0, 0.0], [-1.0, 0.5], [0.0, -0.5]]), SVMConfig(kernel='linear'), ['a', 'b']
    )
    importances = {item.feature: item.importance for item in calculate_feature_importance(model)}

    assert importances == {'a': 1.0, 'b': 0.5}


def test_all_zero_weights_give_zero_importance():
    model = TrainedModel(FixedWeights([[0.0, 0.0]]), SVMConfig(kernel='linear'), ['a', 'b'])

    assert all(item.importance == 0.0 for item in calculate_feature_importance(model))


@pytest.mark.parametrize("kernel", ['rbf', 'polynomial', 'sigmoid'])
def test_non_linear_kernels_score_zero(separable_split, kernel):
    """No input-space weight vector: every feature is 0, in feature order"""
    data, labels = separable_split
    model = train_svm_model(data, labels, SVMConfig(kernel=kernel, probabilistic=False), ['x1', 'x2']).model
    importances = calculate_feature_importance(model, ['x1', 'x2'])

    assert [item.feature for item in importances] == ['x1', 'x2']
    assert all(item.importance == 0.0 for item in importances)


def test_trained_linear_model_max_is_one(separable_split):
    data, labels = separable_split
    model = train_svm_model(data, labels, SVMConfig(kernel='linear', probabilistic=False), ['x1', 'x2']).model
    importances = calculate_feature_importance(model)

    assert max(item.importance for item in importances) == 1.0
    assert all(0.0 <= item.importance <= 1.0 for item in importances)
    assert importances[0].to_dict()['importance'] == 1.0
