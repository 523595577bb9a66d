"""
Model training - config validation, kernel parameters, label encoding, persistence
"""

import numpy as np
import pytest

from svmlab.components.model_evaluation import calculate_metrics
from svmlab.components.model_trainer import (
    ModelTrainer,
    SVMConfig,
    TrainedModel,
    build_svc,
    cross_validate_model,
    decode_label,
    encode_label,
    label_kind_for,
    to_feature_matrix,
    train_svm_model,
)
from svmlab.exception import ModelTrainingError, ValidationError
from svmlab.utils.constants import LABEL_KIND_CATEGORICAL, LABEL_KIND_NUMERIC


def test_default_config():
    config = SVMConfig()

    assert (config.kernel, config.C, config.gamma, config.degree, config.coef0, config.probabilistic) == (
        'rbf', 1.0, 'scale', 3, 0.0, True
    )


def test_presets():
    assert SVMConfig.from_preset('basic').kernel == 'linear'
    assert SVMConfig.from_preset('accurate').C == 10.0
    complex_config = SVMConfig.from_preset('complex')
    assert complex_config.kernel == 'polynomial' and complex_config.coef0 == 1.0

    with pytest.raises(ValidationError):
        SVMConfig.from_preset('turbo')


@pytest.mark.parametrize(
    "changes",
    [{'kernel': 'tanh'}, {'C': 0}, {'C': -1.0}, {'gamma': 'huge'}, {'gamma': 0.0}, {'degree': 0}, {'degree': 2.5}],
)
def test_invalid_config_raises(changes):
    with pytest.raises(ValidationError):
        SVMConfig().replace(**changes).validate()


def test_build_svc_passes_kernel_specific_parameters():
    """gamma only for rbf, degree/coef0 only for polynomial"""
    rbf = build_svc(SVMConfig(kernel='rbf', gamma=0.5))
    assert rbf.kernel == 'rbf' and rbf.gamma == 0.5

    poly = build_svc(SVMConfig(kernel='polynomial', degree=4, coef0=2.0, gamma=0.5))
    assert poly.kernel == 'poly' and poly.degree == 4 and poly.coef0 == 2.0
    assert poly.gamma == 'scale', "gamma should stay at the solver default for polynomial"

    linear = build_svc(SVMConfig(kernel='linear', C=3.0, probabilistic=False))
    assert linear.C == 3.0 and linear.probability is False


def test_label_encoding():
    """Numbers pass through, text becomes the code of its first character"""
    assert encode_label(2) == 2
    assert encode_label(1.5) == 1.5
    assert encode_label('yes') == ord('y')
    assert encode_label('yellow') == encode_label('yes'), "First-character encoding collides by design"
    assert decode_label(ord('n'), LABEL_KIND_CATEGORICAL) == 'n'
    assert decode_label(np.int64(3), LABEL_KIND_NUMERIC) == 3

    with pytest.raises(ValidationError):
        encode_label(None)


def test_label_kind():
    assert label_kind_for([0, 1, 1.0]) == LABEL_KIND_NUMERIC
    assert label_kind_for([0, 'a']) == LABEL_KIND_CATEGORICAL


def test_feature_matrix_from_rows():
    """Missing and non-numeric cells become 0, order follows feature names"""
    X = to_feature_matrix([{'b': 2.0, 'a': 1.0}, {'a': None, 'b': 'x'}], ['a', 'b'])

    assert X.tolist() == [[1.0, 2.0], [0.0, 0.0]]
    assert to_feature_matrix([], ['a', 'b']).shape == (0, 2)


def test_linear_kernel_separates_separable_data(separable_split):
    """Linear kernel on linearly separable blobs scores 1.0 on held-out rows"""
    data, labels = separable_split
    train_idx = [i for i in range(len(data)) if i % 4 != 0]
    test_idx = [i for i in range(len(data)) if i % 4 == 0]

    result = train_svm_model(
        [data[i] for i in train_idx],
        [labels[i] for i in train_idx],
        SVMConfig(kernel='linear', probabilistic=False),
        feature_names=['x1', 'x2'],
    )
    metrics = calculate_metrics(result.model, [data[i] for i in test_idx], [labels[i] for i in test_idx])

    assert metrics.accuracy == 1.0, f"Expected perfect accuracy, got {metrics.accuracy}"
    assert result.training_time >= 0
    assert result.model.classes == [0, 1]


def test_categorical_labels_decode_to_characters(separable_split):
    data, labels = separable_split
    text_labels = ['neg' if label == 0 else 'pos' for label in labels]

    result = train_svm_model(data, text_labels, SVMConfig(kernel='linear', probabilistic=False), ['x1', 'x2'])

    assert result.model.label_kind == LABEL_KIND_CATEGORICAL
    assert result.model.class_labels == ['n', 'p']


def test_training_input_checks(separable_split):
    data, labels = separable_split
    trainer = ModelTrainer()

    with pytest.raises(ValidationError):
        trainer.initiate_model_trainer([], [], SVMConfig())
    with pytest.raises(ValidationError):
        trainer.initiate_model_trainer(data, labels[:-1], SVMConfig(), ['x1', 'x2'])
    with pytest.raises(ValidationError):
        trainer.initiate_model_trainer(data, labels, SVMConfig(C=-1), ['x1', 'x2'])


def test_solver_failure_is_wrapped(separable_split):
    """A single-class training set makes the solver fail"""
    data, _ = separable_split

    with pytest.raises(ModelTrainingError):
        ModelTrainer().initiate_model_trainer(data, [1] * len(data), SVMConfig(), ['x1', 'x2'])


def test_serialized_model_predicts_identically(separable_split, tmp_path):
    data, labels = separable_split
    model = train_svm_model(data, labels, SVMConfig(kernel='rbf', probabilistic=False), ['x1', 'x2']).model
    X = to_feature_matrix(data, ['x1', 'x2'])

    restored = TrainedModel.deserialize(model.serialize())
    assert restored.predict(X) == model.predict(X)
    assert restored.config == model.config
    assert restored.feature_names == ['x1', 'x2']

    path = model.save(str(tmp_path / 'artifacts' / 'model.pkl'))
    assert TrainedModel.load(path).predict(X) == model.predict(X)


def test_cross_validation_scores(separable_split):
    data, labels = separable_split
    scores = ModelTrainer().cross_validate(
        data, labels, SVMConfig(kernel='linear', probabilistic=False), ['x1', 'x2'], random_state=0
    )

    assert len(scores) == 5
    assert all(score == 1.0 for score in scores)


def test_linear_weights_only_for_linear_kernel(separable_split):
    data, labels = separable_split
    linear = train_svm_model(data, labels, SVMConfig(kernel='linear', probabilistic=False), ['x1', 'x2']).model
    rbf = train_svm_model(data, labels, SVMConfig(kernel='rbf', probabilistic=False), ['x1', 'x2']).model

    weights = linear.linear_weights()
    assert weights.shape == (2,) and (weights >= 0).all()
    assert rbf.linear_weights() is None


def test_cross_validation_folds_follow_smallest_class(separable_split):
    """Folds = min(5, smallest class size)"""
    data, labels = separable_split
    keep = [i for i, label in enumerate(labels) if label == 0][:3] + [i for i, label in enumerate(labels) if label == 1]
    scores = cross_validate_model(
        [data[i] for i in keep], [labels[i] for i in keep], SVMConfig(kernel='linear', probabilistic=False), ['x1', 'x2']
    )

    assert len(scores) == 3
