# svmlab/utils/constants.py

# Missing value strategies
IMPUTATION_STRATEGIES = ['mean', 'median', 'mode', 'remove', 'constant']

# Feature scaling methods
SCALING_METHODS = ['none', 'minmax', 'standard', 'robust']

# SVM kernels, mapped to the scikit-learn kernel names
KERNEL_TYPES = {
    'linear': 'linear',
    'rbf': 'rbf',
    'polynomial': 'poly',
    'sigmoid': 'sigmoid',
}

GAMMA_MODES = ['auto', 'scale']

# Defaults used when no options are supplied
DEFAULT_PREPROCESSING_OPTIONS = {
    'missing_value_strategy': 'mean',
    'scaling': 'standard',
    'train_test_split': 0.2,
}

DEFAULT_SVM_CONFIG = {
    'kernel': 'rbf',
    'C': 1.0,
    'gamma': 'scale',
    'degree': 3,
    'coef0': 0.0,
    'probabilistic': True,
}

# Quick presets offered next to the model configuration form
SVM_PRESETS = {
    'basic': {'kernel': 'linear', 'C': 1.0, 'gamma': 'scale', 'degree': 3, 'coef0': 0.0, 'probabilistic': True},
    'balanced': {'kernel': 'rbf', 'C': 1.0, 'gamma': 'scale', 'degree': 3, 'coef0': 0.0, 'probabilistic': True},
    'accurate': {'kernel': 'rbf', 'C': 10.0, 'gamma': 'scale', 'degree': 3, 'coef0': 0.0, 'probabilistic': True},
    'complex': {'kernel': 'polynomial', 'C': 1.0, 'gamma': 'scale', 'degree': 3, 'coef0': 1.0, 'probabilistic': True},
}

# Label encodings
LABEL_KIND_NUMERIC = 'numeric'
LABEL_KIND_CATEGORICAL = 'categorical'

# Cross-validation
MAX_CV_FOLDS = 5
MIN_CV_FOLDS = 2

# Dataset summary: a string/integer column is categorical at or below this many distinct values
CATEGORICAL_MAX_UNIQUE = 20
