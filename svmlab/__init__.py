"""SVM Lab: preprocessing, training and evaluation of SVM classifiers on tabular data."""

__version__ = "0.1.0"
