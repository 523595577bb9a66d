from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

from svmlab.components.model_trainer import TrainedModel
from svmlab.logger import logging


@dataclass
class FeatureImportance:
    feature: str
    importance: float

    def to_dict(self):
        return asdict(self)


def calculate_feature_importance(
    model: TrainedModel, feature_names: Optional[Sequence[str]] = None
) -> List[FeatureImportance]:
    """
    Normalised absolute weights of a linear-kernel model, most important first.

    Any other kernel has no weight vector in input space, so every feature
    scores 0 and the feature order is kept.
    """
    feature_names = list(feature_names if feature_names is not None else model.feature_names or [])

    weights = model.linear_weights()
    if weights is None:
        logging.info(f"Feature importance not available for the {model.kernel} kernel")
        return [FeatureImportance(feature=f, importance=0.0) for f in feature_names]

    if len(weights) != len(feature_names):
        logging.warning(f"Model has {len(weights)} weights for {len(feature_names)} feature names")

    max_weight = float(max(weights)) if len(weights) else 0.0
    importances = [
        FeatureImportance(
            feature=feature,
            importance=float(weight) / max_weight if max_weight > 0 else 0.0,
        )
        for feature, weight in zip(feature_names, weights)
    ]
    return sorted(importances, key=lambda item: item.importance, reverse=True)
