import sys
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from svmlab.components.feature_scaling import ScaleParameters
from svmlab.components.model_trainer import TrainedModel, to_feature_matrix
from svmlab.exception import CustomException, PredictionError, ValidationError
from svmlab.logger import logging


@dataclass
class PredictionResult:
    predicted_class: Any
    confidence_scores: Optional[Dict[Any, float]] = None
    probability: Optional[float] = None

    def to_dict(self):
        return asdict(self)


def check_required_features(rows, feature_names: Sequence[str]):
    """Raise when the first input row lacks any of the model's features."""
    first = rows[0] if rows else {}
    missing = [f for f in feature_names if f not in first]
    if missing:
        raise ValidationError(f"Missing required features: {', '.join(missing)}")


def predict(
    model: TrainedModel,
    input_data,
    feature_names: Sequence[str],
    scale_parameters: Optional[ScaleParameters] = None,
) -> PredictionResult:
    """
    Predict the class of one input.

    Args:
        model (TrainedModel): Trained handle
        input_data (dict): Feature name to value; missing or non-numeric values count as 0
        feature_names (list[str]): Feature order the model was trained with
        scale_parameters (ScaleParameters): When given, the training-time scaling
            is replayed on the input first; when omitted raw values go to the model

    Returns:
        PredictionResult
    """
    try:
        row = {f: input_data.get(f) for f in feature_names}
        if scale_parameters is not None:
            row = scale_parameters.transform_row(row)
        x = to_feature_matrix([row], feature_names)

        encoded = model.predict(x)[0]
        result = PredictionResult(predicted_class=model.decode(encoded))

        if model.supports_probability:
            distribution = model.predict_probability(x)[0]
            result.confidence_scores = {model.decode(label): p for label, p in distribution.items()}
            result.probability = distribution.get(encoded)

        return result

    except CustomException:
        raise
    except Exception as e:
        logging.error(f"Prediction failed: {e}")
        raise PredictionError(e, sys)


def predict_batch(
    model: TrainedModel,
    inputs,
    feature_names: Sequence[str],
    scale_parameters: Optional[ScaleParameters] = None,
) -> List[PredictionResult]:
    """Apply :func:`predict` to every input independently, keeping input order."""
    results = [predict(model, item, feature_names, scale_parameters) for item in inputs]
    logging.info(f"Batch prediction finished for {len(results)} inputs")
    return results
