"""
Shared metrics utilities for forecast evaluation
"""

from dataclasses import dataclass
from typing import Dict, Union
import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error
from models.ssa_model import ForecastResult, TrainedModel, ensure_trained
from models.time_series import TimeSeries
from utils.exceptions import EmptyEvaluationSetError
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EvaluationMetrics:
    """Aggregate forecast errors over the aligned comparison set"""
    mae: float
    rmse: float
    n_points: int

    def to_dict(self) -> Dict[str, float]:
        return {'MAE': self.mae, 'RMSE': self.rmse, 'n_points': self.n_points}


def calculate_metrics(y_true: Union[np.ndarray, list], y_pred: Union[np.ndarray, list]) -> Dict[str, float]:
    """
    Calculate standard evaluation metrics for forecasting models

    Args:
        y_true: True values
        y_pred: Predicted values

    Returns:
        Dictionary containing MAE and RMSE metrics
    """
    if not isinstance(y_true, np.ndarray):
        y_true = np.array(y_true, dtype=float)
    if not isinstance(y_pred, np.ndarray):
        y_pred = np.array(y_pred, dtype=float)

    if len(y_true) != len(y_pred):
        raise ValueError(f"Length mismatch: y_true({len(y_true)}) != y_pred({len(y_pred)})")

    if len(y_true) == 0:
        raise ValueError("Cannot calculate metrics for empty arrays")

    mae = mean_absolute_error(y_true, y_pred)
    rmse = np.sqrt(mean_squared_error(y_true, y_pred))

    return {
        'MAE': float(mae),
        'RMSE': float(rmse)
    }


def _actual_values(actuals: Union[TimeSeries, np.ndarray, list]) -> np.ndarray:
    if isinstance(actuals, TimeSeries):
        return np.asarray(actuals.values, dtype=float)
    return np.asarray(actuals, dtype=float).ravel()


def evaluate(actuals: Union[TimeSeries, np.ndarray, list], forecast_result: ForecastResult) -> EvaluationMetrics:
    """
    Compare a forecast with held-out actuals

    Only the first min(horizon, len(actuals)) points are compared; the excess
    on either side is ignored.

    Raises:
        EmptyEvaluationSetError: If there is nothing to compare
    """
    actual_values = _actual_values(actuals)
    n_points = min(forecast_result.horizon, actual_values.size)
    if n_points == 0:
        raise EmptyEvaluationSetError(
            f"No aligned points: horizon {forecast_result.horizon}, {actual_values.size} actual values"
        )

    metrics = calculate_metrics(actual_values[:n_points], forecast_result.forecast[:n_points])
    logger.info(f"Evaluated {n_points} points: MAE={metrics['MAE']:.3f}, RMSE={metrics['RMSE']:.3f}")

    return EvaluationMetrics(mae=metrics['MAE'], rmse=metrics['RMSE'], n_points=n_points)


def evaluate_one_step(model: TrainedModel, actuals: Union[TimeSeries, np.ndarray, list]) -> EvaluationMetrics:
    """
    Walk forward over held-out actuals, predicting each value one step ahead
    and then feeding the observed value back into the trailing buffer

    Raises:
        EmptyEvaluationSetError: If there are no actuals
        ModelNotTrainedError: If the model cannot forecast
    """
    model = ensure_trained(model)
    actual_values = _actual_values(actuals)
    if actual_values.size == 0:
        raise EmptyEvaluationSetError("No actual values to evaluate against")

    order = model.recurrence.order
    history = np.concatenate([model.trailing_buffer[-order:], actual_values])
    predictions = model.recurrence.one_step_predictions(history)

    metrics = calculate_metrics(actual_values, predictions)
    logger.info(f"One-step evaluation over {actual_values.size} points: "
                f"MAE={metrics['MAE']:.3f}, RMSE={metrics['RMSE']:.3f}")

    return EvaluationMetrics(mae=metrics['MAE'], rmse=metrics['RMSE'], n_points=int(actual_values.size))
