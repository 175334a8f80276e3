"""
SSA (Singular Spectrum Analysis) forecasting model

Training composes subspace extraction and recurrence derivation into an
immutable TrainedModel snapshot. Forecasting is a pure function of that
snapshot: it returns new forecasts and, on request, a model whose trailing
buffer has been advanced, leaving the input untouched.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd
from scipy.stats import norm
from .recurrence import LinearRecurrentFormula, build_recurrence
from .subspace import SSAParameters, SignalSubspace, extract_subspace
from .time_series import TimeSeries
from utils.constants import COUNT_LOWER_BOUND, DEFAULT_CONFIDENCE_LEVEL
from utils.exceptions import DegenerateSubspaceError, InvalidParameterError, ModelNotTrainedError
from utils.logging_config import get_logger

logger = get_logger(__name__)

SeriesLike = Union[TimeSeries, Sequence[float], np.ndarray]


@dataclass(frozen=True, eq=False)
class ForecastResult:
    """Point forecasts for ``horizon`` steps with confidence bounds"""
    forecast: np.ndarray
    lower_bound: np.ndarray
    upper_bound: np.ndarray
    confidence_level: float
    timestamps: Optional[pd.DatetimeIndex] = None

    def __post_init__(self):
        arrays = {}
        for field_name in ('forecast', 'lower_bound', 'upper_bound'):
            array = np.array(getattr(self, field_name), dtype=float)
            array.setflags(write=False)
            arrays[field_name] = array
            object.__setattr__(self, field_name, array)

        lengths = {name: array.shape for name, array in arrays.items()}
        if len(set(lengths.values())) != 1 or arrays['forecast'].ndim != 1:
            raise InvalidParameterError(f"Forecast and bounds must be aligned vectors, got {lengths}")
        if self.timestamps is not None and len(self.timestamps) != arrays['forecast'].size:
            raise InvalidParameterError("Forecast timestamps must match the horizon")

    @property
    def horizon(self) -> int:
        return self.forecast.size

    def __len__(self) -> int:
        return self.horizon

    def to_frame(self, actuals: Optional[TimeSeries] = None) -> pd.DataFrame:
        """
        Tabulate forecasts as rows of date, actual, lower, forecast, upper

        When actuals are given, rows are aligned with their first
        min(horizon, len(actuals)) points and dated by them.
        """
        if actuals is not None:
            n = min(self.horizon, len(actuals))
            dates = list(actuals.timestamps[:n])
            actual_values = actuals.values[:n]
        else:
            n = self.horizon
            dates = list(self.timestamps) if self.timestamps is not None else list(range(1, n + 1))
            actual_values = np.full(n, np.nan)

        return pd.DataFrame({
            'date': dates,
            'actual': actual_values,
            'lower': self.lower_bound[:n],
            'forecast': self.forecast[:n],
            'upper': self.upper_bound[:n],
        })


@dataclass(frozen=True, eq=False)
class TrainedModel:
    """Immutable snapshot of a trained SSA model"""
    subspace: SignalSubspace
    recurrence: LinearRecurrentFormula
    trailing_buffer: np.ndarray
    residual_std: float
    series_length: Optional[int] = None
    train_size: Optional[int] = None
    last_timestamp: Optional[pd.Timestamp] = None
    frequency: Optional[str] = None

    def __post_init__(self):
        if self.recurrence.window_size != self.subspace.window_size:
            raise InvalidParameterError(
                f"Recurrence order {self.recurrence.order} does not match "
                f"window size {self.subspace.window_size}"
            )
        if not np.isfinite(self.residual_std) or self.residual_std < 0:
            raise InvalidParameterError(f"Residual std must be a non-negative number, got {self.residual_std}")

        buffer = np.array(self.trailing_buffer, dtype=float).ravel()
        buffer.setflags(write=False)
        object.__setattr__(self, 'trailing_buffer', buffer)
        object.__setattr__(self, 'residual_std', float(self.residual_std))

    @property
    def window_size(self) -> int:
        return self.subspace.window_size

    @property
    def rank(self) -> int:
        return self.subspace.rank

    @property
    def coefficients(self) -> np.ndarray:
        return self.recurrence.coefficients

    def future_timestamps(self, steps: int) -> Optional[pd.DatetimeIndex]:
        """Timestamps of the next ``steps`` points, when the model knows its calendar"""
        if self.last_timestamp is None or self.frequency is None:
            return None
        return pd.date_range(start=self.last_timestamp, periods=steps + 1, freq=self.frequency)[1:]


def _as_values(series: SeriesLike) -> np.ndarray:
    if isinstance(series, TimeSeries):
        return np.asarray(series.values, dtype=float)
    return np.asarray(series, dtype=float).ravel()


def ensure_trained(model: Optional[TrainedModel]) -> TrainedModel:
    if model is None or not isinstance(model, TrainedModel):
        raise ModelNotTrainedError("A trained SSA model is required before forecasting")
    if model.trailing_buffer.size < model.recurrence.order:
        raise ModelNotTrainedError(
            f"Trailing buffer holds {model.trailing_buffer.size} values, "
            f"but the recurrence needs {model.recurrence.order}"
        )
    return model


def estimate_residual_std(values: Sequence[float], recurrence: LinearRecurrentFormula) -> float:
    """Root mean square of the recurrence's one-step-ahead errors over ``values``"""
    values = np.asarray(values, dtype=float)
    predictions = recurrence.one_step_predictions(values)
    if predictions.size == 0:
        return 0.0
    errors = values[recurrence.order:] - predictions
    return float(np.sqrt(np.mean(errors ** 2)))


def train(series: SeriesLike, window_size: int, series_length: int, train_size: int,
          rank: Optional[int] = None, energy_threshold: Optional[float] = None) -> TrainedModel:
    """
    Train an SSA model on a historical series

    Args:
        series: Training series (TimeSeries or plain values)
        window_size: Embedding window length L
        series_length: Number of most recent training points used to build the trajectory matrix
        train_size: Number of points from the start of the series forming the training segment
        rank: Fixed number of signal components (1 <= rank < window_size)
        energy_threshold: Energy fraction used to pick the rank when ``rank`` is None

    Returns:
        TrainedModel whose trailing buffer holds the last L-1 observed values

    Raises:
        InvalidParameterError, InsufficientDataError, DegenerateSubspaceError, VerticalityError
    """
    params = SSAParameters(
        window_size=window_size,
        series_length=series_length,
        train_size=train_size,
        rank=rank,
        energy_threshold=energy_threshold
    )
    values = _as_values(series)

    logger.info(f"Training SSA model on {len(values)} points (L={window_size}, "
                f"series_length={series_length}, train_size={train_size})")

    subspace = extract_subspace(values, params)
    recurrence = build_recurrence(subspace)
    residual_std = estimate_residual_std(values[:params.train_size], recurrence)

    last_timestamp = None
    frequency = None
    if isinstance(series, TimeSeries) and series.is_datetime:
        last_timestamp = series.timestamps[-1]
        frequency = series.infer_frequency()

    model = TrainedModel(
        subspace=subspace,
        recurrence=recurrence,
        trailing_buffer=values[-recurrence.order:],
        residual_std=residual_std,
        series_length=series_length,
        train_size=train_size,
        last_timestamp=last_timestamp,
        frequency=frequency
    )

    logger.info(f"SSA model trained: rank={model.rank}, residual std={residual_std:.4f}")
    return model


def forecast_with_state(model: TrainedModel, horizon: int,
                        confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
                        non_negative: bool = True) -> Tuple[ForecastResult, TrainedModel]:
    """
    Forecast ``horizon`` steps and return the model advanced over the forecasts

    Each step is the recurrence applied to the most recent L-1 known or
    forecast values, so step t+1 depends on step t. Bounds widen as
    z(c) * sigma * sqrt(k) at step k.

    Raises:
        ModelNotTrainedError: If the model cannot seed the recurrence
        InvalidParameterError: If the horizon or confidence level is out of range
        DegenerateSubspaceError: If the recurrence diverges to non-finite values
    """
    model = ensure_trained(model)
    if horizon < 1:
        raise InvalidParameterError(f"Forecast horizon must be positive, got {horizon}")
    if not 0.0 < confidence_level < 1.0:
        raise InvalidParameterError(f"Confidence level must be in (0, 1), got {confidence_level}")

    order = model.recurrence.order
    history = np.concatenate([model.trailing_buffer[-order:], np.zeros(horizon)])
    for step in range(horizon):
        history[order + step] = model.recurrence.next_value(history[step:order + step])
    points = history[order:].copy()

    if not np.all(np.isfinite(points)):
        first_bad = int(np.argmin(np.isfinite(points))) + 1
        logger.error(f"Recurrence diverged at step {first_bad} of {horizon}")
        raise DegenerateSubspaceError(
            f"Recurrence diverged: forecast step {first_bad} of {horizon} is not finite. "
            f"Try a smaller rank, a different window size or a shorter horizon"
        )

    z_score = float(norm.ppf((1.0 + confidence_level) / 2.0))
    margin = z_score * model.residual_std * np.sqrt(np.arange(1, horizon + 1))
    lower = points - margin
    upper = points + margin
    if non_negative:
        lower = np.minimum(np.maximum(lower, COUNT_LOWER_BOUND), points)

    result = ForecastResult(
        forecast=points,
        lower_bound=lower,
        upper_bound=upper,
        confidence_level=confidence_level,
        timestamps=model.future_timestamps(horizon)
    )

    advanced = replace(
        model,
        trailing_buffer=history[-order:],
        last_timestamp=result.timestamps[-1] if result.timestamps is not None else model.last_timestamp
    )

    logger.info(f"Generated SSA forecast for {horizon} periods at {confidence_level:.0%} confidence")
    return result, advanced


def forecast(model: TrainedModel, horizon: int,
             confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
             non_negative: bool = True) -> ForecastResult:
    """Forecast ``horizon`` steps ahead of the model's trailing buffer"""
    result, _ = forecast_with_state(model, horizon, confidence_level, non_negative)
    return result


def observe(model: TrainedModel, observations: SeriesLike) -> TrainedModel:
    """Return a model whose trailing buffer has been advanced over newly observed values"""
    if model is None or not isinstance(model, TrainedModel):
        raise ModelNotTrainedError("A trained SSA model is required before observing new values")

    values = _as_values(observations)
    if values.size == 0:
        return model

    order = model.recurrence.order
    buffer = np.concatenate([model.trailing_buffer, values])[-order:]

    if isinstance(observations, TimeSeries) and observations.is_datetime:
        last_timestamp = observations.timestamps[-1]
    elif model.last_timestamp is not None and model.frequency is not None:
        last_timestamp = model.future_timestamps(values.size)[-1]
    else:
        last_timestamp = model.last_timestamp

    return replace(model, trailing_buffer=buffer, last_timestamp=last_timestamp)
