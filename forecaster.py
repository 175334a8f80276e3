"""
Singular Spectrum Analysis forecaster class
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import pandas as pd
from models import ForecastResult, TimeSeries, TrainedModel, forecast, train
from schemas import ForecastReport, ModelPerformance, ModelSummary, PredictionPoint
from settings import settings
from utils.checkpoint import save_checkpoint
from utils.exceptions import DataValidationError, ModelNotTrainedError
from utils.logging_config import get_logger
from utils.metrics import EvaluationMetrics, evaluate, evaluate_one_step

logger = get_logger(__name__)


class SSAForecaster:
    """SSA forecaster tying training, evaluation, checkpointing and prediction together"""

    def __init__(self, train_series: TimeSeries, eval_series: Optional[TimeSeries] = None,
                 window_size: int = None, series_length: int = None, train_size: int = None,
                 rank: Optional[int] = None, energy_threshold: Optional[float] = None,
                 confidence_level: float = None, non_negative: bool = None):
        if not isinstance(train_series, TimeSeries):
            raise DataValidationError("Training data must be a TimeSeries")
        if eval_series is not None and not isinstance(eval_series, TimeSeries):
            raise DataValidationError("Evaluation data must be a TimeSeries")

        self.train_series = train_series
        self.eval_series = eval_series

        defaults = settings.training_kwargs()
        self.window_size = defaults['window_size'] if window_size is None else window_size
        self.series_length = defaults['series_length'] if series_length is None else series_length
        self.train_size = defaults['train_size'] if train_size is None else train_size
        if rank is None and energy_threshold is None:
            rank, energy_threshold = defaults['rank'], defaults['energy_threshold']
        self.rank = rank
        self.energy_threshold = energy_threshold

        self.confidence_level = settings.DEFAULT_CONFIDENCE_LEVEL if confidence_level is None else confidence_level
        self.non_negative = settings.CLAMP_NON_NEGATIVE if non_negative is None else non_negative

        self.model: Optional[TrainedModel] = None
        self.metrics: Optional[EvaluationMetrics] = None
        self.one_step_metrics: Optional[EvaluationMetrics] = None
        self.checkpoint_path: Optional[Path] = None

    def fit(self) -> TrainedModel:
        """Train the SSA model on the training series"""
        try:
            self.model = train(
                self.train_series,
                window_size=self.window_size,
                series_length=self.series_length,
                train_size=self.train_size,
                rank=self.rank,
                energy_threshold=self.energy_threshold
            )
        except Exception as e:
            logger.error(f"SSA training failed: {e}")
            raise

        return self.model

    def _require_model(self) -> TrainedModel:
        if self.model is None:
            raise ModelNotTrainedError("Call fit() before forecasting or evaluating")
        return self.model

    def predict(self, horizon: int = None) -> ForecastResult:
        """Forecast ``horizon`` steps past the end of the training series"""
        horizon = settings.DEFAULT_FORECAST_HORIZON if horizon is None else horizon
        return forecast(self._require_model(), horizon, self.confidence_level, self.non_negative)

    def evaluate(self, horizon: int = None) -> EvaluationMetrics:
        """Score the model against the evaluation series, multi-step and one-step ahead"""
        model = self._require_model()
        if self.eval_series is None:
            raise DataValidationError("No evaluation series was provided")

        horizon = max(len(self.eval_series), 1) if horizon is None else horizon
        result = forecast(model, horizon, self.confidence_level, self.non_negative)

        self.metrics = evaluate(self.eval_series, result)
        self.one_step_metrics = evaluate_one_step(model, self.eval_series)
        return self.metrics

    def save(self, path: str = None) -> Path:
        """Checkpoint the trained model"""
        model = self._require_model()
        self.checkpoint_path = Path(path or settings.CHECKPOINT_PATH)
        save_checkpoint(model, self.checkpoint_path)
        return self.checkpoint_path

    def get_summary(self) -> pd.DataFrame:
        """Get summary table of model performance"""
        rows = []
        for name, metrics in (('multi_step', self.metrics), ('one_step', self.one_step_metrics)):
            if metrics is not None:
                rows.append({'evaluation': name, **metrics.to_dict()})
        return pd.DataFrame(rows, columns=['evaluation', 'MAE', 'RMSE', 'n_points'])

    def get_model_predictions(self, horizon: int = None) -> ForecastReport:
        """Forecast and package the predictions, paired with evaluation actuals when available"""
        model = self._require_model()
        horizon = settings.DEFAULT_FORECAST_HORIZON if horizon is None else horizon
        result = self.predict(horizon)

        # Every forecast row is kept; only the first len(eval_series) are paired with actuals
        frame = result.to_frame()
        dates = list(frame['date'])
        actuals = [None] * result.horizon
        if self.eval_series is not None:
            for i in range(min(result.horizon, len(self.eval_series))):
                dates[i], actuals[i] = self.eval_series[i]

        predictions = []
        for date, actual, row in zip(dates, actuals, frame.itertuples(index=False)):
            date = date.strftime('%Y-%m-%d') if isinstance(date, (pd.Timestamp, datetime)) else str(date)
            predictions.append(PredictionPoint(
                date=date,
                actual=actual,
                lower_estimate=float(row.lower),
                forecast=float(row.forecast),
                upper_estimate=float(row.upper)
            ))

        def performance(metrics: Optional[EvaluationMetrics]) -> Optional[ModelPerformance]:
            if metrics is None:
                return None
            return ModelPerformance(mae=metrics.mae, rmse=metrics.rmse, n_points=metrics.n_points)

        return ForecastReport(
            model=ModelSummary(
                window_size=model.window_size,
                rank=model.rank,
                series_length=model.series_length,
                train_size=model.train_size,
                residual_std=model.residual_std
            ),
            model_performance=performance(self.metrics),
            one_step_performance=performance(self.one_step_metrics),
            predictions=predictions,
            confidence_level=result.confidence_level,
            forecast_horizon=horizon,
            checkpoint_path=str(self.checkpoint_path) if self.checkpoint_path else None,
            generated_at=datetime.now().isoformat()
        )
