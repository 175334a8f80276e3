"""
Main entry point for SSA demand forecasting
"""

from forecaster import SSAForecaster
from schemas import ForecastReport
from settings import settings
from utils.data_loader import load_split
from utils.logging_config import get_logger, set_log_level

logger = get_logger(__name__)


def load_and_forecast(data_source: str = None, forecast_horizon: int = None,
                      period_boundary: float = None, checkpoint_path: str = None,
                      log_level: str = None, **kwargs) -> ForecastReport:
    """
    Load demand records, train on the training era, score against the
    evaluation era, checkpoint the model and forecast

    Args:
        data_source: File path or URL to period-tagged records
        forecast_horizon: Number of days to forecast
        period_boundary: Records with a period below this value are used for training
        checkpoint_path: Where to write the trained model checkpoint
        log_level: Optional logging level for this run (e.g. "WARNING" to silence progress)
        **kwargs: SSA overrides (window_size, series_length, train_size, rank,
                  energy_threshold, confidence_level) and URL options (timeout, headers)

    Returns:
        ForecastReport with model shape, evaluation metrics and predictions
    """
    if log_level:
        set_log_level(log_level)

    data_source = data_source or settings.DATA_SOURCE
    forecast_horizon = settings.DEFAULT_FORECAST_HORIZON if forecast_horizon is None else forecast_horizon
    period_boundary = settings.PERIOD_BOUNDARY if period_boundary is None else period_boundary

    url_options = {key: kwargs.pop(key) for key in ('timeout', 'headers') if key in kwargs}
    if data_source.startswith(('http://', 'https://')):
        url_options.setdefault('timeout', settings.REQUEST_TIMEOUT)

    train_series, eval_series = load_split(data_source, period_boundary, **url_options)

    logger.info(f"Loaded {len(train_series)} training and {len(eval_series)} evaluation days")

    forecaster = SSAForecaster(train_series, eval_series, **kwargs)
    forecaster.fit()

    if len(eval_series) > 0:
        forecaster.evaluate()
        summary = forecaster.get_summary().to_string(index=False)
        logger.info(f"\n{summary}")
        print(summary)  # Keep console output for user
    else:
        logger.warning("No evaluation records found; skipping evaluation")

    forecaster.save(checkpoint_path)

    report = forecaster.get_model_predictions(forecast_horizon)

    print(f"\nSSA model: window={report.model.window_size}, rank={report.model.rank}")
    print("\nRental forecast:")
    for prediction in report.predictions:
        print(f"Date: {prediction.date} | Actual: {prediction.actual} | "
              f"Lower: {prediction.lower_estimate:.1f} | Forecast: {prediction.forecast:.1f} | "
              f"Upper: {prediction.upper_estimate:.1f}")

    return report


if __name__ == "__main__":
    load_and_forecast()
