"""
Models package for time series forecasting - Singular Spectrum Analysis focused
"""

from .time_series import TimeSeries
from .subspace import SSAParameters, SignalSubspace, build_trajectory_matrix, extract_subspace
from .recurrence import LinearRecurrentFormula, build_recurrence
from .ssa_model import (
    ForecastResult, TrainedModel, train, forecast, forecast_with_state, observe
)

__all__ = [
    'TimeSeries', 'SSAParameters', 'SignalSubspace', 'build_trajectory_matrix',
    'extract_subspace', 'LinearRecurrentFormula', 'build_recurrence',
    'ForecastResult', 'TrainedModel', 'train', 'forecast', 'forecast_with_state', 'observe'
]
