"""
Custom exceptions for the SSA Forecasting System
"""


class SSAForecastingError(Exception):
    """Base exception for SSA forecasting system"""
    pass


class DataValidationError(SSAForecastingError):
    """Raised when data validation fails"""
    pass


class InsufficientDataError(DataValidationError):
    """Raised when the series is too short for the requested window/train/series-length parameters"""

    def __init__(self, available_points: int, required_points: int, reason: str = None):
        self.available_points = available_points
        self.required_points = required_points
        self.reason = reason

        message = (
            f"Insufficient data: {available_points} points available, "
            f"but {required_points} required"
        )
        if reason:
            message += f" ({reason})"

        super().__init__(message)


class InvalidParameterError(DataValidationError):
    """Raised when a training or forecasting parameter is out of range"""
    pass


class DegenerateSubspaceError(SSAForecastingError):
    """Raised when the trajectory matrix decomposition fails or carries no signal"""
    pass


class VerticalityError(SSAForecastingError):
    """Raised when the signal subspace is too close to vertical to derive a recurrence"""

    def __init__(self, nu_squared: float, epsilon: float):
        self.nu_squared = nu_squared
        self.epsilon = epsilon
        super().__init__(
            f"Recurrence is numerically unstable: 1 - nu^2 = {1.0 - nu_squared:.3e} "
            f"is not above {epsilon:.1e}. Try a smaller rank or a different window size"
        )


class ModelNotTrainedError(SSAForecastingError):
    """Raised when forecasting is attempted without a valid trained model"""
    pass


class EmptyEvaluationSetError(SSAForecastingError):
    """Raised when forecasts and actuals share no aligned points"""
    pass


class CorruptCheckpointError(SSAForecastingError):
    """Raised when a checkpoint cannot be deserialized into a trained model"""
    pass
