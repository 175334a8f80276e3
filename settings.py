from typing import Optional
from decouple import config
from utils.constants import (
    DEFAULT_CONFIDENCE_LEVEL, DEFAULT_ENERGY_THRESHOLD, DEFAULT_FORECAST_HORIZON
)


def _optional_int(value: str) -> Optional[int]:
    return int(value) if value not in ("", None) else None


class Settings:
    """Application settings loaded from environment variables or .env"""

    # Data source
    DATA_SOURCE: str
    REQUEST_TIMEOUT: int
    PERIOD_BOUNDARY: float

    # SSA training parameters
    SSA_WINDOW_SIZE: int
    SSA_SERIES_LENGTH: int
    SSA_TRAIN_SIZE: int
    SSA_RANK: Optional[int]
    SSA_ENERGY_THRESHOLD: float

    # Forecasting defaults
    DEFAULT_FORECAST_HORIZON: int
    DEFAULT_CONFIDENCE_LEVEL: float
    CLAMP_NON_NEGATIVE: bool

    # Checkpointing
    CHECKPOINT_PATH: str

    def __init__(self):
        # Data source
        self.DATA_SOURCE = config("DATA_SOURCE", default="./data.json")
        self.REQUEST_TIMEOUT = config("REQUEST_TIMEOUT", default=30, cast=int)
        self.PERIOD_BOUNDARY = config("PERIOD_BOUNDARY", default=1.0, cast=float)

        # SSA
        self.SSA_WINDOW_SIZE = config("SSA_WINDOW_SIZE", default=7, cast=int)
        self.SSA_SERIES_LENGTH = config("SSA_SERIES_LENGTH", default=30, cast=int)
        self.SSA_TRAIN_SIZE = config("SSA_TRAIN_SIZE", default=365, cast=int)
        self.SSA_RANK = config("SSA_RANK", default="", cast=_optional_int)
        self.SSA_ENERGY_THRESHOLD = config("SSA_ENERGY_THRESHOLD", default=DEFAULT_ENERGY_THRESHOLD, cast=float)

        # Forecasting
        self.DEFAULT_FORECAST_HORIZON = config("DEFAULT_FORECAST_HORIZON", default=DEFAULT_FORECAST_HORIZON, cast=int)
        self.DEFAULT_CONFIDENCE_LEVEL = config("DEFAULT_CONFIDENCE_LEVEL", default=DEFAULT_CONFIDENCE_LEVEL, cast=float)
        self.CLAMP_NON_NEGATIVE = config("CLAMP_NON_NEGATIVE", default=True, cast=bool)

        # Checkpointing
        self.CHECKPOINT_PATH = config("CHECKPOINT_PATH", default="./ssa_model.json")

    def training_kwargs(self) -> dict:
        """Keyword arguments for models.train built from the SSA settings"""
        return {
            "window_size": self.SSA_WINDOW_SIZE,
            "series_length": self.SSA_SERIES_LENGTH,
            "train_size": self.SSA_TRAIN_SIZE,
            "rank": self.SSA_RANK,
            "energy_threshold": None if self.SSA_RANK else self.SSA_ENERGY_THRESHOLD,
        }

# Singleton instance for global use
settings = Settings()
