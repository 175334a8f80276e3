"""
Pydantic schemas for checkpoint records and forecast reports.

This module contains the data validation and serialization models used to
persist trained SSA models and to hand forecasts to reporting consumers.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CheckpointRecord(BaseModel):
    """Versioned, structured-text record of a trained SSA model"""
    # NaN and infinity parse from JSON but describe no usable model
    model_config = ConfigDict(allow_inf_nan=False)

    version: int = Field(..., description="Checkpoint format version")
    window_size: int = Field(..., ge=2, description="Embedding window length L")
    rank: int = Field(..., ge=1, description="Number of signal components r")
    singular_values: List[float] = Field(..., description="Leading singular values, length r")
    basis_vectors: List[List[float]] = Field(..., description="r singular vectors of length L")
    lrf_coefficients: List[float] = Field(..., description="Recurrence coefficients a_1..a_{L-1}")
    trailing_buffer: List[float] = Field(..., description="Last L-1 observed or forecast values")
    residual_std: float = Field(..., ge=0, description="Std of one-step training errors")
    series_length: Optional[int] = None
    train_size: Optional[int] = None
    last_timestamp: Optional[str] = None
    frequency: Optional[str] = None

    @model_validator(mode="after")
    def check_structure(self) -> 'CheckpointRecord':
        window_size, rank = self.window_size, self.rank

        if rank >= window_size:
            raise ValueError(f"rank {rank} must be smaller than window_size {window_size}")
        if len(self.singular_values) != rank:
            raise ValueError(f"expected {rank} singular values, got {len(self.singular_values)}")
        if len(self.basis_vectors) != rank:
            raise ValueError(f"expected {rank} basis vectors, got {len(self.basis_vectors)}")
        if any(len(vector) != window_size for vector in self.basis_vectors):
            raise ValueError(f"every basis vector must have length {window_size}")
        if len(self.lrf_coefficients) != window_size - 1:
            raise ValueError(f"expected {window_size - 1} recurrence coefficients, "
                             f"got {len(self.lrf_coefficients)}")
        if len(self.trailing_buffer) != window_size - 1:
            raise ValueError(f"expected a trailing buffer of {window_size - 1} values, "
                             f"got {len(self.trailing_buffer)}")
        return self


class ModelPerformance(BaseModel):
    """Model performance metrics"""
    mae: float = Field(..., ge=0)
    rmse: float = Field(..., ge=0)
    n_points: int = Field(..., ge=1)


class PredictionPoint(BaseModel):
    """Single forecast row, optionally paired with the observed value"""
    date: str
    actual: Optional[float] = None
    lower_estimate: float
    forecast: float
    upper_estimate: float


class ModelSummary(BaseModel):
    """Shape of the trained SSA model"""
    window_size: int
    rank: int
    series_length: Optional[int] = None
    train_size: Optional[int] = None
    residual_std: float


class ForecastReport(BaseModel):
    """Forecast output handed to reporting consumers"""
    model_config = ConfigDict(protected_namespaces=())

    model: ModelSummary
    model_performance: Optional[ModelPerformance] = None
    one_step_performance: Optional[ModelPerformance] = None
    predictions: List[PredictionPoint]
    confidence_level: float = Field(..., gt=0, lt=1)
    forecast_horizon: int = Field(..., ge=1)
    checkpoint_path: Optional[str] = None
    generated_at: str
