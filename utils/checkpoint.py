"""
Checkpoint utilities for persisting trained SSA models

Models are stored as versioned JSON records validated by
schemas.CheckpointRecord. Reloading reconstructs a model that forecasts
identically to the original within floating-point tolerance.
"""

import json
from pathlib import Path
from typing import IO, Union
import numpy as np
import pandas as pd
from pydantic import ValidationError
from models.recurrence import LinearRecurrentFormula
from models.ssa_model import TrainedModel
from models.subspace import SignalSubspace
from schemas import CheckpointRecord
from utils.constants import CHECKPOINT_VERSION
from utils.exceptions import CorruptCheckpointError, SSAForecastingError
from utils.logging_config import get_logger

logger = get_logger(__name__)

PathOrStream = Union[str, Path, IO[str]]


def to_record(model: TrainedModel) -> CheckpointRecord:
    """Convert a trained model into its checkpoint record"""
    last_timestamp = None
    if model.last_timestamp is not None:
        last_timestamp = pd.Timestamp(model.last_timestamp).isoformat()

    return CheckpointRecord(
        version=CHECKPOINT_VERSION,
        window_size=model.window_size,
        rank=model.rank,
        singular_values=model.subspace.singular_values.tolist(),
        basis_vectors=model.subspace.basis.T.tolist(),
        lrf_coefficients=model.recurrence.coefficients.tolist(),
        trailing_buffer=model.trailing_buffer[-(model.window_size - 1):].tolist(),
        residual_std=model.residual_std,
        series_length=model.series_length,
        train_size=model.train_size,
        last_timestamp=last_timestamp,
        frequency=model.frequency
    )


def from_record(record: CheckpointRecord) -> TrainedModel:
    """Rebuild a trained model from a validated checkpoint record"""
    basis = np.array(record.basis_vectors, dtype=float).T
    last_row = basis[-1, :]

    try:
        return TrainedModel(
            subspace=SignalSubspace(basis=basis, singular_values=record.singular_values),
            recurrence=LinearRecurrentFormula(
                coefficients=record.lrf_coefficients,
                nu_squared=float(last_row @ last_row)
            ),
            trailing_buffer=record.trailing_buffer,
            residual_std=record.residual_std,
            series_length=record.series_length,
            train_size=record.train_size,
            last_timestamp=pd.Timestamp(record.last_timestamp) if record.last_timestamp else None,
            frequency=record.frequency
        )
    except (SSAForecastingError, ValueError) as e:
        raise CorruptCheckpointError(f"Checkpoint does not describe a valid model: {e}") from e


def dumps(model: TrainedModel) -> str:
    """Serialize a trained model to a JSON string"""
    return to_record(model).model_dump_json(indent=2)


def loads(text: Union[str, bytes]) -> TrainedModel:
    """
    Deserialize a trained model from a JSON string

    Raises:
        CorruptCheckpointError: On malformed JSON, version mismatch or structural mismatch
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptCheckpointError(f"Checkpoint is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise CorruptCheckpointError("Checkpoint must be a JSON object")

    version = data.get("version")
    if version != CHECKPOINT_VERSION:
        raise CorruptCheckpointError(
            f"Unsupported checkpoint version {version!r}, expected {CHECKPOINT_VERSION}"
        )

    try:
        record = CheckpointRecord.model_validate(data)
    except ValidationError as e:
        raise CorruptCheckpointError(f"Checkpoint structure is invalid: {e}") from e

    return from_record(record)


def save_checkpoint(model: TrainedModel, destination: PathOrStream) -> None:
    """
    Write a trained model checkpoint

    Args:
        model: Trained model to persist
        destination: File path or writable text stream
    """
    payload = dumps(model)

    if hasattr(destination, "write"):
        destination.write(payload)
        logger.info("Checkpoint written to stream")
        return

    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")
    logger.info(f"Checkpoint saved to {path}")


def load_checkpoint(source: PathOrStream) -> TrainedModel:
    """
    Read a trained model checkpoint

    Args:
        source: File path or readable text stream

    Returns:
        TrainedModel equivalent in forecasting behavior to the saved one
    """
    if hasattr(source, "read"):
        return loads(source.read())

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Checkpoint file not found: {path}")

    model = loads(path.read_text(encoding="utf-8"))
    logger.info(f"Checkpoint loaded from {path} (L={model.window_size}, rank={model.rank})")
    return model
