"""
Signal subspace extraction for Singular Spectrum Analysis

Builds the trajectory (lagged window) matrix of the most recent part of the
training segment, decomposes it with an SVD and keeps the leading singular
vectors as the signal subspace.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from utils.constants import DEFAULT_ENERGY_THRESHOLD, SINGULAR_VALUE_TOLERANCE
from utils.exceptions import (
    DegenerateSubspaceError, InsufficientDataError, InvalidParameterError
)
from utils.logging_config import get_logger

logger = get_logger(__name__)


def _read_only(values, ndim: int) -> np.ndarray:
    array = np.array(values, dtype=float)
    if array.ndim != ndim:
        raise InvalidParameterError(f"Expected a {ndim}-dimensional array, got shape {array.shape}")
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class SSAParameters:
    """Training parameters, validated on construction.

    Attributes:
        window_size: Embedding window length L
        series_length: Number of most recent training points used for the trajectory matrix
        train_size: Number of points from the start of the series forming the training segment
        rank: Fixed number of signal components r (1 <= r < L)
        energy_threshold: Cumulative energy fraction used to pick r when rank is not given
    """
    window_size: int
    series_length: int
    train_size: int
    rank: Optional[int] = None
    energy_threshold: Optional[float] = None

    def __post_init__(self):
        if self.series_length <= self.window_size:
            raise InsufficientDataError(
                self.series_length, self.window_size + 1,
                reason="series_length must exceed window_size"
            )
        if self.train_size < self.series_length:
            raise InsufficientDataError(
                self.train_size, self.series_length,
                reason="train_size must be at least series_length"
            )
        if self.window_size < 2:
            raise InvalidParameterError(f"window_size ({self.window_size}) must be at least 2")
        if self.rank is not None and self.energy_threshold is not None:
            raise InvalidParameterError("Specify either rank or energy_threshold, not both")
        if self.rank is not None and not 1 <= self.rank < self.window_size:
            raise InvalidParameterError(
                f"rank ({self.rank}) must satisfy 1 <= rank < window_size ({self.window_size})"
            )
        if self.energy_threshold is not None and not 0.0 < self.energy_threshold <= 1.0:
            raise InvalidParameterError(
                f"energy_threshold ({self.energy_threshold}) must be in (0, 1]"
            )
        if self.rank is None and self.energy_threshold is None:
            object.__setattr__(self, 'energy_threshold', DEFAULT_ENERGY_THRESHOLD)


@dataclass(frozen=True, eq=False)
class SignalSubspace:
    """Leading left singular vectors (columns of an L x r basis) and their singular values"""
    basis: np.ndarray
    singular_values: np.ndarray
    energy_ratio: Optional[float] = None

    def __post_init__(self):
        basis = _read_only(self.basis, 2)
        singular_values = _read_only(self.singular_values, 1)
        window_size, rank = basis.shape

        if not 1 <= rank < window_size:
            raise InvalidParameterError(
                f"Subspace rank ({rank}) must satisfy 1 <= rank < window_size ({window_size})"
            )
        if singular_values.shape != (rank,):
            raise InvalidParameterError(
                f"Expected {rank} singular values, got {singular_values.shape[0]}"
            )

        object.__setattr__(self, 'basis', basis)
        object.__setattr__(self, 'singular_values', singular_values)

    @property
    def window_size(self) -> int:
        return self.basis.shape[0]

    @property
    def rank(self) -> int:
        return self.basis.shape[1]


def build_trajectory_matrix(values: Sequence[float], window_size: int) -> np.ndarray:
    """
    Build the L x K trajectory matrix of a series

    Column j holds the lagged window values[j:j+L], so K = N - L + 1.
    """
    values = np.asarray(values, dtype=float)
    if window_size < 1 or len(values) < window_size:
        raise InsufficientDataError(
            len(values), window_size, reason="trajectory window is longer than the series"
        )
    return sliding_window_view(values, window_size).T.copy()


def select_rank(singular_values: np.ndarray, energy_threshold: float, max_rank: int) -> int:
    """Smallest rank whose cumulative squared singular values reach the threshold"""
    energy = np.asarray(singular_values, dtype=float) ** 2
    cumulative = np.cumsum(energy) / energy.sum()
    rank = int(np.searchsorted(cumulative, energy_threshold, side='left')) + 1
    return max(1, min(rank, max_rank))


def extract_subspace(values: Sequence[float], params: SSAParameters) -> SignalSubspace:
    """
    Extract the signal subspace from the training data

    Args:
        values: Training series values (at least params.train_size points)
        params: Validated SSA parameters

    Returns:
        SignalSubspace with the leading singular triples

    Raises:
        InsufficientDataError: If the series is too short for the parameters
        DegenerateSubspaceError: If the SVD fails or the spectrum is all zero
    """
    values = np.asarray(values, dtype=float)
    if len(values) < params.train_size:
        raise InsufficientDataError(
            len(values), params.train_size, reason="training series is shorter than train_size"
        )

    segment = values[:params.train_size]
    window = segment[-params.series_length:]
    trajectory = build_trajectory_matrix(window, params.window_size)

    logger.debug(f"Trajectory matrix shape {trajectory.shape} from {len(window)} points")

    try:
        left_vectors, singular_values, _ = np.linalg.svd(trajectory, full_matrices=False)
    except np.linalg.LinAlgError as e:
        raise DegenerateSubspaceError(f"Singular value decomposition did not converge: {e}") from e

    if not np.all(np.isfinite(singular_values)):
        raise DegenerateSubspaceError("Singular value decomposition produced non-finite values")
    if singular_values.size == 0 or singular_values[0] <= SINGULAR_VALUE_TOLERANCE:
        raise DegenerateSubspaceError("All singular values are zero; the series carries no signal")

    available = singular_values.size
    if params.rank is not None:
        if params.rank > available:
            raise InsufficientDataError(
                trajectory.shape[1], params.rank,
                reason=f"rank {params.rank} needs at least that many lagged windows"
            )
        rank = params.rank
    else:
        rank = select_rank(singular_values, params.energy_threshold,
                           max_rank=min(params.window_size - 1, available))

    energy = singular_values ** 2
    energy_ratio = float(energy[:rank].sum() / energy.sum())

    logger.info(f"Selected rank {rank} of {available} capturing {energy_ratio:.1%} of the energy")

    return SignalSubspace(
        basis=left_vectors[:, :rank],
        singular_values=singular_values[:rank],
        energy_ratio=energy_ratio
    )
