"""
Linear recurrent formula derived from an SSA signal subspace
"""

from dataclasses import dataclass
from typing import Sequence
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from .subspace import SignalSubspace
from utils.constants import VERTICALITY_EPSILON
from utils.exceptions import InvalidParameterError, VerticalityError
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class LinearRecurrentFormula:
    """
    Coefficients a_1..a_{L-1} such that x[t] ~ sum_i a_i * x[t-i]

    coefficients[0] multiplies the most recent value.
    """
    coefficients: np.ndarray
    nu_squared: float = 0.0

    def __post_init__(self):
        coefficients = np.array(self.coefficients, dtype=float)
        if coefficients.ndim != 1 or coefficients.size < 1:
            raise InvalidParameterError("Recurrence needs a non-empty one-dimensional coefficient vector")
        coefficients.setflags(write=False)
        object.__setattr__(self, 'coefficients', coefficients)

    @property
    def order(self) -> int:
        return self.coefficients.size

    @property
    def window_size(self) -> int:
        return self.order + 1

    def next_value(self, history: Sequence[float]) -> float:
        """Apply the recurrence to the last ``order`` values of a chronological history"""
        history = np.asarray(history, dtype=float)
        if history.size < self.order:
            raise ValueError(f"Need {self.order} past values, got {history.size}")
        recent = history[-self.order:]
        return float(np.dot(self.coefficients, recent[::-1]))

    def one_step_predictions(self, values: Sequence[float]) -> np.ndarray:
        """One-step-ahead predictions of values[order:] from their preceding values"""
        values = np.asarray(values, dtype=float)
        if values.size <= self.order:
            return np.empty(0)
        windows = sliding_window_view(values[:-1], self.order)
        return windows[:, ::-1] @ self.coefficients


def build_recurrence(subspace: SignalSubspace,
                     epsilon: float = VERTICALITY_EPSILON) -> LinearRecurrentFormula:
    """
    Derive the recurrence that reconstructs the last coordinate of every
    subspace vector from its first L-1 coordinates

    Args:
        subspace: Signal subspace with an L x r orthonormal basis
        epsilon: Smallest accepted value of 1 - nu^2

    Returns:
        LinearRecurrentFormula of order L-1

    Raises:
        VerticalityError: If the basis is too close to vertical (1 - nu^2 <= epsilon)
    """
    basis = subspace.basis
    last_row = basis[-1, :]
    nu_squared = float(last_row @ last_row)

    if 1.0 - nu_squared <= epsilon:
        raise VerticalityError(nu_squared, epsilon)

    # Coefficients in chronological order, oldest lag first
    chronological = basis[:-1, :] @ last_row / (1.0 - nu_squared)

    logger.debug(f"Derived recurrence of order {chronological.size} with nu^2={nu_squared:.4f}")

    return LinearRecurrentFormula(coefficients=chronological[::-1], nu_squared=nu_squared)
