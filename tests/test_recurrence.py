"""Tests for deriving and applying the linear recurrent formula."""
import numpy as np
import pytest

from models.recurrence import LinearRecurrentFormula, build_recurrence
from models.subspace import SSAParameters, SignalSubspace, extract_subspace
from utils.exceptions import VerticalityError


def _sine(n, period=7.0):
    return np.sin(2 * np.pi * np.arange(n) / period)


def test_recurrence_reproduces_pure_sinusoid():
    values = _sine(60)
    params = SSAParameters(window_size=7, series_length=30, train_size=60, rank=2)
    recurrence = build_recurrence(extract_subspace(values, params))

    assert recurrence.order == 6
    assert 0.0 < recurrence.nu_squared < 1.0
    for t in range(6, 60):
        assert recurrence.next_value(values[t - 6:t]) == pytest.approx(values[t], abs=1e-8)


def test_one_step_predictions_match_next_value():
    values = _sine(40) * 5 + 20
    params = SSAParameters(window_size=5, series_length=25, train_size=40, rank=3)
    recurrence = build_recurrence(extract_subspace(values, params))

    predictions = recurrence.one_step_predictions(values)
    assert predictions.shape == (40 - recurrence.order,)
    expected = [recurrence.next_value(values[t - recurrence.order:t]) for t in range(recurrence.order, 40)]
    np.testing.assert_allclose(predictions, expected)


def test_coefficients_multiply_most_recent_value_first():
    recurrence = LinearRecurrentFormula(coefficients=[1.0, 0.0])
    assert recurrence.next_value([5.0, 7.0]) == 7.0
    recurrence = LinearRecurrentFormula(coefficients=[0.0, 1.0])
    assert recurrence.next_value([5.0, 7.0]) == 5.0


def test_next_value_needs_enough_history():
    recurrence = LinearRecurrentFormula(coefficients=[0.5, 0.5])
    with pytest.raises(ValueError):
        recurrence.next_value([1.0])


def test_vertical_subspace_rejected():
    basis = np.array([[0.0], [0.0], [1.0]])
    subspace = SignalSubspace(basis=basis, singular_values=[1.0])

    with pytest.raises(VerticalityError) as excinfo:
        build_recurrence(subspace)
    assert excinfo.value.nu_squared == pytest.approx(1.0)


def test_nearly_vertical_subspace_respects_epsilon():
    last = np.sqrt(1.0 - 1e-4)
    basis = np.array([[np.sqrt(1e-4)], [0.0], [last]])
    subspace = SignalSubspace(basis=basis, singular_values=[1.0])

    assert build_recurrence(subspace, epsilon=1e-6).order == 2
    with pytest.raises(VerticalityError):
        build_recurrence(subspace, epsilon=1e-3)
