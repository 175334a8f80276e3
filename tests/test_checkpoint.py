"""Tests for saving and restoring trained models."""
import io
import json

import numpy as np
import pytest

from models import forecast
from utils.checkpoint import dumps, load_checkpoint, loads, save_checkpoint
from utils.exceptions import CorruptCheckpointError


def _assert_same_forecasts(original, restored, horizon=14):
    expected = forecast(original, horizon)
    actual = forecast(restored, horizon)
    np.testing.assert_allclose(actual.forecast, expected.forecast, rtol=1e-9)
    np.testing.assert_allclose(actual.lower_bound, expected.lower_bound, rtol=1e-9)
    np.testing.assert_allclose(actual.upper_bound, expected.upper_bound, rtol=1e-9)


def test_round_trip_preserves_forecasts(noisy_model):
    restored = loads(dumps(noisy_model))

    assert restored.window_size == noisy_model.window_size
    assert restored.rank == noisy_model.rank
    assert restored.residual_std == pytest.approx(noisy_model.residual_std)
    assert restored.last_timestamp == noisy_model.last_timestamp
    assert restored.frequency == "D"
    _assert_same_forecasts(noisy_model, restored)


def test_record_layout(clean_model):
    record = json.loads(dumps(clean_model))

    assert record["version"] == 1
    assert record["window_size"] == 7
    assert record["rank"] == 3
    assert len(record["basis_vectors"]) == 3
    assert all(len(vector) == 7 for vector in record["basis_vectors"])
    assert len(record["lrf_coefficients"]) == 6
    assert len(record["trailing_buffer"]) == 6


def test_save_and_load_file(tmp_path, noisy_model):
    path = tmp_path / "checkpoints" / "model.json"
    save_checkpoint(noisy_model, path)

    assert path.exists()
    _assert_same_forecasts(noisy_model, load_checkpoint(str(path)))


def test_save_and_load_stream(clean_model):
    buffer = io.StringIO()
    save_checkpoint(clean_model, buffer)
    buffer.seek(0)

    _assert_same_forecasts(clean_model, load_checkpoint(buffer))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_checkpoint(tmp_path / "missing.json")


class TestCorruptCheckpoints:
    @pytest.fixture
    def record(self, clean_model):
        return json.loads(dumps(clean_model))

    def test_invalid_json(self):
        with pytest.raises(CorruptCheckpointError):
            loads("{not json")

    def test_not_an_object(self):
        with pytest.raises(CorruptCheckpointError):
            loads("[1, 2, 3]")

    def test_unsupported_version(self, record):
        record["version"] = 99
        with pytest.raises(CorruptCheckpointError):
            loads(json.dumps(record))

    def test_wrong_buffer_length(self, record):
        record["trailing_buffer"] = record["trailing_buffer"][:-1]
        with pytest.raises(CorruptCheckpointError):
            loads(json.dumps(record))

    def test_wrong_basis_shape(self, record):
        record["basis_vectors"][0] = record["basis_vectors"][0][:-1]
        with pytest.raises(CorruptCheckpointError):
            loads(json.dumps(record))

    def test_missing_field(self, record):
        del record["lrf_coefficients"]
        with pytest.raises(CorruptCheckpointError):
            loads(json.dumps(record))

    def test_rank_not_below_window(self, record):
        record["rank"] = 7
        with pytest.raises(CorruptCheckpointError):
            loads(json.dumps(record))

    def test_non_finite_coefficient(self, record):
        record["lrf_coefficients"][0] = float("nan")
        with pytest.raises(CorruptCheckpointError):
            loads(json.dumps(record))

    def test_infinite_buffer_value(self, record):
        record["trailing_buffer"][-1] = float("inf")
        with pytest.raises(CorruptCheckpointError):
            loads(json.dumps(record))
