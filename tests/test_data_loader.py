"""Tests for loading period-tagged demand records and splitting them."""
import json

import numpy as np
import pandas as pd
import pytest
import requests

from utils.data_loader import DataLoader, load_split, split_by_period
from utils.exceptions import DataValidationError
from utils.generate_data import generate_json_data, generate_rental_records


@pytest.fixture
def records():
    return [
        {"date": "2011-01-02", "period": 0, "value": 20.0},
        {"date": "2011-01-01", "period": 0, "value": 10.0},
        {"date": "2012-01-01", "period": 1, "value": 30.0},
        {"date": "2012-01-02", "period": 1, "value": 40.0},
    ]


class TestDataLoader:
    def test_load_json_list(self, tmp_path, records):
        path = tmp_path / "rentals.json"
        path.write_text(json.dumps(records))

        frame = DataLoader.load_data(str(path))

        assert list(frame.columns) == ['date', 'period', 'value']
        assert frame['date'].is_monotonic_increasing
        assert frame['value'].tolist() == [10.0, 20.0, 30.0, 40.0]

    def test_load_json_with_separate_arrays(self, tmp_path):
        path = tmp_path / "rentals.json"
        path.write_text(json.dumps({
            "dates": ["2011-01-01", "2011-01-02"],
            "periods": [0, 0],
            "values": [5, 6],
        }))

        frame = DataLoader.load_from_file(str(path))
        assert frame['value'].tolist() == [5.0, 6.0]

    def test_load_csv_with_original_column_names(self, tmp_path):
        path = tmp_path / "rentals.csv"
        pd.DataFrame({
            "RentalDate": ["2011-01-01", "2011-01-02"],
            "Year": [0, 0],
            "TotalRentals": [985, 801],
        }).to_csv(path, index=False)

        frame = DataLoader.load_data(str(path))
        assert frame['value'].tolist() == [985.0, 801.0]
        assert frame['period'].tolist() == [0.0, 0.0]

    def test_missing_column(self, tmp_path):
        path = tmp_path / "rentals.json"
        path.write_text(json.dumps([{"date": "2011-01-01", "value": 1}]))
        with pytest.raises(DataValidationError):
            DataLoader.load_from_file(str(path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "rentals.json"
        path.write_text("{broken")
        with pytest.raises(DataValidationError):
            DataLoader.load_from_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DataLoader.load_from_file(str(tmp_path / "nothing.json"))

    def test_load_from_url(self, monkeypatch, records):
        class FakeResponse:
            text = json.dumps(records)

            def raise_for_status(self):
                pass

            def json(self):
                return records

        calls = {}

        def fake_get(url, timeout, headers):
            calls['url'] = url
            calls['timeout'] = timeout
            return FakeResponse()

        monkeypatch.setattr(requests, "get", fake_get)

        frame = DataLoader.load_data("https://example.com/rentals", timeout=5)

        assert calls == {'url': "https://example.com/rentals", 'timeout': 5}
        assert len(frame) == 4

    def test_url_timeout(self, monkeypatch):
        def fake_get(url, timeout, headers):
            raise requests.exceptions.Timeout()

        monkeypatch.setattr(requests, "get", fake_get)
        with pytest.raises(TimeoutError):
            DataLoader.load_from_url("https://example.com/rentals", timeout=1)

    def test_invalid_url(self):
        with pytest.raises(DataValidationError):
            DataLoader.load_from_url("not a url")


class TestSplitByPeriod:
    def test_split_at_boundary(self, records):
        train_series, eval_series = split_by_period(records, boundary=1)

        np.testing.assert_array_equal(train_series.values, [10.0, 20.0])
        np.testing.assert_array_equal(eval_series.values, [30.0, 40.0])
        assert eval_series.timestamps[0] == pd.Timestamp("2012-01-01")

    def test_everything_before_boundary(self, records):
        train_series, eval_series = split_by_period(records, boundary=5)
        assert len(train_series) == 4
        assert len(eval_series) == 0

    def test_missing_columns(self):
        with pytest.raises(DataValidationError):
            split_by_period([{"date": "2011-01-01", "value": 1.0}])

    def test_generated_records_split_into_years(self):
        train_series, eval_series = split_by_period(generate_rental_records(days=730, seed=1))
        assert len(train_series) == 365
        assert len(eval_series) == 365
        assert np.all(train_series.values >= 0)


def test_load_split_from_generated_file(tmp_path):
    path = tmp_path / "data.json"
    generate_json_data(str(path), days=400, seed=3)

    train_series, eval_series = load_split(str(path))

    assert len(train_series) == 365
    assert len(eval_series) == 35
    assert train_series.infer_frequency() == "D"
