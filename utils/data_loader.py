"""
Data loading utilities for fetching demand records from files or URLs
"""

import io
import json
import pandas as pd
import requests
from pathlib import Path
from typing import Dict, List, Tuple, Union
from urllib.parse import urlparse
from models.time_series import TimeSeries
from utils.exceptions import DataValidationError
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Column names used by the original rentals table
COLUMN_ALIASES = {
    'RentalDate': 'date',
    'Year': 'period',
    'TotalRentals': 'value',
}


class DataLoader:
    """Utility class for loading period-tagged demand records from files or URLs"""

    @staticmethod
    def load_from_file(file_path: str) -> pd.DataFrame:
        """Load records from a local JSON or CSV file"""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {file_path}")

        if path.suffix.lower() == '.csv':
            return DataLoader._process_frame(pd.read_csv(path), source=file_path)

        try:
            with open(path, 'r') as f:
                raw = json.load(f)
        except json.JSONDecodeError:
            raise DataValidationError(f"Invalid JSON format in file: {file_path}")

        return DataLoader._process_raw_data(raw, source=file_path)

    @staticmethod
    def load_from_url(url: str, timeout: int = 30, headers: Dict[str, str] = None) -> pd.DataFrame:
        """
        Load records from a URL endpoint

        Args:
            url: URL to fetch data from
            timeout: Request timeout in seconds
            headers: Optional HTTP headers

        Returns:
            pd.DataFrame: Records with date, period and value columns
        """
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise DataValidationError(f"Invalid URL format: {url}")

        if headers is None:
            headers = {
                'User-Agent': 'SSA-Forecaster/1.0',
                'Accept': 'application/json, text/csv',
            }

        logger.info(f"Fetching data from: {url}")

        try:
            response = requests.get(url, timeout=timeout, headers=headers)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            raise TimeoutError(f"Request to {url} timed out after {timeout} seconds")
        except requests.exceptions.ConnectionError:
            raise ConnectionError(f"Failed to connect to {url}")
        except requests.exceptions.HTTPError as e:
            raise DataValidationError(f"HTTP error {e.response.status_code} when fetching {url}")
        except requests.exceptions.RequestException as e:
            raise DataValidationError(f"Request failed: {str(e)}")

        if parsed.path.lower().endswith('.csv'):
            return DataLoader._process_frame(pd.read_csv(io.StringIO(response.text)), source=url)

        try:
            raw = response.json()
        except ValueError:
            raise DataValidationError(f"Response from {url} is not valid JSON")

        logger.info(f"Successfully fetched {len(raw)} items from URL")
        return DataLoader._process_raw_data(raw, source=url)

    @staticmethod
    def _process_raw_data(raw: Union[list, dict], source: str) -> pd.DataFrame:
        """
        Process raw JSON data into a records frame

        Expected formats:
        1. List of objects: [{"date": "2011-01-01", "period": 0, "value": 985}, ...]
        2. Object with data array: {"data": [{"date": ..., "period": ..., "value": ...}, ...]}
        3. Object with separate arrays: {"dates": [...], "periods": [...], "values": [...]}
        """
        if isinstance(raw, list):
            data_list = raw
        elif isinstance(raw, dict):
            if 'data' in raw:
                data_list = raw['data']
            elif {'dates', 'periods', 'values'} <= set(raw):
                dates, periods, values = raw['dates'], raw['periods'], raw['values']
                if not len(dates) == len(periods) == len(values):
                    raise DataValidationError("Dates, periods and values arrays have different lengths")
                data_list = [{'date': d, 'period': p, 'value': v} for d, p, v in zip(dates, periods, values)]
            else:
                raise DataValidationError(
                    "Unknown JSON structure - expected 'data' field or 'dates'/'periods'/'values' fields"
                )
        else:
            raise DataValidationError("JSON data must be a list or object")

        if not data_list:
            raise DataValidationError(f"No data found in {source}")

        return DataLoader._process_frame(pd.DataFrame(data_list), source=source)

    @staticmethod
    def _process_frame(df: pd.DataFrame, source: str) -> pd.DataFrame:
        """Normalize column names, types and ordering of a records frame"""
        df = df.rename(columns=COLUMN_ALIASES)

        for column in ('date', 'period', 'value'):
            if column not in df.columns:
                raise DataValidationError(f"Missing '{column}' column in data from {source}")

        try:
            df['date'] = pd.to_datetime(df['date'])
            df['period'] = df['period'].astype(float)
            df['value'] = df['value'].astype(float)
        except (TypeError, ValueError) as e:
            raise DataValidationError(f"Failed to process data from {source}: {str(e)}")

        df = df.sort_values('date').reset_index(drop=True)[['date', 'period', 'value']]

        if df.empty:
            raise DataValidationError(f"No data found in {source}")

        logger.info(f"Processed {len(df)} records from {df['date'].min()} to {df['date'].max()}")
        return df

    @staticmethod
    def load_data(source: str, **kwargs) -> pd.DataFrame:
        """
        Load records from file or URL (auto-detect)

        Args:
            source: File path or URL
            **kwargs: Additional arguments for URL loading (timeout, headers)

        Returns:
            pd.DataFrame: Records with date, period and value columns
        """
        if source.startswith(('http://', 'https://')):
            return DataLoader.load_from_url(source, **kwargs)
        else:
            return DataLoader.load_from_file(source)


def split_by_period(records: Union[pd.DataFrame, List[Dict]], boundary: float = 1.0) -> Tuple[TimeSeries, TimeSeries]:
    """
    Split records into a training era (period < boundary) and an
    evaluation era (period >= boundary)

    Returns:
        (training series, evaluation series)
    """
    frame = records if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
    frame = frame.rename(columns=COLUMN_ALIASES)

    missing = {'date', 'period', 'value'} - set(frame.columns)
    if missing:
        raise DataValidationError(f"Records are missing columns: {sorted(missing)}")

    frame = frame.assign(date=pd.to_datetime(frame['date'])).sort_values('date')
    is_training = frame['period'].astype(float) < boundary

    def to_series(part: pd.DataFrame) -> TimeSeries:
        return TimeSeries(pd.DatetimeIndex(part['date']), part['value'].to_numpy(dtype=float))

    train_series = to_series(frame[is_training])
    eval_series = to_series(frame[~is_training])

    logger.info(f"Split {len(frame)} records at period {boundary}: "
                f"{len(train_series)} training, {len(eval_series)} evaluation")
    return train_series, eval_series


def load_split(source: str, boundary: float = 1.0, **kwargs) -> Tuple[TimeSeries, TimeSeries]:
    """Load records from a file or URL and split them into training and evaluation series"""
    return split_by_period(DataLoader.load_data(source, **kwargs), boundary)
