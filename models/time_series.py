"""
Immutable time series container used throughout the SSA engine
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd
from utils.exceptions import DataValidationError


class TimeSeries:
    """Ordered sequence of (timestamp, value) observations with strictly increasing timestamps"""

    def __init__(self, timestamps: Sequence[Any], values: Sequence[float], name: str = "value"):
        index = pd.Index(timestamps)
        data = np.array(values, dtype=float)

        if data.ndim != 1:
            raise DataValidationError(f"Values must be one-dimensional, got shape {data.shape}")
        if len(index) != len(data):
            raise DataValidationError(
                f"Length mismatch: {len(index)} timestamps but {len(data)} values"
            )
        if not index.is_unique:
            raise DataValidationError("Timestamps must not contain duplicates")
        if not index.is_monotonic_increasing:
            raise DataValidationError("Timestamps must be strictly increasing")
        if not np.all(np.isfinite(data)):
            raise DataValidationError("Values must be finite numbers")

        data.setflags(write=False)
        self._index = index
        self._values = data
        self.name = name

    @classmethod
    def from_series(cls, series: pd.Series) -> 'TimeSeries':
        """Build from a pandas Series indexed by timestamp"""
        return cls(series.index, series.to_numpy(dtype=float), name=series.name or "value")

    @classmethod
    def from_values(cls, values: Sequence[float], start: Union[str, pd.Timestamp] = "2011-01-01",
                    freq: str = "D", name: str = "value") -> 'TimeSeries':
        """Build a regularly spaced series starting at ``start``"""
        index = pd.date_range(start=start, periods=len(values), freq=freq)
        return cls(index, values, name=name)

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]], date_key: str = "date",
                     value_key: str = "value", name: str = "value") -> 'TimeSeries':
        """Build from a list of ``{date, value}`` dicts, sorted by date"""
        if not records:
            return cls([], [], name=name)

        frame = pd.DataFrame(records)
        missing = {date_key, value_key} - set(frame.columns)
        if missing:
            raise DataValidationError(f"Records are missing columns: {sorted(missing)}")

        frame[date_key] = pd.to_datetime(frame[date_key])
        frame = frame.sort_values(date_key)
        return cls(pd.DatetimeIndex(frame[date_key]), frame[value_key].to_numpy(dtype=float), name=name)

    @property
    def timestamps(self) -> pd.Index:
        return self._index

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the observed values"""
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Tuple[Any, float]]:
        return zip(self._index, self._values)

    def __getitem__(self, key):
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("TimeSeries slices must be contiguous")
            return TimeSeries(self._index[key], self._values[key], name=self.name)
        return self._index[key], float(self._values[key])

    def __repr__(self) -> str:
        if len(self) == 0:
            return f"TimeSeries(name={self.name!r}, empty)"
        return (f"TimeSeries(name={self.name!r}, points={len(self)}, "
                f"start={self._index[0]}, end={self._index[-1]})")

    def slice(self, start: int, stop: Optional[int] = None) -> 'TimeSeries':
        """Contiguous positional sub-range [start, stop)"""
        return self[start:stop]

    def head(self, n: int) -> 'TimeSeries':
        return self[:n]

    def tail(self, n: int) -> 'TimeSeries':
        if n <= 0:
            return self[len(self):]
        return self[-n:]

    @property
    def is_datetime(self) -> bool:
        return isinstance(self._index, pd.DatetimeIndex)

    def infer_frequency(self) -> Optional[str]:
        """Pandas frequency string of a regular datetime index, or None"""
        if not self.is_datetime or len(self) < 3:
            return None
        try:
            return pd.infer_freq(self._index)
        except (TypeError, ValueError):
            return None

    def to_series(self) -> pd.Series:
        return pd.Series(self._values.copy(), index=self._index, name=self.name)
