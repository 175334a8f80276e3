import json
from typing import Dict, List, Optional
import numpy as np
import pandas as pd
from models.time_series import TimeSeries


def generate_rental_records(days: int = 730, start: str = "2011-01-01",
                            seed: Optional[int] = None) -> List[Dict]:
    """
    Generates daily bike rental records spanning ``days`` days.
    Each record carries the date as "YYYY-MM-DD", a period indicator (0 for the
    first year, 1 for the second, ...) and a non-negative rental count with a
    weekly cycle, a yearly swing and noise.
    """
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start=start, periods=days, freq="D")
    t = np.arange(days)

    level = 4000 + 4 * t
    weekly = 600 * np.sin(2 * np.pi * t / 7)
    yearly = 1500 * np.sin(2 * np.pi * (t - 90) / 365)
    noise = rng.normal(0, 150, size=days)
    rentals = np.maximum(0, np.round(level + weekly + yearly + noise))

    return [
        {"date": date.strftime("%Y-%m-%d"), "period": int(i // 365), "value": float(value)}
        for i, (date, value) in enumerate(zip(dates, rentals))
    ]


def weekly_demand_series(days: int = 365, level: float = 100.0, amplitude: float = 10.0,
                         noise_std: float = 0.0, seed: Optional[int] = None,
                         start: str = "2011-01-01") -> TimeSeries:
    """Daily series level + amplitude * sin(2*pi*t/7) + Gaussian noise"""
    rng = np.random.default_rng(seed)
    t = np.arange(days)
    values = level + amplitude * np.sin(2 * np.pi * t / 7)
    if noise_std > 0:
        values = values + rng.normal(0, noise_std, size=days)
    return TimeSeries.from_values(values, start=start, freq="D")


def generate_json_data(filename="data.json", days: int = 730, seed: Optional[int] = None):
    """
    Generates a JSON file containing an array of objects with date, period and value fields.
    """
    data = generate_rental_records(days=days, seed=seed)

    with open(filename, "w") as f:
        json.dump(data, f, indent=4)

if __name__ == "__main__":
    generate_json_data()
