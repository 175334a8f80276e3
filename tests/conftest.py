import os
import sys
import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from models import train
from utils.generate_data import weekly_demand_series


@pytest.fixture
def clean_weekly():
    """Noise-free weekly demand: 100 + 10 sin(2 pi t / 7) over a year."""
    return weekly_demand_series(days=365)


@pytest.fixture
def noisy_weekly():
    """Weekly demand with small Gaussian noise (std 0.5)."""
    return weekly_demand_series(days=365, noise_std=0.5, seed=7)


@pytest.fixture
def clean_model(clean_weekly):
    return train(clean_weekly, window_size=7, series_length=30, train_size=365, rank=3)


@pytest.fixture
def noisy_model(noisy_weekly):
    return train(noisy_weekly, window_size=7, series_length=30, train_size=365, rank=4)
