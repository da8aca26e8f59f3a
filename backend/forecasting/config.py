import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_HERE = Path(__file__).resolve().parent

DATA_DIR = Path(os.getenv("FORECAST_DATA_DIR", str(_HERE / "data")))

SOURCE_FILE = os.getenv("FORECAST_SOURCE_FILE", "seedTransactions_1year_13000_labeled.csv")

STORE_PATH = Path(os.getenv("FORECAST_STORE_PATH", str(DATA_DIR / "store.json")))

DEFAULT_CURRENCY = os.getenv("FORECAST_DEFAULT_CURRENCY", "GBP")

HORIZON = int(os.getenv("FORECAST_HORIZON", "12"))

# unset -> torch default (nondeterministic) initialisation and shuffling
SEED = int(os.environ["FORECAST_SEED"]) if os.getenv("FORECAST_SEED") else None


def source_path(file_name: str | None = None) -> Path:
    return DATA_DIR / (file_name or SOURCE_FILE)
