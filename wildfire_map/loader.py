"""
Dataset loading (fires JSON + us-atlas boundary)
================================================

Both inputs are fetched once, before anything is drawn. A source is either a
local path or an http(s) URL. The boundary layer is read with geopandas. There is no retry and no partial fallback:
any failure raises `DataLoadError` and the map does not initialise.

Fire records are normalised into a pandas DataFrame that keeps the source
order. Bad individual values (non-numeric coordinates, unparseable dates) are
coerced to NaN/NaT here and excluded later by the filter.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import geopandas as gpd
import numpy as np
import pandas as pd
import requests

from .config import CALIFORNIA_FIPS, DEFAULT_ID_FIELD, REQUEST_TIMEOUT, STATES_OBJECT
from .models import FireRecord

logger = logging.getLogger(__name__)

# source column -> normalised column
FIRE_COLUMNS = {
    "FIRE_NAME": "name",
    "latitude": "latitude",
    "longitude": "longitude",
    "FIRE_SIZE": "size_acres",
    "DISCOVERY_DATETIME": "discovered",
    "CONT_DATETIME": "contained",
    "FIRE_DURATION_DAYS": "duration_days",
    "NWCG_GENERAL_CAUSE": "cause",
}
REQUIRED_COLUMNS = {"latitude", "longitude", "FIRE_SIZE", "DISCOVERY_DATETIME", "FIRE_DURATION_DAYS", "NWCG_GENERAL_CAUSE"}
NUMERIC_COLUMNS = ["latitude", "longitude", "size_acres", "duration_days"]

INPUT_DATE_FORMAT = "%Y-%m-%d"


class DataLoadError(RuntimeError):
    """Raised when a dataset cannot be fetched or decoded."""


# ─────────────────────── Fetch helpers ───────────────────────
def _is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def fetch_json(source: Union[str, Path], timeout: float = REQUEST_TIMEOUT) -> Any:
    """Read JSON from a path or URL, raising DataLoadError on any failure."""
    if _is_url(str(source)):
        logger.debug(f"GET {source}")
        try:
            response = requests.get(str(source), timeout=timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise DataLoadError(f"Failed to fetch {source}: {e}") from e
        except ValueError as e:
            raise DataLoadError(f"Invalid JSON from {source}: {e}") from e

    path = Path(source)
    if not path.exists():
        raise DataLoadError(f"Data file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise DataLoadError(f"Could not read {path}: {e}") from e


# ─────────────────────── Normalisers ───────────────────────
def _to_name(x) -> Optional[str]:
    if x is None or x is pd.NA or (isinstance(x, float) and np.isnan(x)):
        return None
    s = str(x).strip()
    return s or None


def _to_category(x) -> Optional[str]:
    if x is None or x is pd.NA or (isinstance(x, float) and np.isnan(x)):
        return None
    return str(x)


def _to_id(x) -> Optional[str]:
    if x is None or x is pd.NA or (isinstance(x, float) and np.isnan(x)):
        return None
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    return str(x).strip() or None


def _object_column(series: pd.Series, fn) -> pd.Series:
    # object dtype keeps None; string inference would turn it into NaN
    return pd.Series([fn(x) for x in series], index=series.index, dtype=object)


def _str_or_none(x) -> Optional[str]:
    return x if isinstance(x, str) else None


def _to_datetime(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, errors="coerce", utc=True, format="mixed").dt.tz_localize(None)


def _py_datetime(ts) -> Optional[datetime]:
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def normalize_fires(rows: List[Dict], id_field: str = DEFAULT_ID_FIELD) -> pd.DataFrame:
    """Build the normalised fire table from raw JSON records."""
    raw = pd.DataFrame.from_records(rows)
    missing = REQUIRED_COLUMNS - set(raw.columns)
    if missing:
        raise DataLoadError(f"Fire records missing columns: {sorted(missing)}")

    df = pd.DataFrame(index=raw.index)
    for src, dst in FIRE_COLUMNS.items():
        df[dst] = raw[src] if src in raw.columns else None

    df["name"] = _object_column(df["name"], _to_name)
    df["cause"] = _object_column(df["cause"], _to_category)
    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
    df["discovered"] = _to_datetime(df["discovered"])
    df["contained"] = _to_datetime(df["contained"])

    if id_field and id_field in raw.columns:
        df["record_id"] = _object_column(raw[id_field], _to_id)
    else:
        df["record_id"] = pd.Series(None, index=df.index, dtype=object)

    # day-granularity copies used by the filter
    df["discovered_day"] = df["discovered"].dt.normalize()
    df["contained_day"] = df["contained"].dt.normalize()

    finite = np.isfinite(df[NUMERIC_COLUMNS].to_numpy()).all(axis=1)
    df["valid"] = finite & df["discovered"].notna().to_numpy()
    invalid = int((~df["valid"]).sum())
    if invalid:
        logger.debug(f"{invalid} fire records have invalid coordinates, size, duration or discovery date")
    return df.reset_index(drop=True)


# ─────────────────────── Dataset ───────────────────────
class FireDataset:
    """
    Loaded fire records plus the values derived from them once at startup:
    the sorted cause list and the sequence of whole days to scrub through.
    """

    def __init__(self, frame: pd.DataFrame):
        self.frame = frame
        self.records: List[FireRecord] = [
            FireRecord(
                name=_str_or_none(row.name),
                latitude=float(row.latitude),
                longitude=float(row.longitude),
                size_acres=float(row.size_acres),
                discovered=_py_datetime(row.discovered),
                contained=_py_datetime(row.contained),
                duration_days=float(row.duration_days),
                cause=_str_or_none(row.cause),
                record_id=_str_or_none(row.record_id),
            )
            for row in frame.itertuples(index=False)
        ]
        self.causes: List[str] = sorted(frame["cause"].dropna().unique().tolist())

        discovered = frame["discovered"].dropna()
        if discovered.empty:
            raise DataLoadError("No fire record has a valid discovery date")
        self.date_range = (discovered.min(), discovered.max())
        self.days = pd.date_range(
            start=self.date_range[0].normalize(),
            end=self.date_range[1].normalize() + pd.Timedelta(days=1),
            freq="D",
        )
        self._day_lookup = {d.strftime(INPUT_DATE_FORMAT): i for i, d in enumerate(self.days)}

    def __len__(self) -> int:
        return len(self.records)

    @property
    def has_record_ids(self) -> bool:
        return self.frame["record_id"].notna().any()

    @property
    def day_count(self) -> int:
        return len(self.days)

    @property
    def first_day(self) -> pd.Timestamp:
        return self.days[0]

    @property
    def last_day(self) -> pd.Timestamp:
        return self.days[-1]

    def day(self, index: int) -> pd.Timestamp:
        return self.days[index]

    def day_index_for(self, value: Union[str, date, datetime]) -> Optional[int]:
        """Index of the day matching `value` on its YYYY-MM-DD form, else None."""
        key = value if isinstance(value, str) else value.strftime(INPUT_DATE_FORMAT)
        return self._day_lookup.get(key)


def load_fires(source: Union[str, Path], id_field: str = DEFAULT_ID_FIELD) -> FireDataset:
    payload = fetch_json(source)
    if not isinstance(payload, list) or not all(isinstance(r, dict) for r in payload):
        raise DataLoadError(f"Expected a JSON array of fire objects in {source}")
    if not payload:
        raise DataLoadError(f"No fire records in {source}")
    dataset = FireDataset(normalize_fires(payload, id_field=id_field))
    logger.info(
        f"Loaded {len(dataset)} fire records, {len(dataset.causes)} causes, "
        f"{dataset.day_count} days ({dataset.first_day.date()} to {dataset.last_day.date()})"
    )
    return dataset


def load_boundary(source: Union[str, Path], feature_id: str = CALIFORNIA_FIPS, object_name: str = STATES_OBJECT):
    """
    Read one layer of the us-atlas topology with geopandas and return the
    shapely geometry of the feature whose id is `feature_id`.
    """
    if not _is_url(str(source)) and not Path(source).exists():
        raise DataLoadError(f"Boundary file not found: {source}")
    try:
        gdf = gpd.read_file(str(source), layer=object_name)
    except (OSError, RuntimeError, ValueError) as e:
        raise DataLoadError(f"Could not read layer '{object_name}' from {source}: {e}") from e

    # Ensure WGS84
    if gdf.crs and gdf.crs.to_epsg() != 4326:
        gdf = gdf.to_crs("EPSG:4326")

    if "id" not in gdf.columns:
        raise DataLoadError(f"Layer '{object_name}' of {source} has no feature ids")
    match = gdf.loc[(gdf["id"].astype(str) == feature_id) & gdf.geometry.notna()]
    if match.empty:
        raise DataLoadError(f"Feature '{feature_id}' not found in '{object_name}' of {source}")

    geom = match.geometry.iloc[0]
    logger.info(f"Loaded boundary '{feature_id}' ({geom.geom_type}) from {source}")
    return geom
