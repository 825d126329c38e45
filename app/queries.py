from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

import pandas as pd

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["place", "time", "mag", "depth", "latitude", "longitude"]
NUMERIC_COLUMNS = ["mag", "depth", "latitude", "longitude"]


class EarthquakeDataError(RuntimeError):
    pass


class QueryError(RuntimeError):
    pass


@dataclass(frozen=True)
class EarthquakeRecord:
    object_id: int
    place: str
    time: Any
    mag: float
    depth: float
    image: str
    latitude: float
    longitude: float

    @classmethod
    def from_row(cls, row: pd.Series) -> "EarthquakeRecord":
        image = row.get("image")
        return cls(
            object_id=int(row["object_id"]),
            place=str(row["place"]),
            time=row["time"],
            mag=float(row["mag"]),
            depth=float(row["depth"]),
            image="" if pd.isna(image) else str(image),
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
        )


@dataclass
class QueryResult:
    records: List[EarthquakeRecord]
    where: str


@dataclass
class QueryOutcome:
    result: Optional[QueryResult] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_earthquakes(path: str | Path) -> pd.DataFrame:
    path = Path(path)
    try:
        df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise EarthquakeDataError(f"Could not read earthquake data from {path}: {exc}") from exc
    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise EarthquakeDataError(f"Earthquake data is missing columns: {missing}")
    if "image" not in df.columns:
        df["image"] = ""
    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    before = len(df)
    df = df.dropna(subset=["latitude", "longitude"]).reset_index(drop=True)
    if len(df) < before:
        logger.warning("Dropped %d earthquake rows without coordinates", before - len(df))
    df["image"] = df["image"].fillna("").astype(str)
    df.insert(0, "object_id", range(len(df)))
    logger.info("Loaded %d earthquakes from %s", len(df), path)
    return df


def query_features(df: pd.DataFrame, where: str) -> QueryResult:
    try:
        matched = df.query(where) if where.strip() else df
    except Exception as exc:
        raise QueryError(f"Invalid filter expression {where!r}: {exc}") from exc
    records = [EarthquakeRecord.from_row(row) for _, row in matched.iterrows()]
    return QueryResult(records=records, where=where)


def run_query(df: pd.DataFrame, where: str) -> QueryOutcome:
    try:
        return QueryOutcome(result=query_features(df, where))
    except Exception as exc:
        logger.exception("Earthquake query failed: %s", where)
        return QueryOutcome(error=exc)


def get_record(df: pd.DataFrame, object_id: int) -> Optional[EarthquakeRecord]:
    matched = df[df["object_id"] == object_id]
    if matched.empty:
        return None
    return EarthquakeRecord.from_row(matched.iloc[0])
