from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass
from typing import Any, List, Optional

import pandas as pd

from queries import EarthquakeRecord, run_query

logger = logging.getLogger(__name__)

ZOOM_ACTION_LABEL = "Zoom to earthquake"


def _to_local(ts: pd.Timestamp) -> pd.Timestamp:
    return pd.Timestamp(ts.to_pydatetime().astimezone())


def _to_timestamp(value: Any, tz: Optional[str]) -> pd.Timestamp:
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        ts = pd.Timestamp(int(value), unit="ms").tz_localize("UTC")
    else:
        ts = pd.Timestamp(value)
    if pd.isna(ts):
        raise ValueError(f"Not a valid timestamp: {value!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_convert(tz) if tz else _to_local(ts)
    return ts


def format_date(value: Any, tz: Optional[str] = None) -> str:
    """Format a timestamp as ``"5 March 2024, at 9:07"``.

    Epoch milliseconds and timezone-aware values are shown in ``tz`` (the
    server's local zone when empty); naive values are taken as wall-clock time.
    """
    ts = _to_timestamp(value, tz)
    return f"{ts.day} {ts.month_name()} {ts.year}, at {ts.hour}:{ts.minute:02d}"


def _format_number(value: float) -> str:
    return f"{value:g}"


@dataclass(frozen=True)
class EventEntry:
    record: EarthquakeRecord
    title: str
    date_label: str
    mag: float
    depth: float
    action_label: str = ZOOM_ACTION_LABEL

    @property
    def summary(self) -> str:
        return f"Magnitude {_format_number(self.mag)} | Depth {_format_number(self.depth)} km"

    @property
    def key(self) -> str:
        return f"zoom_{self.record.object_id}"


def build_entry(record: EarthquakeRecord, tz: Optional[str] = None) -> EventEntry:
    try:
        date_label = format_date(record.time, tz)
    except (ValueError, TypeError):
        logger.warning("Unparseable time %r for %s", record.time, record.place)
        date_label = str(record.time)
    return EventEntry(
        record=record,
        title=record.place,
        date_label=date_label,
        mag=record.mag,
        depth=record.depth,
    )


def build_event_list(
    df: pd.DataFrame, where: str = "mag > 7", tz: Optional[str] = None
) -> List[EventEntry]:
    outcome = run_query(df, where)
    if not outcome.ok:
        return []
    return [build_entry(record, tz) for record in outcome.result.records]
