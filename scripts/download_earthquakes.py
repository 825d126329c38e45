import argparse
import csv
import datetime as dt
import io
from pathlib import Path

import requests

FDSN_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"
OUTPUT_PATH = Path("data/eq_image.csv")
FIELDNAMES = ["place", "time", "mag", "depth", "latitude", "longitude", "image"]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Refresh the earthquake CSV from USGS.")
    parser.add_argument("--min-magnitude", type=float, default=5.5)
    parser.add_argument("--start", default="2000-01-01", help="Start date (YYYY-MM-DD)")
    parser.add_argument("--end", default=dt.date.today().isoformat(), help="End date (YYYY-MM-DD)")
    parser.add_argument("--output", type=Path, default=OUTPUT_PATH)
    parser.add_argument("--timeout", type=int, default=60)
    return parser.parse_args(argv)


def fetch_rows(min_magnitude: float, start: str, end: str, timeout: int = 60) -> list[dict]:
    resp = requests.get(
        FDSN_URL,
        params={
            "format": "csv",
            "minmagnitude": min_magnitude,
            "starttime": start,
            "endtime": end,
            "orderby": "time-asc",
        },
        timeout=timeout,
    )
    resp.raise_for_status()

    rows = []
    reader = csv.DictReader(io.StringIO(resp.text))
    for row in reader:
        lat = row.get("latitude", "")
        lon = row.get("longitude", "")
        if not lat or not lon:
            continue
        rows.append(
            {
                "place": row.get("place", ""),
                "time": row.get("time", ""),
                "mag": row.get("mag", ""),
                "depth": row.get("depth", ""),
                "latitude": lat,
                "longitude": lon,
                # USGS does not publish images; fill by hand where wanted.
                "image": "",
            }
        )
    return rows


def main(argv=None) -> None:
    args = parse_args(argv)
    rows = fetch_rows(args.min_magnitude, args.start, args.end, timeout=args.timeout)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with args.output.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)

    print(f"Wrote {len(rows)} rows to {args.output}")


if __name__ == "__main__":
    main()
