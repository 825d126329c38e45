import pandas as pd
import pytest

from queries import load_earthquakes

SAMPLE_ROWS = [
    # place, time, mag, depth, latitude, longitude, image
    ("Alpha Trench", "2011-03-11T05:46:24.120Z", 9.1, 29, 38.297, 142.373, "https://example.org/a.png"),
    ("Beta Rise", "2016-08-24T01:36:32.000Z", 6.2, 4.4, 42.723, 13.188, ""),
    ("Gamma Deep", "2018-08-19T00:19:40.670Z", 8.2, 600, -18.113, -178.153, ""),
    ("Delta Fault", "2020-10-30T11:51:27.350Z", 7.0, 21, 37.918, 26.790, ""),
]


@pytest.fixture
def write_csv(tmp_path):
    def _write(rows, columns=("place", "time", "mag", "depth", "latitude", "longitude", "image")):
        path = tmp_path / "quakes.csv"
        pd.DataFrame(list(rows), columns=list(columns)).to_csv(path, index=False)
        return path

    return _write


@pytest.fixture
def quakes_df(write_csv):
    return load_earthquakes(write_csv(SAMPLE_ROWS))


@pytest.fixture
def single_quake_df(write_csv):
    return load_earthquakes(
        write_csv([("Test Ridge", 1700000000000, 7.5, 10, -12.5, 45.25, "")])
    )
