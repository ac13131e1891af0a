"""
Shared fixtures: in-memory results and a small on-disk data directory.
"""

import csv
import json

import pytest

from app.features.races.models import AthleteResult, RaceInfo


CSV_HEADERS = [
    "FirstName", "LastName", "FullName", "Bib", "AgeGroup", "Gender",
    "City", "State", "Country", "CountryISO",
    "SwimTime", "BikeTime", "RunTime", "T1Time", "T2Time", "FinishTime",
    "SwimSeconds", "BikeSeconds", "RunSeconds", "T1Seconds", "T2Seconds", "FinishSeconds",
    "OverallRank", "GenderRank", "AgeGroupRank", "Status",
]


def _hms(seconds):
    if not seconds:
        return ""
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h}:{m:02d}:{s:02d}"


def csv_row(
    full_name,
    country="United States",
    iso="USA",
    gender="Female",
    age_group="F30-34",
    swim=2100,
    bike=9000,
    run=6000,
    t1=180,
    t2=120,
    finish=None,
    rank=1,
    status="Finisher",
    city="",
):
    """One CSV row dict; finish defaults to the sum of the splits."""
    if finish is None:
        finish = sum(v or 0 for v in (swim, bike, run, t1, t2))
    first, _, last = full_name.partition(" ")
    return {
        "FirstName": first, "LastName": last, "FullName": full_name, "Bib": str(rank),
        "AgeGroup": age_group, "Gender": gender, "City": city, "State": "",
        "Country": country, "CountryISO": iso,
        "SwimTime": _hms(swim), "BikeTime": _hms(bike), "RunTime": _hms(run),
        "T1Time": _hms(t1), "T2Time": _hms(t2), "FinishTime": _hms(finish),
        "SwimSeconds": swim or 0, "BikeSeconds": bike or 0, "RunSeconds": run or 0,
        "T1Seconds": t1 or 0, "T2Seconds": t2 or 0, "FinishSeconds": finish or 0,
        "OverallRank": rank, "GenderRank": rank, "AgeGroupRank": rank, "Status": status,
    }


def write_race_csv(path, rows):
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_HEADERS)
        writer.writeheader()
        writer.writerows(rows)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def make_result():
    """Factory for AthleteResult with sensible defaults."""
    counter = {"id": 0}

    def _make(full_name="Jane Doe", **kwargs):
        defaults = dict(
            id=counter["id"],
            full_name=full_name,
            age_group="F30-34",
            gender="Female",
            country="United States",
            country_iso="USA",
        )
        counter["id"] += 1
        defaults.update(kwargs)
        return AthleteResult(**defaults)

    return _make


@pytest.fixture
def two_races():
    """Two race editions of the same course."""
    return [
        RaceInfo(slug="im703-new-york-2024", name="IRONMAN 70.3 New York 2024", date="2024-06-02", finishers=3),
        RaceInfo(slug="im703-new-york-2025", name="IRONMAN 70.3 New York 2025", date="2025-06-01", finishers=3),
    ]


@pytest.fixture
def data_dir(tmp_path):
    """Data directory with a manifest, two race CSVs and one missing CSV.

    Jane Doe (USA, Female) finishes both races.
    """
    races = [
        {"slug": "im703-new-york-2024", "name": "IRONMAN 70.3 New York 2024",
         "date": "2024-06-02", "location": "New York", "finishers": 3},
        {"slug": "im703-new-york-2025", "name": "IRONMAN 70.3 New York 2025",
         "date": "2025-06-01", "location": "New York", "finishers": 3},
        {"slug": "im-lake-placid-2025", "name": "IRONMAN Lake Placid 2025",
         "date": "2025-07-20", "location": "Lake Placid", "finishers": 0},
    ]
    (tmp_path / "races.json").write_text(json.dumps(races), encoding="utf-8")

    write_race_csv(tmp_path / "im703-new-york-2024.csv", [
        csv_row("Jane Doe", swim=2000, bike=9000, run=6000, rank=1),
        csv_row("José García", country="Spain", iso="ESP", gender="Male",
                age_group="M35-39", swim=2400, bike=9600, run=6600, rank=2),
        csv_row("Bob Smith", gender="Male", age_group="M40-44", status="DNF", rank=0),
        csv_row("Anna Janeway", age_group="F40-44", swim=2600, bike=10200, run=7200, rank=3),
    ])
    write_race_csv(tmp_path / "im703-new-york-2025.csv", [
        csv_row("Jose Garcia", country="Spain", iso="ESP", gender="Male",
                age_group="M35-39", swim=2300, bike=9500, run=6500, rank=1),
        csv_row("Jane Doe", swim=2100, bike=9300, run=6200, rank=2),
        csv_row("Mary Jane Watson", age_group="F30-34", swim=None, bike=9900, run=7000, rank=3),
    ])
    return tmp_path
