"""CSV parser for scraped race result files ({slug}.csv / {slug}.csv.gz)."""

from __future__ import annotations

import csv
import gzip
import io
from pathlib import Path

from app.shared.formatters import parse_time

from .models import AthleteResult

REQUIRED_COLUMNS = ("FullName", "Status")

# CSV header → AthleteResult attribute
_TEXT_COLUMNS = {
    "FirstName": "first_name",
    "LastName": "last_name",
    "FullName": "full_name",
    "Bib": "bib",
    "AgeGroup": "age_group",
    "Gender": "gender",
    "City": "city",
    "State": "state",
    "Country": "country",
    "CountryISO": "country_iso",
    "SwimTime": "swim_time",
    "BikeTime": "bike_time",
    "RunTime": "run_time",
    "T1Time": "t1_time",
    "T2Time": "t2_time",
    "FinishTime": "finish_time",
    "Status": "status",
}

_SECONDS_COLUMNS = {
    "SwimSeconds": "swim_seconds",
    "BikeSeconds": "bike_seconds",
    "RunSeconds": "run_seconds",
    "T1Seconds": "t1_seconds",
    "T2Seconds": "t2_seconds",
    "FinishSeconds": "finish_seconds",
    "OverallRank": "overall_rank",
    "GenderRank": "gender_rank",
    "AgeGroupRank": "age_group_rank",
}

# Seconds attribute → formatted time attribute it can be recovered from
_TIME_FALLBACKS = {
    "swim_seconds": "swim_time",
    "bike_seconds": "bike_time",
    "run_seconds": "run_time",
    "t1_seconds": "t1_time",
    "t2_seconds": "t2_time",
    "finish_seconds": "finish_time",
}


class ResultsParseError(ValueError):
    """Result file exists but cannot be interpreted."""


def parse_positive_int(value: str | None) -> int | None:
    """Parse a seconds/rank cell.

    "" / "0" / garbage → None: the source writes 0 for splits that were
    not recorded, so 0 never means zero elapsed time.
    """
    text = (value or "").strip()
    if not text:
        return None
    try:
        number = int(float(text))
    except ValueError:
        return None
    return number if number > 0 else None


class ResultsCsvParser:
    """Parser for per-race result CSVs."""

    def __init__(self, finishers_only: bool = True):
        """
        Args:
            finishers_only: If True, drop rows whose Status is not "Finisher".
        """
        self.finishers_only = finishers_only

    def parse_file(self, path: str | Path) -> list[AthleteResult]:
        """Parse a local CSV file (plain or gzipped)."""
        path = Path(path)
        raw = path.read_bytes()
        if path.suffix == ".gz":
            try:
                raw = gzip.decompress(raw)
            except (OSError, EOFError) as e:
                raise ResultsParseError(f"Corrupt gzip file {path}: {e}") from e
        try:
            text = raw.decode("utf-8-sig")  # handles BOM
        except UnicodeDecodeError as e:
            raise ResultsParseError(f"Not UTF-8 text {path}: {e}") from e
        return self.parse_text(text)

    def parse_text(self, text: str) -> list[AthleteResult]:
        """Main parsing logic.

        Row ids are assigned by data-row order before the finisher filter,
        so ids stay stable whatever the status of surrounding rows.

        Raises:
            ResultsParseError: required columns missing, or the csv module
                rejects the file (oversized field, broken quoting).
        """
        reader = csv.DictReader(io.StringIO(text, newline=""))
        try:
            headers = reader.fieldnames or []
            missing = [c for c in REQUIRED_COLUMNS if c not in headers]
            if missing:
                raise ResultsParseError(f"Missing columns: {', '.join(missing)}")

            results: list[AthleteResult] = []
            for row_id, row in enumerate(reader):
                result = self._build_result(row_id, row)
                if self.finishers_only and not result.is_finisher:
                    continue
                results.append(result)
        except csv.Error as e:
            raise ResultsParseError(f"Malformed CSV at line {reader.line_num}: {e}") from e
        return results

    def _build_result(self, row_id: int, row: dict[str, str | None]) -> AthleteResult:
        kwargs: dict = {"id": row_id}
        for column, attr in _TEXT_COLUMNS.items():
            kwargs[attr] = (row.get(column) or "").strip()
        for column, attr in _SECONDS_COLUMNS.items():
            kwargs[attr] = parse_positive_int(row.get(column))
        # Seconds cell blank but formatted time present
        for attr, time_attr in _TIME_FALLBACKS.items():
            if kwargs[attr] is None and kwargs[time_attr]:
                kwargs[attr] = parse_time(kwargs[time_attr]) or None
        return AthleteResult(**kwargs)
