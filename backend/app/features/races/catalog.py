"""Race catalog loader — reads the race manifest and per-race result files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from .models import AthleteResult, RaceInfo
from .results_csv import ResultsCsvParser, ResultsParseError

logger = logging.getLogger(__name__)

MANIFEST_NAMES = ("races.json", "races.yaml", "races.yml")


class RaceCatalog:
    """Loads and provides access to the race manifest and result CSVs.

    Both the manifest and each race's results are read at most once and
    cached for the lifetime of the catalog.
    """

    def __init__(self, data_dir: Path, parser: ResultsCsvParser | None = None):
        self.data_dir = Path(data_dir)
        self.parser = parser or ResultsCsvParser()
        self._races: list[RaceInfo] | None = None
        self._results: dict[str, list[AthleteResult]] = {}

    def manifest_path(self) -> Path | None:
        for name in MANIFEST_NAMES:
            path = self.data_dir / name
            if path.exists():
                return path
        return None

    def load(self) -> list[RaceInfo]:
        """Load the manifest (races.json, or races.yaml as the hand-edited variant)."""
        path = self.manifest_path()
        if path is None:
            logger.warning(f"Race manifest not found in {self.data_dir}")
            self._races = []
            return []

        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)

        if isinstance(data, dict):
            data = data.get("races", [])

        races = [
            RaceInfo(
                slug=r["slug"],
                name=r.get("name", r["slug"]),
                date=str(r.get("date", "")),
                location=r.get("location", ""),
                finishers=r.get("finishers") or 0,
                event_id=r.get("eventId"),
            )
            for r in data or []
        ]
        self._races = races
        return races

    @property
    def races(self) -> list[RaceInfo]:
        if self._races is None:
            self.load()
        return self._races or []

    def get_race(self, slug: str) -> RaceInfo | None:
        return next((r for r in self.races if r.slug == slug), None)

    def get_results_path(self, slug: str) -> Path | None:
        """Plain CSV wins over the gzipped copy when both exist."""
        for name in (f"{slug}.csv", f"{slug}.csv.gz"):
            path = self.data_dir / name
            if path.exists():
                return path
        return None

    def load_results(self, slug: str) -> list[AthleteResult]:
        """Finisher results for a race.

        Raises:
            FileNotFoundError: no result file for this race.
            ResultsParseError: the file exists but is malformed.
        """
        cached = self._results.get(slug)
        if cached is not None:
            return cached

        path = self.get_results_path(slug)
        if path is None:
            raise FileNotFoundError(f"Results not found for race: {slug}")

        results = self.parser.parse_file(path)
        self._results[slug] = results
        return results

    def get_result(self, slug: str, result_id: int) -> AthleteResult | None:
        """Single result by row id, None if the race or row is unknown or unreadable."""
        try:
            results = self.load_results(slug)
        except FileNotFoundError:
            return None
        except ResultsParseError as e:
            logger.warning(f"Unreadable results for {slug}: {e}")
            return None
        return next((r for r in results if r.id == result_id), None)
