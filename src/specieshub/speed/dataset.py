"""Loading and parsing of the animal speed CSV."""

import asyncio
import io
import logging
import math
import re
from collections.abc import Iterable, Mapping
from enum import StrEnum

import httpx
import pandas as pd
from pydantic import BaseModel

from specieshub.config.models import SpeciesHubConfig
from specieshub.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)

NAME_COLUMN = "Animal"
SPEED_COLUMN = "Average Speed (km/h)"
DIET_COLUMN = "Diet"

# Leading decimal number, the way a browser's parseFloat reads "120 km/h"
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class Diet(StrEnum):
    """Diet categories used to colour the chart."""

    HERBIVORE = "herbivore"
    OMNIVORE = "omnivore"
    CARNIVORE = "carnivore"


class AnimalDatum(BaseModel):
    """One bar of the speed chart."""

    name: str
    speed: float
    diet: Diet | None = None


def parse_leading_float(value: object) -> float:
    """Parse the numeric prefix of a cell, returning NaN when there is none."""
    if value is None:
        return math.nan
    if isinstance(value, int | float):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else math.nan


def parse_diet(value: object) -> Diet | None:
    """Map a diet cell onto a Diet, case-insensitively; unknown values give None."""
    try:
        return Diet(str(value or "").strip().lower())
    except ValueError:
        return None


def parse_speed_rows(rows: Iterable[Mapping[str, object]]) -> list[AnimalDatum]:
    """Parse CSV records into chart data.

    Rows with a blank name or a speed that is not a finite number are dropped.
    """
    parsed = []
    for row in rows:
        name = str(row.get(NAME_COLUMN) or "").strip()
        speed = parse_leading_float(row.get(SPEED_COLUMN))
        if not name or not math.isfinite(speed):
            continue
        parsed.append(AnimalDatum(name=name, speed=speed, diet=parse_diet(row.get(DIET_COLUMN))))
    return parsed


def read_speed_csv(text: str) -> list[dict[str, object]]:
    """Read CSV text into records, keeping every cell as a string."""
    if not text.strip():
        return []
    frame = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False, skipinitialspace=True)
    frame.columns = [str(column).strip() for column in frame.columns]
    return frame.to_dict(orient="records")


class SpeedDatasetLoader:
    """Fetches the speed CSV from a URL or the static directory and parses it."""

    def __init__(self, config: SpeciesHubConfig, path_resolver: PathResolver):
        self.config = config
        self.path_resolver = path_resolver

    @property
    def source(self) -> str:
        return self.config.speed_chart.csv_source

    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))

    async def _read_source(self) -> str:
        if self.is_remote():
            async with httpx.AsyncClient(
                timeout=self.config.speed_chart.fetch_timeout_seconds
            ) as client:
                response = await client.get(self.source)
                response.raise_for_status()
                return response.text
        path = self.path_resolver.get_static_file_path(self.source)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def load(self) -> list[AnimalDatum]:
        """Load and parse the dataset.

        An unreadable source is logged and yields an empty dataset, which
        renders no chart.
        """
        try:
            text = await self._read_source()
            records = read_speed_csv(text)
        except (httpx.HTTPError, OSError, pd.errors.ParserError, UnicodeDecodeError) as e:
            logger.warning("Could not read speed data from %s: %s", self.source, e)
            return []

        data = parse_speed_rows(records)
        logger.debug("Loaded %d of %d speed rows from %s", len(data), len(records), self.source)
        return data
