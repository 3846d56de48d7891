"""Configuration helpers for the life grid editor."""

from __future__ import annotations

import os
from dataclasses import dataclass

from lifegrid.utils import parse_bool, parse_float, parse_int, strip_or_none

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_EXPECTED_LIFE_YEARS = 80
DEFAULT_SAVE_DEBOUNCE_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    session_id: str | None
    verify_ssl: bool
    timeout: float


@dataclass(frozen=True)
class GridConfig:
    expected_life_years: int
    save_debounce_seconds: float

    @property
    def total_months(self) -> int:
        return self.expected_life_years * 12


@dataclass(frozen=True)
class LifeGridConfig:
    api: ApiConfig
    grid: GridConfig
    viewer: str | None

    @staticmethod
    def from_env(env: dict[str, str] | None = None) -> LifeGridConfig:
        source = os.environ if env is None else env

        base_url = strip_or_none(source.get("LIFEGRID_API_URL")) or DEFAULT_API_URL
        api = ApiConfig(
            base_url=base_url.rstrip("/"),
            session_id=strip_or_none(source.get("LIFEGRID_SESSION")),
            verify_ssl=parse_bool(source.get("LIFEGRID_VERIFY_SSL"), True),
            timeout=max(1.0, parse_float(source.get("LIFEGRID_TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS)),
        )

        expected_years = parse_int(source.get("LIFEGRID_EXPECTED_LIFE_YEARS"), DEFAULT_EXPECTED_LIFE_YEARS)
        if expected_years <= 0:
            expected_years = DEFAULT_EXPECTED_LIFE_YEARS
        debounce = parse_float(source.get("LIFEGRID_SAVE_DEBOUNCE_SECONDS"), DEFAULT_SAVE_DEBOUNCE_SECONDS)
        grid = GridConfig(
            expected_life_years=expected_years,
            save_debounce_seconds=max(0.0, debounce),
        )

        viewer = strip_or_none(source.get("LIFEGRID_VIEWER"))
        return LifeGridConfig(
            api=api,
            grid=grid,
            viewer=viewer.lower() if viewer else None,
        )
