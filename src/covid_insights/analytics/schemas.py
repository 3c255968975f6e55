# src/covid_insights/analytics/schemas.py
"""
Typed data models used across the COVID-19 analysis collection.

These Pydantic schemas define the contract between:
- the two base relations (CovidDeaths, CovidVaccinations) and Python callers,
- the rolling vaccination query/view and downstream consumers,
- and the report generation pipeline.

Loosely typed counts are coerced at this boundary by `to_int_or_none`,
which follows the same rule as the SQL conversion:
unparseable values become None instead of raising.
"""
from __future__ import annotations

import math
import re
import datetime as dt
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .queries import COUNT_PATTERN

_COUNT_RE = re.compile(COUNT_PATTERN)
_BIGINT_MIN, _BIGINT_MAX = -(2**63), 2**63 - 1


def to_int_or_none(value: Any) -> Optional[int]:
    """
    Parse a loosely typed count into an int.

    The value is read as text and must match COUNT_PATTERN ("12", " 7 ",
    "10.0", 3.0), the same rule the SQL side applies. Blank strings, NaN,
    fractional values, exponents, bools and anything outside BIGINT give None.
    """
    if value is None or isinstance(value, bool):
        return None
    s = str(value).strip()
    if not _COUNT_RE.fullmatch(s):
        return None
    n = int(s.split(".", 1)[0])
    return n if _BIGINT_MIN <= n <= _BIGINT_MAX else None


def _to_float_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _to_date(value: Any) -> Any:
    # pandas.Timestamp is a datetime subclass
    if isinstance(value, dt.datetime):
        return value.date()
    return value


class CaseRecord(BaseModel):
    """
    One row of CovidDeaths, keyed by (location, date).

    Attributes:
        continent: None marks an aggregate/region pseudo-row, not a country.
        total_deaths / new_deaths: Stored loosely typed at the source; coerced.
    """

    continent: Optional[str] = Field(None, description="Continent; None for aggregate rows.")
    location: str = Field(..., description="Country or aggregate name.")
    date: dt.date = Field(..., description="Calendar date of the observation.")
    population: Optional[int] = Field(None, description="Population (constant per location).")
    total_cases: Optional[int] = Field(None, description="Cumulative cases.")
    new_cases: Optional[int] = Field(None, description="Daily new cases.")
    total_deaths: Optional[int] = Field(None, description="Cumulative deaths.")
    new_deaths: Optional[int] = Field(None, description="Daily new deaths.")

    @field_validator(
        "population", "total_cases", "new_cases", "total_deaths", "new_deaths", mode="before"
    )
    @classmethod
    def coerce_counts(cls, v: Any) -> Optional[int]:
        return to_int_or_none(v)

    @field_validator("continent", mode="before")
    @classmethod
    def coerce_continent(cls, v: Any) -> Any:
        if isinstance(v, float) and math.isnan(v):
            return None
        return v

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _to_date(v)

    @property
    def is_country(self) -> bool:
        return self.continent is not None


class VaccinationRecord(BaseModel):
    """One row of CovidVaccinations. A missing new_vaccinations value is None."""

    location: str
    date: dt.date
    new_vaccinations: Optional[int] = None

    @field_validator("new_vaccinations", mode="before")
    @classmethod
    def coerce_count(cls, v: Any) -> Optional[int]:
        return to_int_or_none(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _to_date(v)


class RollingVaccinationRow(BaseModel):
    """
    One row of the population-vs-vaccinations result.

    Attributes:
        new_vaccinations: Raw daily value after coercion (None when unreported).
        rolling_people_vaccinated: Running sum for the location up to `date`.
        vaccinated_percentage: Only set when read with the percentage column.
    """

    continent: Optional[str] = None
    location: str
    date: dt.date
    population: Optional[int] = None
    new_vaccinations: Optional[int] = None
    rolling_people_vaccinated: int = Field(
        ..., description="Running sum of new_vaccinations; negative corrections included."
    )
    vaccinated_percentage: Optional[float] = Field(
        None, description="rolling_people_vaccinated / population * 100, None if undefined."
    )

    @field_validator("population", "new_vaccinations", mode="before")
    @classmethod
    def coerce_counts(cls, v: Any) -> Optional[int]:
        return to_int_or_none(v)

    @field_validator("vaccinated_percentage", mode="before")
    @classmethod
    def coerce_pct(cls, v: Any) -> Optional[float]:
        return _to_float_or_none(v)

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        return _to_date(v)


class GlobalRollup(BaseModel):
    """Worldwide totals over country rows (continent not null)."""

    total_cases: int = Field(..., description="Sum of new_cases.")
    total_deaths: int = Field(..., description="Sum of new_deaths after conversion.")
    death_percentage: Optional[float] = Field(
        None, description="total_deaths / total_cases * 100; None when total_cases is 0."
    )

    @field_validator("death_percentage", mode="before")
    @classmethod
    def coerce_pct(cls, v: Any) -> Optional[float]:
        return _to_float_or_none(v)


class ReportOutput(BaseModel):
    """
    Output payload returned by the report generator.

    Attributes:
        global_rollup: Worldwide totals.
        report_md: Markdown-rendered full report.
        assets: Paths of charts produced for the report.
        as_of_day: Last date present in the case relation (YYYY-MM-DD).
    """

    global_rollup: GlobalRollup
    report_md: str
    assets: List[str] = Field(default_factory=list)
    as_of_day: Optional[str] = Field(
        None, description="Reference date (YYYY-MM-DD) the report is based on."
    )
