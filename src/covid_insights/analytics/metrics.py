from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence

import pandas as pd

from covid_insights.utils.config import NON_REGION_AGGREGATES
from .sql_client import SQLClient
from .schemas import CaseRecord, GlobalRollup, RollingVaccinationRow, VaccinationRecord
from . import queries as Q

log = logging.getLogger(__name__)


def run_query(sql: SQLClient, template: str, params: dict | None = None, *, label: str) -> pd.DataFrame:
    """Render a query template against the client's relations and time it."""
    t0 = time.perf_counter()
    df = sql.df(sql.render(template), params)
    log.debug("%s rows=%d ms=%d", label, len(df), int((time.perf_counter() - t0) * 1000))
    return df


def get_as_of_day(sql: SQLClient) -> str | None:
    """Return last available day in the case relation as ISO string."""
    sql.require_deaths()
    df = run_query(sql, Q.SQL_AS_OF_DAY, label="as_of_day")
    if df.empty or pd.isna(df.iloc[0]["d"]):
        return None
    d = df.iloc[0]["d"]
    if hasattr(d, "date"):
        d = d.date()
    return d.isoformat()


# -----------------------------------------------------------------------------
# Cases vs deaths vs population
# -----------------------------------------------------------------------------

def get_death_ratios(sql: SQLClient, location_like: Optional[str] = None) -> pd.DataFrame:
    """
    death_percentage and percent_population_infected per (location, date).

    A zero denominator gives NULL (NaN) for that ratio; the row is kept.
    `location_like` is a case-insensitive LIKE pattern, e.g. "%states%".
    """
    sql.require_deaths()
    if location_like is None:
        return run_query(sql, Q.SQL_DEATH_RATIOS, label="death_ratios")
    return run_query(
        sql, Q.SQL_DEATH_RATIOS_LIKE, {"location_like": location_like}, label="death_ratios_like"
    )


def get_highest_infection_rates(sql: SQLClient) -> pd.DataFrame:
    """Locations ranked by peak share of population infected (ties: location asc)."""
    sql.require_deaths()
    return run_query(sql, Q.SQL_HIGHEST_INFECTION_RATES, label="highest_infection_rates")


def get_infection_rate_timeline(sql: SQLClient, location_like: Optional[str] = None) -> pd.DataFrame:
    sql.require_deaths()
    if location_like is None:
        return run_query(sql, Q.SQL_INFECTION_RATE_TIMELINE, label="infection_rate_timeline")
    return run_query(
        sql,
        Q.SQL_INFECTION_RATE_TIMELINE_LIKE,
        {"location_like": location_like},
        label="infection_rate_timeline_like",
    )


def get_highest_death_counts(sql: SQLClient) -> pd.DataFrame:
    """Peak cumulative deaths per country; unparseable total_deaths are skipped."""
    sql.require_deaths()
    return run_query(sql, Q.SQL_HIGHEST_DEATH_COUNTS, label="highest_death_counts")


def get_continent_death_counts(sql: SQLClient) -> pd.DataFrame:
    sql.require_deaths()
    return run_query(sql, Q.SQL_CONTINENT_DEATH_COUNTS, label="continent_death_counts")


def get_region_death_counts(
    sql: SQLClient, excluded: Sequence[str] = NON_REGION_AGGREGATES
) -> pd.DataFrame:
    """
    Death totals read from the aggregate pseudo-rows (continent IS NULL).

    Aggregates that are not geographic regions (World, European Union,
    International by default) are left out.
    """
    sql.require_deaths()
    return run_query(sql, Q.SQL_REGION_DEATH_COUNTS, {"excluded": list(excluded)}, label="region_death_counts")


# -----------------------------------------------------------------------------
# Global numbers
# -----------------------------------------------------------------------------

def get_global_rollup(sql: SQLClient) -> GlobalRollup:
    sql.require_deaths()
    df = run_query(sql, Q.SQL_GLOBAL_ROLLUP, label="global_rollup")
    if df.empty:
        return GlobalRollup(total_cases=0, total_deaths=0, death_percentage=None)
    r = df.iloc[0]
    return GlobalRollup(
        total_cases=int(r["total_cases"]),
        total_deaths=int(r["total_deaths"]),
        death_percentage=r["death_percentage"],
    )


def get_global_numbers_by_date(sql: SQLClient) -> pd.DataFrame:
    sql.require_deaths()
    return run_query(sql, Q.SQL_GLOBAL_NUMBERS_BY_DATE, label="global_numbers_by_date")


# -----------------------------------------------------------------------------
# Population vs vaccinations
# -----------------------------------------------------------------------------

def require_join(sql: SQLClient) -> None:
    sql.require_deaths()
    sql.require_vaccinations()


def get_rolling_vaccinations(sql: SQLClient) -> pd.DataFrame:
    """
    Inner join of cases and vaccinations with a per-location running sum.

    (location, date) pairs missing from either relation produce no row.
    Missing/unparseable new_vaccinations count as 0 in the running sum but
    are returned raw in `new_vaccinations`.
    """
    require_join(sql)
    return run_query(sql, Q.SQL_ROLLING_VACCINATIONS, label="rolling_vaccinations")


def get_vaccinated_percentage(sql: SQLClient) -> pd.DataFrame:
    """Rolling join plus vaccinated_percentage (NULL when population is 0)."""
    require_join(sql)
    return run_query(sql, Q.SQL_VACCINATED_PERCENTAGE, label="vaccinated_percentage")


def get_latest_vaccinated_percentage(sql: SQLClient) -> pd.DataFrame:
    """Last joined row per location, ranked by vaccinated_percentage."""
    require_join(sql)
    return run_query(sql, Q.SQL_LATEST_VACCINATED_PERCENTAGE, label="latest_vaccinated_percentage")


def rows_from_df(df: pd.DataFrame) -> List[RollingVaccinationRow]:
    return [RollingVaccinationRow.model_validate(rec) for rec in df.to_dict(orient="records")]


def get_rolling_vaccination_rows(sql: SQLClient) -> List[RollingVaccinationRow]:
    return rows_from_df(get_rolling_vaccinations(sql))


# -----------------------------------------------------------------------------
# Typed per-location series
# -----------------------------------------------------------------------------

def get_case_records(sql: SQLClient, location: str) -> List[CaseRecord]:
    sql.require_deaths()
    df = run_query(sql, Q.SQL_CASE_RECORDS, {"location": location}, label="case_records")
    return [CaseRecord.model_validate(rec) for rec in df.to_dict(orient="records")]


def get_vaccination_records(sql: SQLClient, location: str) -> List[VaccinationRecord]:
    sql.require_vaccinations()
    df = run_query(sql, Q.SQL_VACCINATION_RECORDS, {"location": location}, label="vaccination_records")
    return [VaccinationRecord.model_validate(rec) for rec in df.to_dict(orient="records")]
