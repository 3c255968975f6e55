# src/covid_insights/analytics/generator.py
"""
Report generation for the COVID-19 analysis collection.

This module runs the ranking/rollup queries against DuckDB, optionally
charts the rolling vaccination series, and renders a Markdown report via
Jinja2.

Design goals:
- Clear separation of concerns (data fetch, charting, rendering)
- Dependency injection for the SQL client (easy to test)
- Timing logged for each stage
"""

from __future__ import annotations

import logging
import math
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from jinja2 import Environment, FileSystemLoader, select_autoescape

from covid_insights.utils.config import REPORT_TOP_N
from .charting import plot_rolling_vaccinations
from .metrics import (
    get_as_of_day,
    get_continent_death_counts,
    get_global_rollup,
    get_highest_death_counts,
    get_highest_infection_rates,
    get_latest_vaccinated_percentage,
    get_rolling_vaccinations,
)
from .schemas import ReportOutput
from .sql_client import SQLClient

# ------------------------------------------------------------------------------
# Constants & logger
# ------------------------------------------------------------------------------
TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

log = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------
def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return False


def fmt_pct(value: Any, digits: int = 2) -> str:
    """Format a percentage; NULL/NaN ratios render as n/a."""
    if _is_missing(value):
        return "n/a"
    return f"{float(value):.{digits}f}%"


def fmt_int(value: Any) -> str:
    if _is_missing(value):
        return "n/a"
    return f"{int(value):,}"


def _records(df: pd.DataFrame, top_n: int | None = None) -> List[Dict[str, Any]]:
    """Rows as plain dicts for the template, dates as YYYY-MM-DD."""
    out = df if top_n is None else df.head(top_n)
    out = out.copy()
    for col in out.columns:
        if pd.api.types.is_datetime64_any_dtype(out[col]):
            out[col] = out[col].dt.strftime("%Y-%m-%d")
    return out.to_dict(orient="records")


def _render_report_md(context: Dict[str, Any]) -> str:
    """
    Render the final Markdown report using the Jinja2 template.

    Parameters
    ----------
    context : dict
        Template variables (rollup, rankings, chart path, as_of_day).

    Returns
    -------
    str
        Final Markdown content.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md",)),
    )
    env.filters["pct"] = fmt_pct
    env.filters["num"] = fmt_int
    tpl = env.get_template("report.md.j2")
    return tpl.render(**context)


# ------------------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------------------
def build_report(
    sql: Optional[SQLClient] = None,
    *,
    top_n: int = REPORT_TOP_N,
    chart_locations: Optional[Sequence[str]] = None,
    assets_dir: Optional[Path] = None,
) -> ReportOutput:
    """
    Build the Markdown report over the whole analysis collection.

    Parameters
    ----------
    sql : Optional[SQLClient]
        Custom SQLClient (for tests). Defaults to a new read-only SQLClient().
    top_n : int
        Rows kept per ranking table.
    chart_locations : Optional[Sequence[str]]
        When given, a rolling vaccination chart is drawn for these locations.
    assets_dir : Optional[Path]
        Where chart PNGs are written (defaults to reports/assets).

    Returns
    -------
    ReportOutput
        Global rollup, markdown and produced assets.
    """
    t0 = time.perf_counter()
    sql = sql or SQLClient()

    # --- Fetch data (DuckDB) ---------------------------------------------------
    t_db = time.perf_counter()
    as_of_day = get_as_of_day(sql)
    rollup = get_global_rollup(sql)
    infection = get_highest_infection_rates(sql)
    deaths = get_highest_death_counts(sql)
    continents = get_continent_death_counts(sql)
    vaccinated = get_latest_vaccinated_percentage(sql)
    db_ms = int((time.perf_counter() - t_db) * 1000)

    # --- Charts ----------------------------------------------------------------
    assets: List[str] = []
    t_chart = time.perf_counter()
    if chart_locations:
        rolling = get_rolling_vaccinations(sql)
        assets.append(
            plot_rolling_vaccinations(
                rolling,
                "rolling_vaccinations.png",
                locations=chart_locations,
                assets_dir=assets_dir,
            )
        )
    chart_ms = int((time.perf_counter() - t_chart) * 1000)

    # --- Render final Markdown -------------------------------------------------
    final_md = _render_report_md(
        {
            "as_of_day": as_of_day,
            "top_n": top_n,
            "rollup": rollup,
            "infection_rates": _records(infection, top_n),
            "death_counts": _records(deaths, top_n),
            "continent_death_counts": _records(continents),
            "vaccinated": _records(vaccinated, top_n),
            "chart_png": assets[0] if assets else None,
        }
    )

    total_ms = int((time.perf_counter() - t0) * 1000)
    log.info(
        "report_generated_ms=%d db_ms=%d chart_ms=%d locations=%d",
        total_ms,
        db_ms,
        chart_ms,
        len(infection),
    )

    return ReportOutput(
        global_rollup=rollup,
        report_md=final_md,
        assets=assets,
        as_of_day=as_of_day,
    )
