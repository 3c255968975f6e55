"""
Global configuration for Covid Insights.

Centralizes paths, relation/view names, and tunable parameters.
"""
from __future__ import annotations

import os
from pathlib import Path

# Project root: .../covid-insights
PROJECT_ROOT = Path(__file__).resolve().parents[3]

# Data
DATA_DIR = PROJECT_ROOT / "data"
DUCKDB_PATH = Path(os.getenv("DUCKDB_PATH", DATA_DIR / "covid.duckdb"))
DUCKDB_SCHEMA = os.getenv("DUCKDB_SCHEMA") or None

# Base relations (may be schema-qualified, e.g. "portfolio.CovidDeaths")
DEATHS_TABLE = os.getenv("DEATHS_TABLE", "CovidDeaths")
VACCINATIONS_TABLE = os.getenv("VACCINATIONS_TABLE", "CovidVaccinations")

# Derived objects
VACCINATION_VIEW = os.getenv("VACCINATION_VIEW", "PercentPopulationVaccinated")
VACCINATION_SNAPSHOT = os.getenv("VACCINATION_SNAPSHOT", "PercentPopulationVaccinatedSnapshot")

# Required columns per base relation
DEATHS_COLUMNS = (
    "continent",
    "location",
    "date",
    "population",
    "total_cases",
    "new_cases",
    "total_deaths",
    "new_deaths",
)
VACCINATIONS_COLUMNS = ("location", "date", "new_vaccinations")

# Aggregate pseudo-rows (continent IS NULL) that are not geographic regions
NON_REGION_AGGREGATES = tuple(
    x.strip()
    for x in os.getenv("NON_REGION_AGGREGATES", "World,European Union,International").split(",")
    if x.strip()
)

# Reporting
REPORTS_DIR = Path(os.getenv("REPORTS_DIR", PROJECT_ROOT / "reports"))
REPORT_TOP_N = int(os.getenv("REPORT_TOP_N", "10"))
