"""Shared fixtures: an in-memory DuckDB holding both base relations."""

from datetime import date

import duckdb
import pytest

from covid_insights.analytics.sql_client import SQLClient

D1, D2, D3, D4 = date(2021, 1, 1), date(2021, 1, 2), date(2021, 1, 3), date(2021, 1, 4)

DEATHS_DDL = """
CREATE TABLE {name} (
  continent VARCHAR,
  location VARCHAR,
  date DATE,
  population BIGINT,
  total_cases BIGINT,
  new_cases BIGINT,
  total_deaths VARCHAR,
  new_deaths VARCHAR
);
"""

VACCINATIONS_DDL = """
CREATE TABLE {name} (
  continent VARCHAR,
  location VARCHAR,
  date DATE,
  new_vaccinations VARCHAR
);
"""

# (continent, location, date, population, total_cases, new_cases, total_deaths, new_deaths)
DEATH_ROWS = [
    ("Africa", "Wakanda", D1, 1000, 100, 100, "5", "5"),
    ("Africa", "Wakanda", D2, 1000, 150, 50, "9", "4"),
    ("Africa", "Wakanda", D3, 1000, 150, 0, "n/a", ""),
    ("Europe", "Genovia", D1, 500, 0, 0, "0", "0"),
    ("Europe", "Genovia", D2, 500, 50, 50, "2", "2"),
    ("Europe", "Genovia", D3, 500, 75, 25, "3", "1"),
    ("Asia", "Zamunda", D1, 3000, 300, 300, None, None),
    ("Asia", "Zamunda", D2, 3000, 300, 0, "12", "12"),
    ("Europe", "Narnia", D1, 0, 10, 10, "1", "1"),
    # aggregate pseudo-rows
    (None, "World", D1, 4500, 410, 410, "6", "6"),
    (None, "Europe", D1, 500, 10, 10, "1", "1"),
    (None, "European Union", D1, 400, 10, 10, "1", "1"),
    (None, "Africa", D1, 1000, 100, 100, "5", "5"),
]

# (continent, location, date, new_vaccinations)
VACCINATION_ROWS = [
    ("Africa", "Wakanda", D1, "10"),
    ("Africa", "Wakanda", D2, None),
    ("Africa", "Wakanda", D3, "20"),
    ("Europe", "Genovia", D1, "5"),
    ("Europe", "Genovia", D2, "abc"),
    ("Europe", "Genovia", D3, "7"),
    ("Europe", "Genovia", D4, "100"),  # no case row for this date
    ("Asia", "Zamunda", D1, "50"),  # Zamunda D2 has no vaccination row
    ("Europe", "Narnia", D1, "3"),
    (None, "World", D1, "999"),
]


def load_relations(con, deaths="CovidDeaths", vaccinations="CovidVaccinations"):
    con.execute(DEATHS_DDL.format(name=deaths))
    con.execute(VACCINATIONS_DDL.format(name=vaccinations))
    con.executemany(f"INSERT INTO {deaths} VALUES (?, ?, ?, ?, ?, ?, ?, ?)", DEATH_ROWS)
    con.executemany(f"INSERT INTO {vaccinations} VALUES (?, ?, ?, ?)", VACCINATION_ROWS)


@pytest.fixture
def con():
    c = duckdb.connect(":memory:")
    load_relations(c)
    yield c
    c.close()


@pytest.fixture
def sql(con):
    return SQLClient(con=con)
