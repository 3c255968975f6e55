"""
Saved view and session snapshot for the population-vs-vaccinations result.

- The view (PercentPopulationVaccinated) is a saved query: every read
  re-executes the join and running sum against the current base relations.
  Nothing is cached on the Python side.
- The snapshot is a TEMP table staged from the same query. It lives for the
  connection's session and reflects the base relations as of
  materialization time; later changes to the base relations are not seen
  until it is materialized again.
"""
from __future__ import annotations

import logging

import pandas as pd

from .metrics import require_join, run_query
from .sql_client import SQLClient
from . import queries as Q

log = logging.getLogger(__name__)


def create_vaccination_view(sql: SQLClient) -> str:
    """
    Create or replace the vaccination view. Requires a writable connection.

    Returns:
        The view name.
    """
    require_join(sql)
    sql.execute(sql.render(Q.SQL_CREATE_VACCINATION_VIEW))
    log.info("view created: %s", sql.view_name)
    return sql.view_name


def read_vaccination_view(sql: SQLClient, *, with_percentage: bool = False) -> pd.DataFrame:
    """Query the view, optionally adding vaccinated_percentage on top."""
    sql.require_columns(sql.view_name, ("location", "date", "population", "rolling_people_vaccinated"))
    template = Q.SQL_READ_VACCINATION_VIEW_PCT if with_percentage else Q.SQL_READ_VACCINATION_VIEW
    return run_query(sql, template, label="read_vaccination_view")


def materialize_vaccination_snapshot(sql: SQLClient) -> int:
    """
    Stage the percentage result into a session TEMP table.

    Returns:
        Number of rows staged.
    """
    require_join(sql)
    sql.execute(sql.render(Q.SQL_MATERIALIZE_SNAPSHOT))
    n = sql.con.execute(f"SELECT COUNT(*) FROM {sql.render('{snapshot}')};").fetchone()[0]
    log.info("snapshot staged: %s rows=%d", sql.snapshot_table, n)
    return int(n)


def read_vaccination_snapshot(sql: SQLClient) -> pd.DataFrame:
    """Read the staged snapshot. May be stale relative to the base relations."""
    sql.require_columns(sql.snapshot_table, ("location", "date", "rolling_people_vaccinated"))
    return run_query(sql, Q.SQL_READ_SNAPSHOT, label="read_vaccination_snapshot")
