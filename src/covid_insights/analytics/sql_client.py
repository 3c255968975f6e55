from __future__ import annotations
import os
import duckdb as ddb
from pathlib import Path

from covid_insights.utils.config import (
    DEATHS_COLUMNS,
    DEATHS_TABLE,
    DUCKDB_PATH,
    DUCKDB_SCHEMA,
    VACCINATION_SNAPSHOT,
    VACCINATION_VIEW,
    VACCINATIONS_COLUMNS,
    VACCINATIONS_TABLE,
)
from covid_insights.utils.duck import connect, quote_ident, relation_columns
from .exceptions import SchemaError


def resolve_db_path() -> Path:
    path = Path(os.getenv("DUCKDB_PATH") or DUCKDB_PATH)
    if not path.is_absolute():
        # ascend to repo root by pyproject.toml
        cur = Path.cwd()
        while cur != cur.parent and not (cur / "pyproject.toml").exists():
            cur = cur.parent
        path = cur / path
    return path


def _setting(name: str, default: str | None) -> str | None:
    # read at call time so a .env loaded after import still applies
    return os.getenv(name) or default


class SQLClient:
    """
    DuckDB handle bound to the case/vaccination relations.

    Either opens `db_path` (read-only by default) or wraps an existing
    connection passed as `con` (e.g. an in-memory database in tests).
    Relation names left as None come from the environment
    (DEATHS_TABLE, VACCINATIONS_TABLE, ...) when the client is created.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        *,
        con: ddb.DuckDBPyConnection | None = None,
        read_only: bool = True,
        deaths_table: str | None = None,
        vaccinations_table: str | None = None,
        view_name: str | None = None,
        snapshot_table: str | None = None,
    ):
        if con is not None:
            self.db_path = None
            self.con = con
        else:
            self.db_path = Path(db_path) if db_path else resolve_db_path()
            if not self.db_path.exists():
                raise FileNotFoundError(f"DuckDB not found at {self.db_path}")
            self.con = connect(
                self.db_path, read_only=read_only, schema=_setting("DUCKDB_SCHEMA", DUCKDB_SCHEMA)
            )
        self.deaths_table = deaths_table or _setting("DEATHS_TABLE", DEATHS_TABLE)
        self.vaccinations_table = vaccinations_table or _setting("VACCINATIONS_TABLE", VACCINATIONS_TABLE)
        self.view_name = view_name or _setting("VACCINATION_VIEW", VACCINATION_VIEW)
        self.snapshot_table = snapshot_table or _setting("VACCINATION_SNAPSHOT", VACCINATION_SNAPSHOT)

    def render(self, template: str) -> str:
        """Fill relation placeholders in a SQL template with quoted identifiers."""
        return template.format(
            deaths=quote_ident(self.deaths_table),
            vaccinations=quote_ident(self.vaccinations_table),
            view=quote_ident(self.view_name),
            snapshot=quote_ident(self.snapshot_table),
        )

    def df(self, sql: str, params: dict | None = None):
        return self.con.execute(sql, params or {}).df()

    def execute(self, sql: str, params: dict | None = None) -> None:
        self.con.execute(sql, params or {})

    def require_columns(self, relation: str, columns) -> None:
        """
        Fail fast if `relation` is absent or lacks any of `columns`.

        Raises:
            SchemaError: Before any analytical query runs.
        """
        try:
            present = set(relation_columns(self.con, relation))
        except ddb.CatalogException as exc:
            raise SchemaError(relation, detail=f"relation not found ({exc})") from exc
        missing = [c for c in columns if c.lower() not in present]
        if missing:
            raise SchemaError(relation, missing)

    def require_deaths(self) -> None:
        self.require_columns(self.deaths_table, DEATHS_COLUMNS)

    def require_vaccinations(self) -> None:
        self.require_columns(self.vaccinations_table, VACCINATIONS_COLUMNS)

    def close(self):
        self.con.close()

    def __enter__(self) -> "SQLClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
