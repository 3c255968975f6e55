"""
Runner: creates/refreshes the PercentPopulationVaccinated view.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# .env at project root does not override exported variables; loaded before
# covid_insights reads its settings
load_dotenv(dotenv_path=ROOT / ".env", override=False, encoding="utf-8")

from covid_insights.analytics.sql_client import SQLClient
from covid_insights.analytics.views import create_vaccination_view, materialize_vaccination_snapshot


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=None, help="DuckDB file (default: $DUCKDB_PATH).")
    parser.add_argument(
        "--snapshot",
        action="store_true",
        help="Also stage a session snapshot and print its row count.",
    )
    args = parser.parse_args()

    with SQLClient(Path(args.db) if args.db else None, read_only=False) as sql:
        view = create_vaccination_view(sql)
        print(f"[runner] view created: {view}")
        if args.snapshot:
            n = materialize_vaccination_snapshot(sql)
            print(f"[runner] snapshot staged: {sql.snapshot_table} rows={n}")


if __name__ == "__main__":
    main()
