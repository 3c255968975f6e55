# scripts/run_report.py
from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from datetime import datetime

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

load_dotenv(dotenv_path=ROOT / ".env", override=False, encoding="utf-8")

from covid_insights.analytics.generator import build_report
from covid_insights.analytics.sql_client import SQLClient
from covid_insights.utils.config import REPORT_TOP_N, REPORTS_DIR

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=None, help="DuckDB file (default: $DUCKDB_PATH).")
    parser.add_argument("--out", default=str(REPORTS_DIR), help="Output folder for markdown.")
    parser.add_argument("--top", type=int, default=REPORT_TOP_N, help="Rows per ranking table.")
    parser.add_argument(
        "--chart",
        action="append",
        default=[],
        metavar="LOCATION",
        help="Chart rolling vaccinations for LOCATION (repeatable).",
    )
    args = parser.parse_args()

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    with SQLClient(Path(args.db) if args.db else None) as sql:
        rpt = build_report(
            sql,
            top_n=args.top,
            chart_locations=args.chart or None,
            assets_dir=out_dir / "assets",
        )
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    out_md = out_dir / f"report_{ts}.md"
    out_md.write_text(rpt.report_md, encoding="utf-8")

    print(f"✅ Report saved: {out_md}")

if __name__ == "__main__":
    main()
