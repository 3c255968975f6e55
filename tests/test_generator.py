"""Tests for the Markdown report and chart output."""

from pathlib import Path

import pytest

from covid_insights.analytics.charting import plot_rolling_vaccinations
from covid_insights.analytics.generator import build_report, fmt_int, fmt_pct
from covid_insights.analytics.metrics import get_rolling_vaccinations


class TestFormatting:
    def test_pct(self):
        assert fmt_pct(15.0) == "15.00%"
        assert fmt_pct(None) == "n/a"
        assert fmt_pct(float("nan")) == "n/a"

    def test_int(self):
        assert fmt_int(1234567) == "1,234,567"
        assert fmt_int(None) == "n/a"


class TestBuildReport:
    def test_report_tables(self, sql):
        rpt = build_report(sql, top_n=2)
        md = rpt.report_md
        assert rpt.as_of_day == "2021-01-03"
        assert rpt.global_rollup.total_cases == 535
        assert rpt.assets == []
        assert "| 535 | 25 | 4.67% |" in md
        assert "| Genovia | 500 | 75 | 15.00% |" in md
        assert "| Wakanda | 1,000 | 150 | 15.00% |" in md
        # top_n=2 cuts the ranking tables
        assert "| Zamunda | 3,000 |" not in md
        assert "| Asia | 12 |" in md
        assert "| Wakanda | 2021-01-03 | 30 | 3.00% |" in md

    def test_report_with_chart(self, sql, tmp_path):
        rpt = build_report(sql, chart_locations=["Wakanda", "Genovia"], assets_dir=tmp_path)
        assert len(rpt.assets) == 1
        png = Path(rpt.assets[0])
        assert png.exists() and png.suffix == ".png"
        assert f"]({png})" in rpt.report_md


class TestCharting:
    def test_plot_all_locations(self, sql, tmp_path):
        df = get_rolling_vaccinations(sql)
        path = plot_rolling_vaccinations(df, "all.png", assets_dir=tmp_path)
        assert Path(path).exists()

    @pytest.mark.parametrize("locations", [["Atlantis"], ["Narnia"]])
    def test_plot_filtered(self, sql, tmp_path, locations):
        df = get_rolling_vaccinations(sql)
        path = plot_rolling_vaccinations(df, "one.png", locations=locations, assets_dir=tmp_path)
        assert Path(path).exists()
