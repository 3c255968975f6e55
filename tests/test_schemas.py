"""Tests for the typed boundary (coercion of loosely typed counts)."""

from datetime import date

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from covid_insights.analytics.metrics import get_case_records, get_vaccination_records
from covid_insights.analytics.queries import count_expr
from covid_insights.analytics.schemas import (
    CaseRecord,
    GlobalRollup,
    RollingVaccinationRow,
    to_int_or_none,
)

from conftest import D1, D3

LOOSE_COUNTS = [
    (5, 5),
    (np.int64(4), 4),
    ("12", 12),
    (" 7 ", 7),
    ("-4", -4),
    (3.0, 3),
    ("10.0", 10),
    ("10.00", 10),
    ("2.5", None),
    ("10.", None),
    ("1e3", None),
    ("", None),
    ("n/a", None),
    (None, None),
    (3.5, None),
    (float("nan"), None),
    (True, None),
    (2**63, None),
]


@pytest.mark.parametrize("raw, expected", LOOSE_COUNTS)
def test_to_int_or_none(raw, expected):
    assert to_int_or_none(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["12", " 7 ", "-4", "10.0", "10.00", "2.5", "10.", "1e3", "", "n/a", "abc", None],
)
def test_sql_conversion_agrees_with_python(con, raw):
    got = con.execute(f"SELECT {count_expr('$v')} AS n;", {"v": raw}).fetchone()[0]
    assert got == to_int_or_none(raw)


class TestModels:
    def test_case_record_coerces_loose_counts(self):
        rec = CaseRecord.model_validate(
            {
                "continent": float("nan"),
                "location": "World",
                "date": pd.Timestamp("2021-01-02"),
                "population": 4500.0,
                "total_cases": "410",
                "new_cases": np.int64(10),
                "total_deaths": "n/a",
                "new_deaths": "",
            }
        )
        assert rec.continent is None
        assert not rec.is_country
        assert rec.date == date(2021, 1, 2)
        assert rec.population == 4500
        assert rec.total_cases == 410
        assert rec.total_deaths is None
        assert rec.new_deaths is None

    def test_rolling_row_keeps_negative_sum(self):
        # a downward correction can take the running sum below zero
        row = RollingVaccinationRow(
            location="Wakanda", date=D1, new_vaccinations="-10", rolling_people_vaccinated=-10
        )
        assert row.new_vaccinations == -10
        assert row.rolling_people_vaccinated == -10

    def test_rolling_row_requires_sum(self):
        with pytest.raises(ValidationError):
            RollingVaccinationRow(location="Wakanda", date=D1)

    def test_rolling_row_nan_percentage_is_none(self):
        row = RollingVaccinationRow(
            location="Narnia", date=D1, population=0, rolling_people_vaccinated=3,
            vaccinated_percentage=float("nan"),
        )
        assert row.vaccinated_percentage is None

    def test_global_rollup_nan_percentage_is_none(self):
        assert GlobalRollup(total_cases=0, total_deaths=0, death_percentage=float("nan")).death_percentage is None


class TestTypedSeries:
    def test_case_records(self, sql):
        recs = get_case_records(sql, "Wakanda")
        assert [r.date for r in recs][-1] == D3
        assert [r.total_deaths for r in recs] == [5, 9, None]
        assert [r.new_deaths for r in recs] == [5, 4, None]
        assert all(r.is_country for r in recs)

    def test_vaccination_records(self, sql):
        recs = get_vaccination_records(sql, "Wakanda")
        assert [r.new_vaccinations for r in recs] == [10, None, 20]

    def test_unknown_location_is_empty(self, sql):
        assert get_case_records(sql, "Atlantis") == []
