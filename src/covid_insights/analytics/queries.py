"""
Central SQL definitions for the COVID-19 analysis collection.

Design goals
------------
- Per-country analysis only sees real countries (continent IS NOT NULL);
  rows with a NULL continent are aggregate/region pseudo-rows.
- Loosely typed counts (total_deaths, new_deaths, new_vaccinations) go through
  `count_expr`: integral text ("12", " 7 ", "10.0") becomes BIGINT, anything
  else ("abc", "2.5", "1e3", blanks) becomes NULL (skipped by MAX/SUM), or 0
  where a running sum needs a value. `schemas.to_int_or_none` applies the
  same COUNT_PATTERN on the Python side.
- Every ratio is guarded: a zero/NULL denominator yields NULL for that row.
- Ranking queries break ties on the group key (ascending) so output order
  is deterministic.
- Relation names are placeholders ({deaths}, {vaccinations}, {view},
  {snapshot}) filled with quoted identifiers by SQLClient.render().
"""

# Optional minus, digits, optionally a decimal point followed only by zeros.
COUNT_PATTERN = r"-?[0-9]+(\.0+)?"


def count_expr(column: str) -> str:
    """SQL converting `column` to BIGINT, or NULL when it is not an integral count."""
    text = f"TRIM(CAST({column} AS VARCHAR))"
    return (
        f"CASE WHEN regexp_full_match({text}, '{COUNT_PATTERN}') "
        f"THEN TRY_CAST({text} AS BIGINT) ELSE NULL END"
    )


TOTAL_DEATHS = count_expr("total_deaths")
NEW_DEATHS = count_expr("new_deaths")
NEW_VACCINATIONS = count_expr("vac.new_vaccinations")

SQL_AS_OF_DAY = """
-- Last available day in the case relation
SELECT MAX(date) AS d FROM {deaths};
"""

# -----------------------------
# Death / infection ratios per (location, date)
# -----------------------------

_DEATH_RATIOS_SELECT = f"""
SELECT
  location,
  date,
  population,
  total_cases,
  {TOTAL_DEATHS} AS total_deaths,
  CASE WHEN total_cases > 0
       THEN 100.0 * CAST({TOTAL_DEATHS} AS DOUBLE) / total_cases
       ELSE NULL
  END AS death_percentage,
  CASE WHEN population > 0
       THEN 100.0 * CAST(total_cases AS DOUBLE) / population
       ELSE NULL
  END AS percent_population_infected
FROM {{deaths}}
WHERE continent IS NOT NULL
"""

SQL_DEATH_RATIOS = _DEATH_RATIOS_SELECT + """
ORDER BY location, date;
"""

SQL_DEATH_RATIOS_LIKE = _DEATH_RATIOS_SELECT + """
  AND location ILIKE $location_like
ORDER BY location, date;
"""

# -----------------------------
# Highest infection rate per location
# -----------------------------

SQL_HIGHEST_INFECTION_RATES = """
SELECT
  location,
  population,
  MAX(total_cases) AS highest_infection_count,
  MAX(CASE WHEN population > 0
           THEN 100.0 * CAST(total_cases AS DOUBLE) / population
           ELSE NULL
      END) AS percent_population_infected
FROM {deaths}
WHERE continent IS NOT NULL
GROUP BY location, population
ORDER BY percent_population_infected DESC NULLS LAST, location ASC, population ASC;
"""

# Dashboard feed: the same ranking kept per date (time series per location)
SQL_INFECTION_RATE_TIMELINE = """
SELECT
  location,
  population,
  date,
  MAX(total_cases) AS highest_infection_count,
  MAX(CASE WHEN population > 0
           THEN 100.0 * CAST(total_cases AS DOUBLE) / population
           ELSE NULL
      END) AS percent_population_infected
FROM {deaths}
WHERE continent IS NOT NULL
GROUP BY location, population, date
ORDER BY percent_population_infected DESC NULLS LAST, location ASC, date ASC;
"""

SQL_INFECTION_RATE_TIMELINE_LIKE = """
SELECT
  location,
  population,
  date,
  MAX(total_cases) AS highest_infection_count,
  MAX(CASE WHEN population > 0
           THEN 100.0 * CAST(total_cases AS DOUBLE) / population
           ELSE NULL
      END) AS percent_population_infected
FROM {deaths}
WHERE continent IS NOT NULL
  AND location ILIKE $location_like
GROUP BY location, population, date
ORDER BY percent_population_infected DESC NULLS LAST, location ASC, date ASC;
"""

# -----------------------------
# Highest death counts (location / continent)
# -----------------------------

SQL_HIGHEST_DEATH_COUNTS = f"""
SELECT
  location,
  MAX({TOTAL_DEATHS}) AS total_death_count
FROM {{deaths}}
WHERE continent IS NOT NULL
GROUP BY location
ORDER BY total_death_count DESC NULLS LAST, location ASC;
"""

SQL_CONTINENT_DEATH_COUNTS = f"""
SELECT
  continent,
  MAX({TOTAL_DEATHS}) AS total_death_count
FROM {{deaths}}
WHERE continent IS NOT NULL
GROUP BY continent
ORDER BY total_death_count DESC NULLS LAST, continent ASC;
"""

# Regions as reported by the aggregate pseudo-rows themselves
SQL_REGION_DEATH_COUNTS = f"""
SELECT
  location,
  CAST(COALESCE(SUM({NEW_DEATHS}), 0) AS BIGINT) AS total_death_count
FROM {{deaths}}
WHERE continent IS NULL
  AND NOT list_contains(CAST($excluded AS VARCHAR[]), location)
GROUP BY location
ORDER BY total_death_count DESC, location ASC;
"""

# -----------------------------
# Global numbers
# -----------------------------

SQL_GLOBAL_ROLLUP = f"""
WITH agg AS (
  SELECT
    COALESCE(SUM(new_cases), 0) AS total_cases,
    COALESCE(SUM({NEW_DEATHS}), 0) AS total_deaths
  FROM {{deaths}}
  WHERE continent IS NOT NULL
)
SELECT
  CAST(total_cases AS BIGINT)  AS total_cases,
  CAST(total_deaths AS BIGINT) AS total_deaths,
  CASE WHEN total_cases > 0
       THEN 100.0 * CAST(total_deaths AS DOUBLE) / total_cases
       ELSE NULL
  END AS death_percentage
FROM agg;
"""

SQL_GLOBAL_NUMBERS_BY_DATE = f"""
WITH agg AS (
  SELECT
    date,
    COALESCE(SUM(new_cases), 0) AS total_cases,
    COALESCE(SUM({NEW_DEATHS}), 0) AS total_deaths
  FROM {{deaths}}
  WHERE continent IS NOT NULL
  GROUP BY date
)
SELECT
  date,
  CAST(total_cases AS BIGINT)  AS total_cases,
  CAST(total_deaths AS BIGINT) AS total_deaths,
  CASE WHEN total_cases > 0
       THEN 100.0 * CAST(total_deaths AS DOUBLE) / total_cases
       ELSE NULL
  END AS death_percentage
FROM agg
ORDER BY date;
"""

# -----------------------------
# Population vs vaccinations (rolling sum per location)
# -----------------------------

# Shared body: inner join on (location, date), running sum reset per location.
# Negative daily corrections are summed as reported.
SQL_ROLLING_VACCINATIONS_BODY = f"""
SELECT
  dea.continent,
  dea.location,
  dea.date,
  dea.population,
  vac.new_vaccinations,
  CAST(SUM(COALESCE({NEW_VACCINATIONS}, 0)) OVER (
    PARTITION BY dea.location
    ORDER BY dea.date
    ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW
  ) AS BIGINT) AS rolling_people_vaccinated
FROM {{deaths}} dea
JOIN {{vaccinations}} vac
  ON dea.location = vac.location
 AND dea.date = vac.date
WHERE dea.continent IS NOT NULL
"""

SQL_ROLLING_VACCINATIONS = SQL_ROLLING_VACCINATIONS_BODY + """
ORDER BY dea.location, dea.date;
"""

_VACCINATED_PERCENTAGE_SELECT = """
WITH pop_vs_vac AS (
""" + SQL_ROLLING_VACCINATIONS_BODY + """
)
SELECT
  *,
  CASE WHEN population > 0
       THEN 100.0 * CAST(rolling_people_vaccinated AS DOUBLE) / population
       ELSE NULL
  END AS vaccinated_percentage
FROM pop_vs_vac
ORDER BY location, date
"""

SQL_VACCINATED_PERCENTAGE = _VACCINATED_PERCENTAGE_SELECT + ";"

SQL_LATEST_VACCINATED_PERCENTAGE = """
WITH pop_vs_vac AS (
""" + SQL_ROLLING_VACCINATIONS_BODY + """
)
SELECT
  continent,
  location,
  date,
  population,
  rolling_people_vaccinated,
  CASE WHEN population > 0
       THEN 100.0 * CAST(rolling_people_vaccinated AS DOUBLE) / population
       ELSE NULL
  END AS vaccinated_percentage
FROM pop_vs_vac
QUALIFY ROW_NUMBER() OVER (PARTITION BY location ORDER BY date DESC) = 1
ORDER BY vaccinated_percentage DESC NULLS LAST, location ASC;
"""

# -----------------------------
# Saved view + session snapshot
# -----------------------------

SQL_CREATE_VACCINATION_VIEW = "CREATE OR REPLACE VIEW {view} AS\n" + SQL_ROLLING_VACCINATIONS_BODY + ";"

SQL_READ_VACCINATION_VIEW = """
SELECT
  continent,
  location,
  date,
  population,
  new_vaccinations,
  rolling_people_vaccinated
FROM {view}
ORDER BY location, date;
"""

SQL_READ_VACCINATION_VIEW_PCT = """
SELECT
  continent,
  location,
  date,
  population,
  new_vaccinations,
  rolling_people_vaccinated,
  CASE WHEN population > 0
       THEN 100.0 * CAST(rolling_people_vaccinated AS DOUBLE) / population
       ELSE NULL
  END AS vaccinated_percentage
FROM {view}
ORDER BY location, date;
"""

SQL_MATERIALIZE_SNAPSHOT = "CREATE OR REPLACE TEMP TABLE {snapshot} AS\n" + _VACCINATED_PERCENTAGE_SELECT + ";"

SQL_READ_SNAPSHOT = """
SELECT *
FROM {snapshot}
ORDER BY location, date;
"""

# -----------------------------
# Raw per-location series
# -----------------------------

SQL_CASE_RECORDS = """
SELECT continent, location, date, population, total_cases, new_cases, total_deaths, new_deaths
FROM {deaths}
WHERE location = $location
ORDER BY date;
"""

SQL_VACCINATION_RECORDS = """
SELECT location, date, new_vaccinations
FROM {vaccinations}
WHERE location = $location
ORDER BY date;
"""
