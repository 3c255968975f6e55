from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence
import matplotlib.pyplot as plt
import pandas as pd

ASSETS_DIR = Path("reports/assets")


def plot_rolling_vaccinations(
    df: pd.DataFrame,
    filename: str,
    *,
    locations: Optional[Sequence[str]] = None,
    assets_dir: Path | None = None,
) -> str:
    """
    Render one rolling_people_vaccinated line per location.
    Returns the saved PNG path.
    """
    out_dir = Path(assets_dir) if assets_dir else ASSETS_DIR
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / filename

    if locations:
        df = df[df["location"].isin(list(locations))]

    plt.figure()
    for location, grp in df.groupby("location", sort=True):
        plt.plot(grp["date"], grp["rolling_people_vaccinated"], label=str(location))
    plt.title("Rolling people vaccinated")
    plt.xlabel("date"); plt.ylabel("people vaccinated (cumulative)")
    plt.xticks(rotation=45)
    if not df.empty:
        plt.legend()
    plt.tight_layout()
    plt.savefig(path, dpi=120)
    plt.close()
    return str(path)
