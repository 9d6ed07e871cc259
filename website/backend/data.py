import json
import logging
import os
from pathlib import Path

import polars as pl
from pydantic import ValidationError

from constants import COUNTY_DEFAULTS, FALLBACK_COLOR_SCALES, FILTER_DIMENSIONS
from filters import build_filter_expr
from models import ColorScale, County, FilterSettings

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.environ.get("DATA_DIR", str(Path(__file__).parent / "data")))

COUNTY_DATA_PATH = os.environ.get("COUNTY_DATA_PATH", str(DATA_DIR / "comprehensive_county_data.json"))
COLOR_SCALES_PATH = os.environ.get("COLOR_SCALES_PATH", str(DATA_DIR / "color_scales.json"))
RECOMMENDATIONS_PATH = os.environ.get("RECOMMENDATIONS_PATH", str(DATA_DIR / "policy_recommendations.json"))
INSIGHTS_PATH = os.environ.get("INSIGHTS_PATH", str(DATA_DIR / "county_insights.json"))

NUMERIC_COLUMNS = [
    "Healthcare_Access", "Opportunity_Score", "Vulnerability_Index", "Resilience_Score",
    "Healthcare_Access_Percentile", "Insurance_Rate_Percentile", "Education_Rate_Percentile",
    "Insurance_Rate", "Poverty_Rate", "Education_Rate", "Disability_Rate", "No_Vehicle_Rate",
    "LEP_Rate", "Median_Income", "Broadband_Rate", "performance_vs_cluster", "cluster_avg_score",
]
RATE_COLUMNS = [dim["field"] for dim in FILTER_DIMENSIONS.values()] + ["No_Vehicle_Rate", "LEP_Rate"]


def _ensure_column(frame: pl.DataFrame, name: str, dtype) -> pl.DataFrame:
    if name not in frame.columns:
        return frame.with_columns(pl.lit(None, dtype=dtype).alias(name))
    return frame.with_columns(pl.col(name).cast(dtype, strict=False))


def normalize_counties(records: list[dict]) -> pl.DataFrame:
    """Single normalization pass: every documented default is applied here
    so nothing downstream re-implements fallback logic."""
    frame = pl.from_dicts(records, infer_schema_length=None, strict=False)

    for alt, name in (("latitude", "lat"), ("longitude", "lng")):
        frame = _ensure_column(frame, name, pl.Float64)
        if alt in frame.columns:
            frame = frame.with_columns(pl.coalesce(pl.col(name), pl.col(alt).cast(pl.Float64, strict=False)).alias(name))

    for name in NUMERIC_COLUMNS:
        frame = _ensure_column(frame, name, pl.Float64)
    for name in ("Population", "Cluster_7", "rank_in_cluster", "total_in_cluster"):
        frame = _ensure_column(frame, name, pl.Int64)
    for name in ("FIPS", "County", "State", "Region", "Cluster_Name_Detailed", "Cluster_Description"):
        frame = _ensure_column(frame, name, pl.Utf8)

    fills = [pl.col(name).fill_null(default) for name, default in COUNTY_DEFAULTS.items()]
    fills += [
        pl.col(name).fill_null(0.0) for name in RATE_COLUMNS if name not in COUNTY_DEFAULTS
    ]
    fills += [
        pl.col("FIPS").str.zfill(5),
        pl.col("County").fill_null(""),
        pl.col("State").fill_null(""),
        pl.col("Cluster_Name_Detailed").fill_null(""),
        pl.col("Cluster_Description").fill_null(""),
    ]
    frame = frame.with_columns(fills)

    missing_fips = frame.filter(pl.col("FIPS").is_null()).height
    if missing_fips:
        logger.warning("Dropping %d county records without FIPS", missing_fips)
        frame = frame.filter(pl.col("FIPS").is_not_null())
    return frame


def load_color_scales(path: str | None) -> dict[str, ColorScale]:
    scales = {mode: ColorScale(**scale) for mode, scale in FALLBACK_COLOR_SCALES.items()}
    if not path:
        return scales
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load color scales from %s, using fallback scales: %s", path, e)
        return scales

    for mode, entry in raw.items():
        try:
            scales[mode] = ColorScale(**entry)
        except (ValidationError, TypeError) as e:
            logger.warning("Ignoring malformed color scale '%s': %s", mode, e)
    return scales


def _load_optional_json(path: str | None, label: str):
    if not path:
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.info("No %s file at %s", label, path)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", label, e)
    return []


class Dataset:
    """In-memory county collection, read-only after load."""

    def __init__(self, frame: pl.DataFrame, color_scales: dict[str, ColorScale] | None = None,
                 recommendations: list[dict] | None = None, insights: list[dict] | None = None):
        self.frame = frame.with_row_index("row_nr")
        self.counties = [County.model_validate(row) for row in frame.to_dicts()]
        self.by_fips = {c.fips: c for c in self.counties}
        self.color_scales = color_scales if color_scales is not None else load_color_scales(None)
        self.recommendations = recommendations or []
        self.insights = insights or []

    @classmethod
    def from_records(cls, records: list[dict], **kwargs) -> "Dataset":
        return cls(normalize_counties(records), **kwargs)

    def __len__(self):
        return len(self.counties)

    def get(self, fips: str) -> County | None:
        return self.by_fips.get(fips)

    def filtered(self, settings: FilterSettings) -> list[County]:
        rows = self.frame.filter(build_filter_expr(settings))["row_nr"].to_list()
        return [self.counties[i] for i in rows]

    def filtered_frame(self, settings: FilterSettings | None = None) -> pl.DataFrame:
        frame = self.frame if settings is None else self.frame.filter(build_filter_expr(settings))
        return frame.drop("row_nr")

    def regions(self) -> list[str]:
        return sorted(self.frame["Region"].drop_nulls().unique().to_list())

    def cluster_ids(self) -> list[int]:
        return sorted(self.frame["Cluster_7"].unique().to_list())

    def dimension_bounds(self) -> dict:
        """Slider bounds per filter dimension, widened to cover every loaded value."""
        dimensions = {}
        for name, dim in FILTER_DIMENSIONS.items():
            lo, hi = dim["bounds"]
            if self.frame.height:
                column = self.frame[dim["field"]]
                lo = min(lo, column.min())
                hi = max(hi, column.max())
            dimensions[name] = {**dim, "bounds": [lo, hi]}
        return dimensions

    def color_scale(self, mode: str) -> ColorScale | None:
        if mode == "cluster":
            return None
        return self.color_scales.get(mode)

    def recommendations_for(self, fips: str) -> list[dict]:
        return [r for r in self.recommendations if r.get("FIPS") == fips]

    def insights_for(self, fips: str) -> list:
        for entry in self.insights:
            if entry.get("FIPS") == fips:
                return entry.get("insights", [])
        return []


def load_dataset(county_path: str = COUNTY_DATA_PATH, color_scales_path: str | None = COLOR_SCALES_PATH,
                 recommendations_path: str | None = RECOMMENDATIONS_PATH,
                 insights_path: str | None = INSIGHTS_PATH) -> Dataset:
    with open(county_path, "r", encoding="utf-8") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError(f"{county_path} must contain a JSON array of county records")

    dataset = Dataset.from_records(
        records,
        color_scales=load_color_scales(color_scales_path),
        recommendations=_load_optional_json(recommendations_path, "policy recommendations"),
        insights=_load_optional_json(insights_path, "county insights"),
    )
    logger.info(
        "Loaded %d counties, %d color scales, %d recommendations, %d insight sets",
        len(dataset), len(dataset.color_scales), len(dataset.recommendations), len(dataset.insights),
    )
    return dataset


dataset: Dataset | None = None
