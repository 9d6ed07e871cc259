from typing import Iterable

import polars as pl

from constants import FILTER_DIMENSIONS, QUICK_FILTERS
from models import County, FilterSettings

# County attribute for each filter dimension
DIMENSION_ATTRS = {
    "population": "population",
    "healthcare": "healthcare_access",
    "income": "median_income",
    "poverty": "poverty_rate",
    "disability": "disability_rate",
    "education": "education_rate",
    "insurance": "insurance_rate",
    "vulnerability": "vulnerability_index",
    "opportunity": "opportunity_score",
    "resilience": "resilience_score",
    "broadband": "broadband_rate",
}


def active_ranges(settings: FilterSettings) -> list[tuple[str, float, float]]:
    ranges = []
    for dimension in FILTER_DIMENSIONS:
        bounds = settings.range_for(dimension)
        if bounds is not None:
            ranges.append((dimension, bounds[0], bounds[1]))
    return ranges


def passes_filter(county: County, settings: FilterSettings) -> bool:
    region = settings.region_filter()
    if region is not None and county.region != region:
        return False

    for dimension, lo, hi in active_ranges(settings):
        value = getattr(county, DIMENSION_ATTRS[dimension])
        if value < lo or value > hi:
            return False

    if settings.clusters and county.cluster_7 not in settings.clusters:
        return False

    return True


def filter_counties(counties: Iterable[County], settings: FilterSettings) -> list[County]:
    return [c for c in counties if passes_filter(c, settings)]


def build_filter_expr(settings: FilterSettings) -> pl.Expr:
    """The same conjunction as ``passes_filter`` over a normalized county frame."""
    expr = pl.lit(True)

    region = settings.region_filter()
    if region is not None:
        expr = expr & (pl.col("Region") == region).fill_null(False)

    for dimension, lo, hi in active_ranges(settings):
        col = pl.col(FILTER_DIMENSIONS[dimension]["field"])
        expr = expr & col.is_between(lo, hi, closed="both")

    if settings.clusters:
        expr = expr & pl.col("Cluster_7").is_in(settings.clusters)

    return expr


def apply_quick_filter(name: str) -> FilterSettings:
    """Reset every constraint, then apply a single preset range."""
    if name not in QUICK_FILTERS:
        raise KeyError(name)
    preset = QUICK_FILTERS[name]
    return FilterSettings(**{f"{preset['dimension']}_range": tuple(preset["range"])})


def toggle_cluster(settings: FilterSettings, cluster_id: int, all_ids: list[int]) -> FilterSettings:
    """An empty cluster set means every cluster is shown."""
    current = list(settings.clusters)
    if not current:
        selected = [c for c in all_ids if c != cluster_id]
    elif cluster_id in current:
        selected = [c for c in current if c != cluster_id]
    else:
        selected = current + [cluster_id]

    if set(selected) >= set(all_ids):
        selected = []
    return settings.model_copy(update={"clusters": sorted(selected)})
