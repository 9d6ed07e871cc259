import math

from constants import (
    CLUSTER_COLORS, CLUSTER_RADIUS_MULTIPLIERS, MAX_RADIUS, MIN_RADIUS,
    NEUTRAL_GRAY, POPULATION_COLOR_FLOOR, POPULATION_COLOR_TIERS,
    POPULATION_RADIUS_FLOOR, POPULATION_RADIUS_LADDER, SELECTED_COLOR,
    SELECTED_RADIUS_BONUS,
)
from models import County, MarkerStyle
from utils import color_for, format_number

MODE_ATTRS = {
    "healthcare_access": "healthcare_access",
    "opportunity": "opportunity_score",
    "vulnerability": "vulnerability_index",
}

# mode -> ordered (predicate, multiplier) rules, first match wins, no match = 1.0
RADIUS_RULES = {
    "healthcare_access": [
        (lambda c: c.healthcare_access < 30, 1.4),
    ],
    "opportunity": [
        (lambda c: c.opportunity_score > 70, 1.3),
        (lambda c: c.opportunity_score > 50, 1.1),
        (lambda c: True, 0.9),
    ],
    "vulnerability": [
        (lambda c: c.vulnerability_index > 70, 1.3),
        (lambda c: c.vulnerability_index > 50, 1.1),
        (lambda c: True, 0.9),
    ],
    "population": [
        (lambda c: True, 1.5),
    ],
    "cluster": [
        (lambda c, k=k: c.cluster_7 == k, m) for k, m in CLUSTER_RADIUS_MULTIPLIERS.items()
    ],
}


def mode_value(county: County, mode: str) -> float:
    value = getattr(county, MODE_ATTRS.get(mode, "healthcare_access"))
    return 50.0 if value is None else value


def population_color(population: float) -> str:
    magnitude = math.log10(max(population, 1))
    for threshold, color in POPULATION_COLOR_TIERS:
        if magnitude > threshold:
            return color
    return POPULATION_COLOR_FLOOR


def population_legend() -> list[dict]:
    entries = [
        {"label": f">{format_number(10 ** threshold, 0)}", "color": color}
        for threshold, color in POPULATION_COLOR_TIERS
    ]
    floor = POPULATION_COLOR_TIERS[-1][0]
    entries.append({"label": f"{format_number(10 ** floor, 0)} or fewer", "color": POPULATION_COLOR_FLOOR})
    return entries


def county_color(county: County, mode: str, color_scales: dict,
                 selected: bool = False, cluster_colors: dict | None = None) -> str:
    if selected:
        return SELECTED_COLOR
    if mode == "cluster":
        palette = CLUSTER_COLORS if cluster_colors is None else cluster_colors
        return palette.get(county.cluster_7, NEUTRAL_GRAY)
    if mode == "population":
        return population_color(county.population)
    return color_for(color_scales.get(mode), mode_value(county, mode))


def base_radius(population: float) -> int:
    for threshold, radius in POPULATION_RADIUS_LADDER:
        if population > threshold:
            return radius
    return POPULATION_RADIUS_FLOOR


def radius_multiplier(county: County, mode: str) -> float:
    for predicate, multiplier in RADIUS_RULES.get(mode, []):
        if predicate(county):
            return multiplier
    return 1.0


def county_radius(county: County, mode: str, selected: bool = False) -> float:
    radius = base_radius(county.population) * radius_multiplier(county, mode)
    if selected:
        radius += SELECTED_RADIUS_BONUS
    return max(MIN_RADIUS, min(MAX_RADIUS, radius))


def tooltip(county: County, mode: str) -> dict:
    info = {
        "name": f"{county.county}, {county.state}",
        "population": county.population,
        "population_label": format_number(county.population),
        "cluster": county.cluster_name_detailed,
    }
    if mode == "opportunity":
        info.update(label="Opportunity Score", score=round(county.opportunity_score, 1),
                    context="Higher = More potential for improvement")
    elif mode == "vulnerability":
        info.update(label="Vulnerability Index", score=round(county.vulnerability_index, 1),
                    resilience=round(county.resilience_score, 1))
    elif mode == "population":
        info.update(label="Population", score=county.population)
    elif mode == "cluster":
        info.update(label="Cluster Type", score=county.cluster_name_detailed,
                    description=county.cluster_description)
    else:
        info.update(label="Healthcare Access", score=round(county.healthcare_access, 1),
                    percentile=county.healthcare_access_percentile)
    return info


def marker_for(county: County, mode: str, color_scales: dict,
               selected_fips: str | None = None, cluster_colors: dict | None = None) -> MarkerStyle:
    selected = selected_fips is not None and county.fips == selected_fips
    return MarkerStyle(
        fips=county.fips,
        name=f"{county.county}, {county.state}",
        lat=county.lat,
        lng=county.lng,
        color=county_color(county, mode, color_scales, selected, cluster_colors),
        radius=county_radius(county, mode, selected),
        selected=selected,
        tooltip=tooltip(county, mode),
    )
