import numpy as np
import polars as pl
from scipy.stats import percentileofscore

from constants import STATE_SORT_OPTIONS, STATES_PER_PAGE
from models import County
from utils import calculate_percentile


def similar_counties(selected: County, counties: list[County], limit: int = 5) -> list[County]:
    """Same cluster, population within +/-50%, closest healthcare score first."""
    candidates = [
        c for c in counties
        if c.fips != selected.fips
        and c.cluster_7 == selected.cluster_7
        and abs(c.population - selected.population) < selected.population * 0.5
    ]
    candidates.sort(key=lambda c: abs(c.healthcare_access - selected.healthcare_access))
    return candidates[:limit]


def cluster_peers(selected: County, counties: list[County]) -> list[County]:
    return [c for c in counties if c.cluster_7 == selected.cluster_7 and c.fips != selected.fips]


def cluster_comparison(selected: County, counties: list[County], top: int = 5) -> dict:
    peers = cluster_peers(selected, counties)
    if not peers:
        return {
            "fips": selected.fips,
            "cluster": selected.cluster_7,
            "peer_count": 0,
            "cluster_avg": None,
            "percentile": None,
            "difference": None,
            "peers": [],
        }

    scores = np.array([c.healthcare_access for c in peers])
    cluster_avg = float(scores.mean())
    return {
        "fips": selected.fips,
        "cluster": selected.cluster_7,
        "peer_count": len(peers),
        "cluster_avg": cluster_avg,
        # share of peers strictly below the selected county
        "percentile": round(percentileofscore(scores, selected.healthcare_access, kind="strict")),
        "difference": selected.healthcare_access - cluster_avg,
        "peers": [
            {"fips": c.fips, "name": f"{c.county}, {c.state}", "score": c.healthcare_access}
            for c in peers[:top]
        ],
    }


def cluster_definitions(frame: pl.DataFrame) -> list[dict]:
    if frame.height == 0:
        return []
    return (
        frame
        .group_by("Cluster_7")
        .agg([
            pl.col("Cluster_Name_Detailed").mode().sort().first().alias("name"),
            pl.col("Cluster_Description").mode().sort().first().alias("description"),
            pl.len().alias("county_count"),
            pl.col("Healthcare_Access").mean().alias("avg_score"),
        ])
        .rename({"Cluster_7": "id"})
        .sort("id")
        .to_dicts()
    )


def state_summaries(frame: pl.DataFrame) -> list[dict]:
    if frame.height == 0:
        return []
    summaries = (
        frame
        .group_by("State")
        .agg([
            pl.col("Healthcare_Access").mean().alias("Healthcare_Access_mean"),
            pl.col("Opportunity_Score").mean().alias("Opportunity_Score_mean"),
            pl.col("Vulnerability_Index").mean().alias("Vulnerability_Index_mean"),
            pl.col("Median_Income").mean().alias("avg_income"),
            pl.col("Population").sum().alias("Population_sum"),
            pl.len().alias("County_Count"),
            pl.col("Healthcare_Access").std().fill_null(0.0).alias("Inequality_Score"),
        ])
        .with_columns(
            pl.col("Healthcare_Access_mean").rank(method="min", descending=True).cast(pl.Int64).alias("Healthcare_Rank")
        )
        .sort("State")
    )
    return summaries.to_dicts()


def rank_states(summaries: list[dict], sort_by: str = "Healthcare_Access_mean", descending: bool = True,
                page: int = 0, per_page: int = STATES_PER_PAGE) -> dict:
    if sort_by not in STATE_SORT_OPTIONS:
        raise ValueError(f"Cannot sort states by '{sort_by}'. Choose from: {list(STATE_SORT_OPTIONS)}")

    ordered = sorted(summaries, key=lambda s: s.get(sort_by) or 0, reverse=descending)
    total_pages = -(-len(ordered) // per_page) if per_page > 0 else 0
    start = page * per_page
    return {
        "sort_by": sort_by,
        "descending": descending,
        "page": page,
        "total_pages": total_pages,
        "total_states": len(ordered),
        "states": [
            {**s, "position": start + i + 1}
            for i, s in enumerate(ordered[start:start + per_page])
        ],
    }


def generate_insights(county: County, similar: list[County] | None = None) -> list[dict]:
    insights = []

    if county.healthcare_access > 80:
        insights.append({
            "type": "success",
            "message": f"{county.county} demonstrates excellent healthcare access with a score of {county.healthcare_access:.1f}.",
            "priority": "medium",
        })
    elif county.healthcare_access < 40:
        insights.append({
            "type": "warning",
            "message": f"{county.county} shows critical healthcare access gaps requiring immediate attention.",
            "priority": "high",
        })

    if county.opportunity_score > 75:
        insights.append({
            "type": "opportunity",
            "message": f"High improvement potential identified. Strategic investments could significantly impact {county.population:,} residents.",
            "priority": "high",
        })

    if similar:
        avg_score = float(np.mean([c.healthcare_access for c in similar]))
        difference = county.healthcare_access - avg_score
        if abs(difference) > 5:
            insights.append({
                "type": "success" if difference > 0 else "warning",
                "message": f"Performs {abs(difference):.1f} points {'above' if difference > 0 else 'below'} similar counties.",
                "priority": "medium",
            })

    return insights


def quick_stats(counties: list[County], selected: County | None = None) -> dict:
    stats = {
        "total_counties": len(counties),
        "avg_healthcare_score": float(np.mean([c.healthcare_access for c in counties])) if counties else 0.0,
        "total_population": sum(c.population for c in counties),
    }
    if selected is not None:
        stats["selected_score"] = selected.healthcare_access
        stats["selected_percentile"] = calculate_percentile(
            selected.healthcare_access, [c.healthcare_access for c in counties]
        )
    return stats
