from fastapi import APIRouter, Depends, HTTPException, Request

import data
from analysis import (
    cluster_comparison, cluster_definitions, generate_insights, quick_stats,
    rank_states, similar_counties, state_summaries,
)
from constants import (
    CLUSTER_COLORS, MODE_FIELDS, POLICY_LEVERS, QUICK_FILTERS,
    STATE_SORT_OPTIONS, VISUAL_MODES,
)
from filters import apply_quick_filter
from models import (
    County, FilterSettings, LeverChangeRequest, MarkerRequest, PolicyInputs,
    RecommendationRequest, RecommendationResult,
)
from recommendations import RecommendationClient, fallback_recommendations
from scoring import score_inputs, simulate_lever_change, simulation_summary, start_simulation
from utils import contrast_color
from visual import marker_for, population_legend

router = APIRouter()


def get_dataset() -> data.Dataset:
    if data.dataset is None:
        raise HTTPException(503, "County dataset not loaded")
    return data.dataset


def get_recommendation_client(request: Request) -> RecommendationClient | None:
    return getattr(request.app.state, "recommendation_client", None)


def get_county_or_404(ds: data.Dataset, fips: str) -> County:
    county = ds.get(fips)
    if county is None:
        raise HTTPException(404, f"No data found for county {fips}")
    return county


def dump_counties(counties: list[County]) -> list[dict]:
    return [c.model_dump(by_alias=True) for c in counties]


@router.get("/")
def read_root(ds: data.Dataset = Depends(get_dataset)):
    return {"status": "ok", "counties": len(ds)}


@router.get("/counties")
def get_counties(ds: data.Dataset = Depends(get_dataset)):
    return {"counties": dump_counties(ds.counties), "total": len(ds)}


@router.post("/counties/filter")
def filter_counties(settings: FilterSettings, ds: data.Dataset = Depends(get_dataset)):
    counties = ds.filtered(settings)
    return {
        "counties": dump_counties(counties),
        "total": len(counties),
        "total_unfiltered": len(ds),
    }


@router.get("/counties/{fips}")
def get_county(fips: str, ds: data.Dataset = Depends(get_dataset)):
    county = get_county_or_404(ds, fips)
    return {
        "county": county.model_dump(by_alias=True),
        "recommendations": ds.recommendations_for(fips),
        "insights": ds.insights_for(fips),
    }


@router.get("/counties/{fips}/similar")
def get_similar_counties(fips: str, limit: int = 5, ds: data.Dataset = Depends(get_dataset)):
    county = get_county_or_404(ds, fips)
    return {"fips": fips, "similar": dump_counties(similar_counties(county, ds.counties, limit))}


@router.post("/counties/{fips}/cluster-comparison")
def get_cluster_comparison(fips: str, settings: FilterSettings = FilterSettings(),
                           ds: data.Dataset = Depends(get_dataset)):
    county = get_county_or_404(ds, fips)
    return cluster_comparison(county, ds.filtered(settings))


@router.get("/counties/{fips}/insights")
def get_county_insights(fips: str, ds: data.Dataset = Depends(get_dataset)):
    county = get_county_or_404(ds, fips)
    similar = similar_counties(county, ds.counties)
    return {
        "fips": fips,
        "generated": generate_insights(county, similar),
        "precomputed": ds.insights_for(fips),
    }


@router.post("/counties/{fips}/recommendations", response_model=RecommendationResult)
async def get_county_recommendations(fips: str, req: RecommendationRequest,
                                     ds: data.Dataset = Depends(get_dataset),
                                     client: RecommendationClient | None = Depends(get_recommendation_client)):
    county = get_county_or_404(ds, fips)
    if client is None:
        return RecommendationResult(
            error="AI recommendations unavailable - client not configured",
            fallback=fallback_recommendations(county),
        )
    peers = [
        c for c in ds.filtered(req.filters)
        if c.cluster_7 == county.cluster_7 and c.fips != county.fips
    ][:3]
    return await client.get_recommendations(county, req.filters, peers)


@router.post("/map/markers")
def get_map_markers(req: MarkerRequest, ds: data.Dataset = Depends(get_dataset)):
    counties = ds.filtered(req.filters)
    markers = [
        marker_for(c, req.mode, ds.color_scales, req.selected_fips, CLUSTER_COLORS).model_dump()
        for c in counties
    ]
    return {"mode": req.mode, "markers": markers, "total": len(markers)}


@router.get("/map/legend/{mode}")
def get_map_legend(mode: str, ds: data.Dataset = Depends(get_dataset)):
    if mode not in VISUAL_MODES:
        raise HTTPException(400, f"Mode '{mode}' not valid. Choose from: {VISUAL_MODES}")

    if mode == "cluster":
        clusters = cluster_definitions(ds.filtered_frame())
        return {
            "mode": mode,
            "clusters": [
                {**c, "color": CLUSTER_COLORS.get(c["id"], "#666666")} for c in clusters
            ],
        }

    if mode == "population":
        tiers = population_legend()
        return {
            "mode": mode,
            "field": MODE_FIELDS[mode],
            "tiers": tiers,
            "text_colors": [contrast_color(t["color"]) for t in tiers],
        }

    scale = ds.color_scale(mode)
    return {
        "mode": mode,
        "field": MODE_FIELDS[mode],
        "scale": scale.model_dump() if scale else None,
        "text_colors": [contrast_color(c) for c in scale.colors] if scale else None,
    }


@router.get("/color-scales")
def get_color_scales(ds: data.Dataset = Depends(get_dataset)):
    return {mode: scale.model_dump() for mode, scale in ds.color_scales.items()}


@router.get("/filters/options")
def get_filter_options(ds: data.Dataset = Depends(get_dataset)):
    return {
        "regions": ds.regions(),
        "clusters": ds.cluster_ids(),
        "dimensions": ds.dimension_bounds(),
        "quick_filters": QUICK_FILTERS,
    }


@router.get("/filters/quick/{name}")
def get_quick_filter(name: str):
    if name not in QUICK_FILTERS:
        raise HTTPException(400, f"Quick filter '{name}' not valid. Choose from: {list(QUICK_FILTERS)}")
    return apply_quick_filter(name).model_dump(by_alias=True)


@router.post("/simulate/score")
def simulate_score(inputs: PolicyInputs):
    return {"inputs": inputs.model_dump(), "score": score_inputs(inputs)}


@router.get("/simulate/baseline/{fips}")
def get_simulation_baseline(fips: str, ds: data.Dataset = Depends(get_dataset)):
    county = get_county_or_404(ds, fips)
    summary = simulation_summary(start_simulation(county))
    summary["healthcare_access"] = county.healthcare_access
    summary["levers"] = POLICY_LEVERS
    return summary


@router.post("/simulate/lever")
def simulate_lever(req: LeverChangeRequest, ds: data.Dataset = Depends(get_dataset)):
    county = get_county_or_404(ds, req.fips)
    return {
        "fips": req.fips,
        "lever": req.lever,
        "change_pct": req.change_pct,
        "score": simulate_lever_change(county, req.lever, req.change_pct),
    }


@router.get("/clusters")
def get_clusters(ds: data.Dataset = Depends(get_dataset)):
    return {"clusters": cluster_definitions(ds.filtered_frame())}


@router.get("/states")
def get_states(sort_by: str = "Healthcare_Access_mean", order: str = "desc", page: int = 0,
               ds: data.Dataset = Depends(get_dataset)):
    if sort_by not in STATE_SORT_OPTIONS:
        raise HTTPException(400, f"Cannot sort by '{sort_by}'. Choose from: {list(STATE_SORT_OPTIONS)}")
    if order not in ("asc", "desc"):
        raise HTTPException(400, "order must be 'asc' or 'desc'")
    summaries = state_summaries(ds.filtered_frame())
    return rank_states(summaries, sort_by, order == "desc", page)


@router.get("/states/{state}")
def get_state(state: str, ds: data.Dataset = Depends(get_dataset)):
    for summary in state_summaries(ds.filtered_frame()):
        if summary["State"] == state:
            counties = [c for c in ds.counties if c.state == state]
            return {"summary": summary, "counties": dump_counties(counties)}
    raise HTTPException(404, f"No data found for state {state}")


@router.post("/stats")
def get_stats(settings: FilterSettings = FilterSettings(), selected_fips: str | None = None,
              ds: data.Dataset = Depends(get_dataset)):
    selected = ds.get(selected_fips) if selected_fips else None
    return quick_stats(ds.filtered(settings), selected)
