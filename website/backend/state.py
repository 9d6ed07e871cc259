"""Session UI state as an immutable value.

Every interaction is an action; ``reduce(state, action)`` returns a new
``AppState`` and never mutates the old one, so re-running the same sequence
of actions always lands on the same filters, selection and simulator values.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from constants import FILTER_DIMENSIONS, VISUAL_MODES
from filters import apply_quick_filter, toggle_cluster
from models import County, FilterSettings, SimulationState
from scoring import reset_simulation, set_lever, start_simulation


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    filters: FilterSettings = FilterSettings()
    visual_mode: str = "healthcare_access"
    selected_fips: str | None = None
    selected_state: str | None = None
    simulation: SimulationState | None = None
    show_state_comparison: bool = False


@dataclass(frozen=True)
class SetRange:
    dimension: str
    bounds: tuple[float, float] | None


@dataclass(frozen=True)
class SetRegion:
    region: str | None


@dataclass(frozen=True)
class ToggleCluster:
    cluster_id: int
    all_ids: tuple[int, ...]


@dataclass(frozen=True)
class ResetFilters:
    pass


@dataclass(frozen=True)
class ApplyQuickFilter:
    name: str


@dataclass(frozen=True)
class SetVisualMode:
    mode: str


@dataclass(frozen=True)
class SelectCounty:
    county: County


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class SetPolicyLever:
    lever: str
    value: float


@dataclass(frozen=True)
class ResetSimulation:
    pass


@dataclass(frozen=True)
class ToggleStateComparison:
    pass


def _with_filters(state: AppState, filters: FilterSettings) -> AppState:
    return state.model_copy(update={"filters": filters})


def reduce(state: AppState, action) -> AppState:
    if isinstance(action, SetRange):
        if action.dimension not in FILTER_DIMENSIONS:
            raise ValueError(f"Unknown filter dimension '{action.dimension}'")
        bounds = tuple(action.bounds) if action.bounds is not None else None
        return _with_filters(state, state.filters.model_copy(update={f"{action.dimension}_range": bounds}))

    if isinstance(action, SetRegion):
        region = None if action.region in (None, "", "all") else action.region
        return _with_filters(state, state.filters.model_copy(update={"region": region}))

    if isinstance(action, ToggleCluster):
        return _with_filters(state, toggle_cluster(state.filters, action.cluster_id, list(action.all_ids)))

    if isinstance(action, ResetFilters):
        return _with_filters(state, FilterSettings())

    if isinstance(action, ApplyQuickFilter):
        return _with_filters(state, apply_quick_filter(action.name))

    if isinstance(action, SetVisualMode):
        if action.mode not in VISUAL_MODES:
            raise ValueError(f"Unknown visualization mode '{action.mode}'")
        return state.model_copy(update={"visual_mode": action.mode})

    if isinstance(action, SelectCounty):
        return state.model_copy(update={
            "selected_fips": action.county.fips,
            "selected_state": action.county.state,
            "simulation": start_simulation(action.county),
        })

    if isinstance(action, ClearSelection):
        return state.model_copy(update={"selected_fips": None, "selected_state": None, "simulation": None})

    if isinstance(action, SetPolicyLever):
        simulation = state.simulation or SimulationState()
        return state.model_copy(update={"simulation": set_lever(simulation, action.lever, action.value)})

    if isinstance(action, ResetSimulation):
        if state.simulation is None:
            return state
        return state.model_copy(update={"simulation": reset_simulation(state.simulation)})

    if isinstance(action, ToggleStateComparison):
        return state.model_copy(update={"show_state_comparison": not state.show_state_comparison})

    raise TypeError(f"Unsupported action {type(action).__name__}")
