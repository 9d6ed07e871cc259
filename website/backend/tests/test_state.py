import pytest

from models import FilterSettings
from state import (
    AppState, ApplyQuickFilter, ClearSelection, ResetFilters, ResetSimulation,
    SelectCounty, SetPolicyLever, SetRange, SetRegion, SetVisualMode,
    ToggleCluster, ToggleStateComparison, reduce,
)


def run(actions, state=None):
    state = state or AppState()
    for action in actions:
        state = reduce(state, action)
    return state


def test_reduce_does_not_mutate():
    state = AppState()
    new = reduce(state, SetRange("healthcare", (0, 40)))
    assert state.filters == FilterSettings()
    assert new.filters.healthcare_range == (0, 40)


def test_filter_actions():
    state = run([
        SetRange("population", (0, 100000)),
        SetRegion("West"),
        ToggleCluster(2, (0, 1, 2, 3)),
    ])
    assert state.filters.population_range == (0, 100000)
    assert state.filters.region == "West"
    assert state.filters.clusters == [0, 1, 3]

    assert reduce(state, SetRegion("all")).filters.region is None
    assert reduce(state, SetRange("population", None)).filters.population_range is None
    assert reduce(state, ResetFilters()).filters == FilterSettings()


def test_quick_filter_replaces_existing_filters():
    state = run([SetRegion("West"), ApplyQuickFilter("high_poverty")])
    assert state.filters.region is None
    assert state.filters.poverty_range == (30, 100)


def test_unknown_dimension_and_mode():
    with pytest.raises(ValueError):
        reduce(AppState(), SetRange("altitude", (0, 1)))
    with pytest.raises(ValueError):
        reduce(AppState(), SetVisualMode("heatmap"))


def test_unsupported_action():
    with pytest.raises(TypeError):
        reduce(AppState(), "select")


def test_select_county_starts_simulation(county):
    state = run([SetVisualMode("cluster"), SelectCounty(county("01001"))])
    assert state.visual_mode == "cluster"
    assert state.selected_fips == "01001"
    assert state.selected_state == "Alabama"
    assert state.simulation.insurance == 50
    assert state.simulation.baseline.income == 32000


def test_policy_levers_and_reset(county):
    state = run([SelectCounty(county("01001")), SetPolicyLever("insurance", 95), SetPolicyLever("poverty", 99)])
    assert state.simulation.insurance == 95
    assert state.simulation.poverty == 50

    reset = reduce(state, ResetSimulation())
    assert reset.simulation.inputs() == reset.simulation.baseline


def test_reset_without_simulation_is_noop():
    state = AppState()
    assert reduce(state, ResetSimulation()) is state


def test_clear_selection(county):
    state = run([SelectCounty(county("06001")), ClearSelection()])
    assert state.selected_fips is None
    assert state.selected_state is None
    assert state.simulation is None


def test_toggle_state_comparison():
    state = run([ToggleStateComparison()])
    assert state.show_state_comparison
    assert not reduce(state, ToggleStateComparison()).show_state_comparison


def test_replay_is_deterministic(county):
    actions = [
        ApplyQuickFilter("rural"),
        ToggleCluster(0, (0, 1, 2, 3)),
        SetVisualMode("vulnerability"),
        SelectCounty(county("28011")),
        SetPolicyLever("education", 40),
    ]
    assert run(actions) == run(actions)
