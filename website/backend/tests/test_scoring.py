import pytest

from models import County, PolicyInputs
from scoring import (
    baseline_from_county, policy_score, reset_simulation, score_inputs, set_lever,
    simulate_lever_change, simulation_summary, start_simulation,
)


def test_reference_inputs_score():
    assert policy_score(70, 15, 35, 65000) == pytest.approx(66.0)
    assert score_inputs(PolicyInputs(insurance=70, poverty=15, education=35, income=65000)) == pytest.approx(66.0)


def test_score_sensitivities():
    base = policy_score(70, 15, 35, 65000)
    assert policy_score(80, 15, 35, 65000) - base == pytest.approx(2.5)
    assert policy_score(70, 25, 35, 65000) - base == pytest.approx(-1.5)
    assert policy_score(70, 15, 45, 65000) - base == pytest.approx(1.5)
    assert policy_score(70, 15, 35, 80000) - base == pytest.approx(1.5)


def test_income_term_is_not_capped():
    assert policy_score(100, 0, 100, 300000) == pytest.approx(109.0)


def test_baseline_rounds_and_clamps(county):
    baseline = baseline_from_county(county("01001"))
    assert baseline == PolicyInputs(insurance=50, poverty=31, education=15, income=32000)

    poor = County(FIPS="00001", Insurance_Rate=40, Poverty_Rate=62, Education_Rate=90, Median_Income=21000)
    clamped = baseline_from_county(poor)
    assert clamped.poverty == 50
    assert clamped.education == 80
    assert clamped.income == 30000


def test_simulation_starts_at_baseline(county):
    state = start_simulation(county("06003"))
    summary = simulation_summary(state)
    assert summary["fips"] == "06003"
    assert summary["inputs"] == summary["baseline"]
    assert summary["delta"] == pytest.approx(0.0)


def test_set_lever_clamps_to_slider_bounds(county):
    state = start_simulation(county("01001"))
    assert set_lever(state, "poverty", 80).poverty == 50
    assert set_lever(state, "income", 10000).income == 30000
    assert set_lever(state, "insurance", 60).insurance == 60
    # input state is untouched
    assert state.insurance == 50


def test_set_lever_rejects_unknown_lever(county):
    with pytest.raises(ValueError):
        set_lever(start_simulation(county("01001")), "broadband", 10)


def test_reset_restores_baseline(county):
    state = start_simulation(county("01001"))
    moved = set_lever(set_lever(state, "insurance", 90), "education", 60)
    assert simulation_summary(moved)["delta"] == pytest.approx(10 + 6.75)

    reset = reset_simulation(moved)
    assert reset.inputs() == state.baseline
    assert simulation_summary(reset)["delta"] == pytest.approx(0.0)


def test_lever_change_scales_real_rate(county):
    alpha = county("01001")
    expected = policy_score(50.4 * 1.1, 30.6, 15.4, 32000)
    assert simulate_lever_change(alpha, "insurance", 10) == pytest.approx(expected)
    assert simulate_lever_change(alpha, "insurance", 10) == simulate_lever_change(alpha, "insurance", 10)


def test_lever_change_respects_bounds(county):
    delta = county("06003")
    assert simulate_lever_change(delta, "insurance", 100) == pytest.approx(policy_score(100, 14, 32, 70000))
    assert simulate_lever_change(delta, "income", -90) == pytest.approx(policy_score(88, 14, 32, 20000))

    with pytest.raises(ValueError):
        simulate_lever_change(delta, "resilience", 10)
