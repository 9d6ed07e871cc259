from constants import (
    LEVER_CHANGE_BOUNDS, POLICY_BASE_FACTOR, POLICY_INCOME_REFERENCE,
    POLICY_LEVERS, POLICY_WEIGHTS,
)
from models import County, PolicyInputs, SimulationState


def policy_score(insurance: float, poverty: float, education: float, income: float) -> float:
    """Linear healthcare access score for the four policy levers.

    The income term is not capped, so incomes above the reference ceiling
    can push the total slightly past 100.
    """
    return (
        insurance * POLICY_WEIGHTS["insurance"]
        + (100 - poverty) * POLICY_WEIGHTS["poverty"]
        + education * POLICY_WEIGHTS["education"]
        + (income / POLICY_INCOME_REFERENCE * 100) * POLICY_WEIGHTS["income"]
        + POLICY_BASE_FACTOR * POLICY_WEIGHTS["base"]
    )


def score_inputs(inputs: PolicyInputs) -> float:
    return policy_score(inputs.insurance, inputs.poverty, inputs.education, inputs.income)


def _clamp(value: float, lo: float | None, hi: float | None) -> float:
    if lo is not None and value < lo:
        return lo
    if hi is not None and value > hi:
        return hi
    return value


def baseline_from_county(county: County) -> PolicyInputs:
    values = {}
    for lever, lever_def in POLICY_LEVERS.items():
        raw = getattr(county, lever_def["field"].lower())
        lo, hi = lever_def["bounds"]
        values[lever] = _clamp(round(raw), lo, hi)
    return PolicyInputs(**values)


def start_simulation(county: County) -> SimulationState:
    baseline = baseline_from_county(county)
    return SimulationState(fips=county.fips, baseline=baseline, **baseline.model_dump())


def set_lever(state: SimulationState, lever: str, value: float) -> SimulationState:
    if lever not in POLICY_LEVERS:
        raise ValueError(f"Unknown policy lever '{lever}'")
    lo, hi = POLICY_LEVERS[lever]["bounds"]
    return state.model_copy(update={lever: _clamp(value, lo, hi)})


def reset_simulation(state: SimulationState) -> SimulationState:
    return state.model_copy(update=state.baseline.model_dump())


def simulation_summary(state: SimulationState) -> dict:
    current = score_inputs(state.inputs())
    baseline = score_inputs(state.baseline)
    return {
        "fips": state.fips,
        "inputs": state.inputs().model_dump(),
        "baseline": state.baseline.model_dump(),
        "score": current,
        "baseline_score": baseline,
        "delta": current - baseline,
    }


def simulate_lever_change(county: County, lever: str, change_pct: float) -> float:
    """Score the county with one real rate scaled by ``change_pct`` percent."""
    if lever not in POLICY_LEVERS:
        raise ValueError(f"Unknown policy lever '{lever}'")
    inputs = {
        name: getattr(county, lever_def["field"].lower())
        for name, lever_def in POLICY_LEVERS.items()
    }
    lo, hi = LEVER_CHANGE_BOUNDS[lever]
    inputs[lever] = _clamp(inputs[lever] * (1 + change_pct / 100), lo, hi)
    return policy_score(**inputs)
