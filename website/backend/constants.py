VISUAL_MODES = ["healthcare_access", "opportunity", "vulnerability", "population", "cluster"]

MODE_FIELDS = {
    "healthcare_access": "Healthcare_Access",
    "opportunity": "Opportunity_Score",
    "vulnerability": "Vulnerability_Index",
    "population": "Population",
}

FALLBACK_COLOR_SCALES = {
    "healthcare_access": {
        "name": "Healthcare Access Score",
        "colors": ["#1a0000", "#ff0000", "#ff7700", "#ffff00", "#00ff00"],
        "domain": [0, 25, 50, 75, 100],
        "labels": ["Critical", "Poor", "Fair", "Good", "Excellent"],
    },
    "opportunity": {
        "name": "Improvement Opportunity",
        "colors": ["#000033", "#0066cc", "#00ccff", "#66ffcc"],
        "domain": [0, 30, 70, 100],
        "labels": ["Limited", "Moderate", "High", "Exceptional"],
    },
    "vulnerability": {
        "name": "Vulnerability Index",
        "colors": ["#000", "#660000", "#cc0000", "#ff6666"],
        "domain": [0, 25, 50, 100],
        "labels": ["Low", "Moderate", "High", "Critical"],
    },
    "population": {
        "name": "Population Size",
        "colors": ["#f0f0f0", "#969696", "#525252", "#252525"],
        "domain": [0, 100000, 1000000, 5000000],
        "labels": ["Small", "Medium", "Large", "Major"],
    },
}

# (threshold, color); value must be strictly above threshold
FALLBACK_RAMP = [
    (80, "#00ff41"),
    (60, "#00f5ff"),
    (40, "#ffff00"),
    (20, "#ff7700"),
]
FALLBACK_RAMP_FLOOR = "#ff0000"

NEUTRAL_GRAY = "#666666"
SELECTED_COLOR = "#ff0080"

CLUSTER_COLORS = {
    0: "#ff6b6b", 1: "#4ecdc4", 2: "#45b7d1", 3: "#96ceb4",
    4: "#feca57", 5: "#ff9ff3", 6: "#54a0ff",
}

# log10(population) tiers, high population = red
POPULATION_COLOR_TIERS = [
    (6, "#ff0000"),
    (5, "#ff7700"),
    (4, "#ffff00"),
]
POPULATION_COLOR_FLOOR = "#00ff41"

POPULATION_RADIUS_LADDER = [
    (10_000_000, 16),
    (5_000_000, 14),
    (2_000_000, 12),
    (1_000_000, 10),
    (500_000, 8),
    (200_000, 7),
    (100_000, 6),
    (50_000, 5),
    (20_000, 4),
]
POPULATION_RADIUS_FLOOR = 3

SELECTED_RADIUS_BONUS = 4
MIN_RADIUS = 2
MAX_RADIUS = 20

CLUSTER_RADIUS_MULTIPLIERS = {
    0: 1.0, 1: 1.1, 2: 0.9, 3: 1.2, 4: 1.0, 5: 0.9, 6: 1.1,
}

COUNTY_DEFAULTS = {
    "Healthcare_Access": 50.0,
    "Opportunity_Score": 50.0,
    "Vulnerability_Index": 50.0,
    "Resilience_Score": 50.0,
    "Population": 50000,
    "Cluster_7": 0,
    "lat": 39.0,
    "lng": -98.0,
}

FILTER_DIMENSIONS = {
    "population": {"field": "Population", "label": "Population", "bounds": [0, 1e7]},
    "healthcare": {"field": "Healthcare_Access", "label": "Healthcare Access", "bounds": [0, 100]},
    "income": {"field": "Median_Income", "label": "Median Income", "bounds": [0, 2e5]},
    "poverty": {"field": "Poverty_Rate", "label": "Poverty Rate", "bounds": [0, 100]},
    "disability": {"field": "Disability_Rate", "label": "Disability Rate", "bounds": [0, 100]},
    "education": {"field": "Education_Rate", "label": "Education Rate", "bounds": [0, 100]},
    "insurance": {"field": "Insurance_Rate", "label": "Insurance Rate", "bounds": [0, 100]},
    "vulnerability": {"field": "Vulnerability_Index", "label": "Vulnerability Index", "bounds": [0, 100]},
    "opportunity": {"field": "Opportunity_Score", "label": "Opportunity Score", "bounds": [0, 100]},
    "resilience": {"field": "Resilience_Score", "label": "Resilience Score", "bounds": [0, 100]},
    "broadband": {"field": "Broadband_Rate", "label": "Broadband Access", "bounds": [0, 35e5]},
}

QUICK_FILTERS = {
    "critical_access": {"label": "Critical Access", "dimension": "healthcare", "range": [0, 40]},
    "excellent_access": {"label": "Excellent Access", "dimension": "healthcare", "range": [75, 100]},
    "rural": {"label": "Rural Counties", "dimension": "population", "range": [0, 50000]},
    "metro": {"label": "Major Metros", "dimension": "population", "range": [1000000, 10000000]},
    "high_poverty": {"label": "High Poverty", "dimension": "poverty", "range": [30, 100]},
    "high_opportunity": {"label": "High Opportunity", "dimension": "opportunity", "range": [60, 100]},
}

POLICY_WEIGHTS = {
    "insurance": 0.25,
    "poverty": 0.15,
    "education": 0.15,
    "income": 0.15,
    "base": 0.30,
}
POLICY_BASE_FACTOR = 80
POLICY_INCOME_REFERENCE = 150000

POLICY_LEVERS = {
    "insurance": {"field": "Insurance_Rate", "bounds": [0, 100]},
    "poverty": {"field": "Poverty_Rate", "bounds": [0, 50]},
    "education": {"field": "Education_Rate", "bounds": [0, 80]},
    "income": {"field": "Median_Income", "bounds": [30000, 150000]},
}

# what-if percentage changes use looser bounds than the sliders
LEVER_CHANGE_BOUNDS = {
    "insurance": (0, 100),
    "poverty": (0, 50),
    "education": (0, 80),
    "income": (20000, None),
}

STATE_SORT_OPTIONS = {
    "Healthcare_Access_mean": "Mean healthcare access score across the state",
    "Population_sum": "Total population of the state",
    "Opportunity_Score_mean": "Mean opportunity score across the state",
    "Vulnerability_Index_mean": "Mean vulnerability index across the state",
    "Healthcare_Rank": "National rank of the state's healthcare performance",
    "Inequality_Score": "Spread of county healthcare scores within the state",
}
STATES_PER_PAGE = 8

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
RECOMMENDATION_CACHE_EXPIRY = 7 * 24 * 60 * 60
