import pytest

from data import Dataset, load_color_scales

RECORDS = [
    {
        "FIPS": "01001", "County": "Alpha", "State": "Alabama", "Region": "Southeast",
        "Population": 20000, "Healthcare_Access": 20, "Opportunity_Score": 80,
        "Vulnerability_Index": 75, "Resilience_Score": 30, "Insurance_Rate": 50.4,
        "Poverty_Rate": 30.6, "Education_Rate": 15.4, "Median_Income": 32000,
        "Disability_Rate": 18, "Broadband_Rate": 5000, "Cluster_7": 0,
        "Cluster_Name_Detailed": "Rural Disadvantaged", "lat": 32.5, "lng": -86.6,
    },
    {
        "FIPS": "01003", "County": "Beta", "State": "Alabama", "Region": "Southeast",
        "Population": 250000, "Healthcare_Access": 50, "Opportunity_Score": 55,
        "Vulnerability_Index": 55, "Resilience_Score": 60, "Insurance_Rate": 80,
        "Poverty_Rate": 15, "Education_Rate": 30, "Median_Income": 60000,
        "Disability_Rate": 12, "Broadband_Rate": 90000, "Cluster_7": 2,
        "Cluster_Name_Detailed": "Suburban Middle-Class", "lat": 30.7, "lng": -87.7,
    },
    {
        "FIPS": "06001", "County": "Gamma", "State": "California", "Region": "West",
        "Population": 1500000, "Healthcare_Access": 90, "Opportunity_Score": 20,
        "Vulnerability_Index": 20, "Resilience_Score": 85, "Insurance_Rate": 92,
        "Poverty_Rate": 9, "Education_Rate": 50, "Median_Income": 120000,
        "Disability_Rate": 9, "Broadband_Rate": 600000, "Cluster_7": 1,
        "Cluster_Name_Detailed": "Wealthy Metro", "lat": 37.6, "lng": -121.9,
    },
    {
        "FIPS": "06003", "County": "Delta", "State": "California", "Region": "West",
        "Population": 12000000, "Healthcare_Access": 68, "Opportunity_Score": 72,
        "Vulnerability_Index": 40, "Resilience_Score": 70, "Insurance_Rate": 88,
        "Poverty_Rate": 14, "Education_Rate": 32, "Median_Income": 70000,
        "Disability_Rate": 10, "Broadband_Rate": 3200000, "Cluster_7": 3,
        "Cluster_Name_Detailed": "Urban Challenges", "lat": 34.0, "lng": -118.2,
    },
    {
        "FIPS": "28011", "County": "Epsilon", "State": "Mississippi", "Region": "Southeast",
        "Population": 30000, "Healthcare_Access": 27, "Opportunity_Score": 81,
        "Vulnerability_Index": 78, "Resilience_Score": 31, "Insurance_Rate": 52,
        "Poverty_Rate": 34, "Education_Rate": 15, "Median_Income": 33000,
        "Disability_Rate": 17, "Broadband_Rate": 8000, "Cluster_7": 0,
        "Cluster_Name_Detailed": "Rural Disadvantaged", "lat": 33.9, "lng": -90.7,
    },
    {"FIPS": "48999", "County": "Sparse", "State": "Texas"},
]


@pytest.fixture
def records():
    return [dict(r) for r in RECORDS]


@pytest.fixture
def dataset(records):
    return Dataset.from_records(records, color_scales=load_color_scales(None))


@pytest.fixture
def counties(dataset):
    return dataset.counties


@pytest.fixture
def county(dataset):
    def _get(fips):
        return dataset.get(fips)
    return _get
