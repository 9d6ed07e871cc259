import json

import pytest

from data import Dataset, load_color_scales, load_dataset, normalize_counties
from models import FilterSettings


def test_sparse_record_gets_defaults(county):
    sparse = county("48999")
    assert sparse.healthcare_access == 50.0
    assert sparse.opportunity_score == 50.0
    assert sparse.vulnerability_index == 50.0
    assert sparse.resilience_score == 50.0
    assert sparse.population == 50000
    assert sparse.cluster_7 == 0
    assert (sparse.lat, sparse.lng) == (39.0, -98.0)
    assert sparse.poverty_rate == 0.0
    assert sparse.region is None


def test_latitude_longitude_alternates():
    ds = Dataset.from_records([
        {"FIPS": "01001", "latitude": 40.1, "longitude": -100.2},
        {"FIPS": "01003", "lat": 30.5, "lng": -87.5},
    ])
    assert (ds.get("01001").lat, ds.get("01001").lng) == (40.1, -100.2)
    assert (ds.get("01003").lat, ds.get("01003").lng) == (30.5, -87.5)


def test_integer_fips_is_zero_padded():
    ds = Dataset.from_records([{"FIPS": 6037, "County": "Los Angeles"}, {"FIPS": 1001}])
    assert ds.get("06037").county == "Los Angeles"
    assert ds.get("01001") is not None


def test_zero_scores_are_kept():
    ds = Dataset.from_records([{"FIPS": "01001", "Healthcare_Access": 0, "Population": 0}])
    assert ds.get("01001").healthcare_access == 0.0
    assert ds.get("01001").population == 0


def test_records_without_fips_are_dropped():
    frame = normalize_counties([{"FIPS": "01001"}, {"County": "Nameless"}])
    assert frame["FIPS"].to_list() == ["01001"]


def test_load_order_is_preserved(dataset, records):
    assert [c.fips for c in dataset.counties] == [r["FIPS"] for r in records]
    assert [c.fips for c in dataset.filtered(FilterSettings(clusters=[0, 1]))] == ["01001", "06001", "28011", "48999"]


def test_regions_and_clusters(dataset):
    assert dataset.regions() == ["Southeast", "West"]
    assert dataset.cluster_ids() == [0, 1, 2, 3]


def test_cluster_mode_has_no_color_scale(dataset):
    assert dataset.color_scale("cluster") is None
    assert dataset.color_scale("healthcare_access").labels[0] == "Critical"


def test_missing_color_scale_file_uses_fallbacks(tmp_path):
    scales = load_color_scales(str(tmp_path / "missing.json"))
    assert set(scales) == {"healthcare_access", "opportunity", "vulnerability", "population"}


def test_malformed_color_scale_entry_is_ignored(tmp_path):
    path = tmp_path / "color_scales.json"
    path.write_text(json.dumps({
        "healthcare_access": {"colors": ["#000000", "#ffffff"], "domain": [100, 0]},
        "opportunity": {"colors": ["#000000", "#ffffff"], "domain": [0, 100]},
    }))
    scales = load_color_scales(str(path))
    assert scales["healthcare_access"].colors[0] == "#1a0000"
    assert scales["opportunity"].colors == ["#000000", "#ffffff"]


def test_load_dataset(tmp_path, records):
    county_path = tmp_path / "counties.json"
    county_path.write_text(json.dumps(records))
    insights_path = tmp_path / "insights.json"
    insights_path.write_text(json.dumps([{"FIPS": "01001", "insights": ["Low access"]}]))
    recommendations_path = tmp_path / "recommendations.json"
    recommendations_path.write_text(json.dumps([{"FIPS": "01001", "title": "Mobile clinics"}]))

    ds = load_dataset(str(county_path), None, str(recommendations_path), str(insights_path))
    assert len(ds) == len(records)
    assert ds.insights_for("01001") == ["Low access"]
    assert ds.insights_for("06001") == []
    assert ds.recommendations_for("01001") == [{"FIPS": "01001", "title": "Mobile clinics"}]


def test_optional_files_may_be_missing(tmp_path, records):
    county_path = tmp_path / "counties.json"
    county_path.write_text(json.dumps(records))
    ds = load_dataset(str(county_path), str(tmp_path / "a.json"), str(tmp_path / "b.json"), str(tmp_path / "c.json"))
    assert ds.recommendations == []
    assert ds.insights == []


def test_county_file_must_be_a_list(tmp_path):
    county_path = tmp_path / "counties.json"
    county_path.write_text(json.dumps({"FIPS": "01001"}))
    with pytest.raises(ValueError):
        load_dataset(str(county_path), None, None, None)


def test_bundled_sample_data_loads():
    ds = load_dataset()
    assert len(ds) > 0
    assert ds.get("06037").population > 10_000_000


def widest_settings(ds):
    return FilterSettings(**{
        f"{name}_range": tuple(dim["bounds"]) for name, dim in ds.dimension_bounds().items()
    })


def test_dimension_bounds_cover_loaded_values(dataset):
    bounds = dataset.dimension_bounds()
    assert bounds["population"]["bounds"] == [0, 12_000_000]
    assert bounds["healthcare"]["bounds"] == [0, 100]
    assert bounds["broadband"]["label"] == "Broadband Access"
    assert dataset.filtered(widest_settings(dataset)) == dataset.counties


def test_widest_bounds_keep_bundled_dataset():
    ds = load_dataset()
    assert ds.filtered(widest_settings(ds)) == ds.counties
