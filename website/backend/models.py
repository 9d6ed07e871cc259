from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


VisualMode = Literal["healthcare_access", "opportunity", "vulnerability", "population", "cluster"]
Lever = Literal["insurance", "poverty", "education", "income"]


class County(BaseModel):
    """One normalized county record. Attribute names are snake_case, the
    dataset's JSON field names are kept as aliases."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    fips: str = Field(alias="FIPS")
    county: str = Field("", alias="County")
    state: str = Field("", alias="State")
    region: str | None = Field(None, alias="Region")

    lat: float = 39.0
    lng: float = -98.0

    population: int = Field(50000, alias="Population")

    healthcare_access: float = Field(50.0, alias="Healthcare_Access")
    opportunity_score: float = Field(50.0, alias="Opportunity_Score")
    vulnerability_index: float = Field(50.0, alias="Vulnerability_Index")
    resilience_score: float = Field(50.0, alias="Resilience_Score")

    healthcare_access_percentile: float | None = Field(None, alias="Healthcare_Access_Percentile")
    insurance_rate_percentile: float | None = Field(None, alias="Insurance_Rate_Percentile")
    education_rate_percentile: float | None = Field(None, alias="Education_Rate_Percentile")

    insurance_rate: float = Field(0.0, alias="Insurance_Rate")
    poverty_rate: float = Field(0.0, alias="Poverty_Rate")
    education_rate: float = Field(0.0, alias="Education_Rate")
    disability_rate: float = Field(0.0, alias="Disability_Rate")
    no_vehicle_rate: float = Field(0.0, alias="No_Vehicle_Rate")
    lep_rate: float = Field(0.0, alias="LEP_Rate")
    median_income: float = Field(0.0, alias="Median_Income")
    broadband_rate: float = Field(0.0, alias="Broadband_Rate")  # count-like, not a percentage

    cluster_7: int = Field(0, alias="Cluster_7")
    cluster_name_detailed: str = Field("", alias="Cluster_Name_Detailed")
    cluster_description: str = Field("", alias="Cluster_Description")
    rank_in_cluster: int | None = None
    total_in_cluster: int | None = None
    performance_vs_cluster: float | None = None  # signed
    cluster_avg_score: float | None = None

    @field_validator("fips", mode="before")
    @classmethod
    def fips_as_string(cls, v):
        if isinstance(v, int):
            return str(v).zfill(5)
        return v


class ColorScale(BaseModel):
    name: str = ""
    colors: list[str]
    domain: list[float]
    labels: list[str] | None = None

    @model_validator(mode="after")
    def check_alignment(self):
        if len(self.colors) != len(self.domain):
            raise ValueError("colors and domain must have the same length")
        if any(b <= a for a, b in zip(self.domain, self.domain[1:])):
            raise ValueError("domain must be strictly ascending")
        return self


Range = tuple[float, float]


class FilterSettings(BaseModel):
    # unset ranges impose no restriction
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    region: str | None = None
    clusters: list[int] = []

    population_range: Range | None = None
    healthcare_range: Range | None = None
    income_range: Range | None = None
    poverty_range: Range | None = None
    disability_range: Range | None = None
    education_range: Range | None = None
    insurance_range: Range | None = None
    vulnerability_range: Range | None = None
    opportunity_range: Range | None = None
    resilience_range: Range | None = None
    broadband_range: Range | None = None

    def range_for(self, dimension: str) -> Range | None:
        return getattr(self, f"{dimension}_range")

    def region_filter(self) -> str | None:
        if self.region in (None, "", "all"):
            return None
        return self.region


class PolicyInputs(BaseModel):
    model_config = ConfigDict(frozen=True)

    insurance: float
    poverty: float
    education: float
    income: float


class SimulationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    fips: str | None = None
    insurance: float = 70
    poverty: float = 15
    education: float = 35
    income: float = 65000
    baseline: PolicyInputs = PolicyInputs(insurance=70, poverty=15, education=35, income=65000)

    def inputs(self) -> PolicyInputs:
        return PolicyInputs(
            insurance=self.insurance, poverty=self.poverty,
            education=self.education, income=self.income,
        )


class MarkerStyle(BaseModel):
    fips: str
    name: str
    lat: float
    lng: float
    color: str
    radius: float
    selected: bool = False
    tooltip: dict = {}


class MarkerRequest(BaseModel):
    filters: FilterSettings = FilterSettings()
    mode: VisualMode = "healthcare_access"
    selected_fips: str | None = None


class LeverChangeRequest(BaseModel):
    fips: str
    lever: Lever
    change_pct: float


class Recommendation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    priority: str = "Medium"
    category: str = "Policy"
    title: str
    description: str = ""
    actions: list[str] = []
    impact: str = ""
    cost: str = ""
    timeline: str = ""


class RecommendationResult(BaseModel):
    recommendations: list[Recommendation] | None = None
    cached: bool = False
    error: str | None = None
    fallback: list[Recommendation] | None = None


class RecommendationRequest(BaseModel):
    filters: FilterSettings = FilterSettings()
