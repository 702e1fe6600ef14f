# backend/esg_ddq/models.py
"""Pydantic models for the assessment pipeline.

Wire format is camelCase (the shape the LLM is asked to emit and the API
exchanges); Python attributes are snake_case. Dump with `by_alias=True`.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, List
from datetime import datetime, timezone


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Inputs ----------

class CompanyProfile(CamelModel):
    """Structured company description consumed by both assessment engines.

    Required fields are guaranteed non-empty by whoever builds the profile
    (see ProfileExtractor); the engines treat that as a precondition.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    company_name: str
    sector: str
    sub_sector: str
    countries_of_operation: List[str] = Field(min_length=1)
    number_of_employees: str
    business_activities: str
    product_description: str
    current_esg_practices: Optional[str] = Field(default=None, alias="currentESGPractices")
    policies: Optional[str] = None
    compliance_status: Optional[str] = None
    additional_info: Optional[str] = None


# ---------- Evidence ----------

class SearchResult(CamelModel):
    title: str
    source_label: str
    snippet: str
    relevance_score: Optional[float] = None


class SearchResults(CamelModel):
    """Outcome of one knowledge-search query. Always present, even when the query failed."""
    query: str
    results: List[SearchResult] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EvidenceFailure(CamelModel):
    """Error channel entry for a query that degraded to an empty result."""
    topic: str
    query: str
    error_type: str
    message: str


class EvidenceBundle(CamelModel):
    """Topic -> SearchResults, in the order the topics were issued."""
    entries: Dict[str, SearchResults] = Field(default_factory=dict)
    failures: List[EvidenceFailure] = Field(default_factory=list)

    def records(self) -> List[SearchResults]:
        return list(self.entries.values())

    def total_results(self) -> int:
        return sum(len(record.results) for record in self.entries.values())

    def is_empty(self) -> bool:
        return self.total_results() == 0

    def merge(self, other: "EvidenceBundle") -> "EvidenceBundle":
        """Concatenate two bundles; this bundle's topics come first."""
        entries = dict(self.entries)
        entries.update(other.entries)
        return EvidenceBundle(entries=entries, failures=[*self.failures, *other.failures])


# ---------- DDQ ----------

class RubricItem(CamelModel):
    """One scored rubric area.

    Materiality and level are plain strings here; membership in the rubric
    scales is enforced by services.validator so a non-strict run can still
    hand back whatever the model produced.
    """
    area: str
    definition: str = ""
    materiality: str
    level: str
    comments: str = ""


class TrackRecord(CamelModel):
    regulatory_breaches: Optional[str] = None
    supply_chain_issues: Optional[str] = None
    transparency_disclosure: Optional[str] = None
    renewable_energy: Optional[str] = None


class DDQResult(CamelModel):
    risk_management: List[RubricItem]
    environment: List[RubricItem]
    social: List[RubricItem]
    governance: List[RubricItem]
    track_record: TrackRecord = Field(default_factory=TrackRecord)

    def category_items(self) -> Dict[str, List[RubricItem]]:
        """Wire key -> items, in document order."""
        return {
            "riskManagement": self.risk_management,
            "environment": self.environment,
            "social": self.social,
            "governance": self.governance,
        }

    def to_wire(self) -> Dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------- Investment Memo ----------

class IMResult(CamelModel):
    company_name: str
    product_activity_solution: str
    risk_category: str
    grievance_redress_mechanism: str
    sector: str
    sub_sector: str
    countries_of_operation: str
    number_of_employees: str
    current_risks: List[str] = Field(default_factory=list)
    current_opportunities: List[str] = Field(default_factory=list)
    long_term_risks: List[str] = Field(default_factory=list)
    long_term_opportunities: List[str] = Field(default_factory=list)
    founders_commitment: str = ""
    stakeholder_consultations: str = ""
    potential_grievances: str = ""
    risk_of_retaliation: str = ""
    gaps: List[str] = Field(default_factory=list)
    action_plan: List[str] = Field(default_factory=list)
    estimated_cost: Optional[str] = None
    timeframe: Optional[str] = None
    limitations: List[str] = Field(default_factory=list)

    @field_validator("countries_of_operation", mode="before")
    def join_countries(cls, v):
        # Models sometimes echo the list back instead of the joined string
        if isinstance(v, list):
            return ", ".join(str(c) for c in v)
        return v

    def to_wire(self) -> Dict:
        return self.model_dump(by_alias=True, exclude_none=True)
