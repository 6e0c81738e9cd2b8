"""
Response models for API endpoints.

AnalysisResult and GeneratedTopic double as the schemas AI output must
satisfy before it is returned or cached.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .internal import CircuitStatus


class Suggestion(BaseModel):
    """One concrete correction."""
    error: str = Field(..., description="Wrong phrase, copied from the translation")
    fix: str = Field(..., description="Corrected phrase")
    reason: str = Field("", description="Explanation of the rule involved")


class AnalysisResult(BaseModel):
    """Evaluation of one translation."""
    accuracy: float = Field(..., ge=0, le=100, description="Overall score 0-100")
    vocabulary_status: str = Field(..., description="Advanced | Good | Needs Review")
    grammar_status: str = Field(..., description="Good | Warning")
    suggestions: List[Suggestion] = Field(default_factory=list)
    refined_text: Optional[str] = ""


class TopicSection(BaseModel):
    """One paragraph of a generated essay outline."""
    id: str
    label: str
    vn: str = Field(..., description="Vietnamese paragraph to translate")


class GeneratedTopic(BaseModel):
    """Essay topic with the Vietnamese paragraphs to translate."""
    title: str = Field(..., min_length=1)
    sections: List[TopicSection] = Field(..., min_length=1)
    instructions: Optional[str] = None


class Certificate(BaseModel):
    """English certificate offered for practice."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    full_name: str = Field(..., alias="fullName")
    bands: List[str]
    format: str = Field(..., description="Essay format shown to the topic generator")

    def offers_band(self, band: str) -> bool:
        return band in self.bands


class CertificatesResponse(BaseModel):
    """Certificate catalogue."""
    certificates: List[Certificate]
    total_count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="healthy | degraded")
    version: str
    store_backend: str
    store_reachable: bool
    circuits: List[CircuitStatus] = Field(default_factory=list)
    providers: Dict[str, List[str]] = Field(default_factory=dict, description="Configured models per provider")
    timestamp: float


class UserCountResponse(BaseModel):
    """Distinct visitors seen within the fingerprint TTL."""
    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(..., alias="totalUsers")


class UserRegistrationResponse(UserCountResponse):
    """Result of registering one visit."""
    is_new_user: bool = Field(..., alias="isNewUser")
