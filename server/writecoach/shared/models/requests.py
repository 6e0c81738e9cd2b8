"""
Request models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.security import (
    SecurityValidationError,
    sanitize_fingerprint,
    validate_identifier,
    validate_submission_text,
)


class AnalyzeRequest(BaseModel):
    """Translation submitted for evaluation."""
    model_config = ConfigDict(populate_by_name=True)

    user_text: str = Field(..., alias="userEn", description="Learner's English translation")
    source_text: str = Field(..., alias="sourceVn", description="Vietnamese source paragraph")
    target: str = Field(..., description="Target certificate and band, e.g. 'IELTS Academic Band 7.0'")

    @field_validator('user_text', 'source_text', 'target')
    @classmethod
    def validate_text_fields(cls, v, info):
        """Reject empty fields and script content."""
        try:
            return validate_submission_text(v, info.field_name)
        except SecurityValidationError as e:
            raise ValueError(str(e))

    def total_length(self) -> int:
        return len(self.user_text) + len(self.source_text) + len(self.target)


class GenerateTopicRequest(BaseModel):
    """Request for a fresh essay topic."""
    model_config = ConfigDict(populate_by_name=True)

    certificate_id: str = Field(..., alias="certificateId", description="Certificate identifier, e.g. 'ielts-academic'")
    band: str = Field(..., max_length=32, description="Band offered by that certificate")

    @field_validator('certificate_id')
    @classmethod
    def validate_certificate_id(cls, v):
        try:
            return validate_identifier(v, "certificateId")
        except SecurityValidationError as e:
            raise ValueError(str(e))

    @field_validator('band')
    @classmethod
    def validate_band(cls, v):
        if not v or not v.strip():
            raise ValueError("Missing required field: band")
        return v.strip()


class UserCounterRequest(BaseModel):
    """Visit registration from the browser."""
    fingerprint: str = Field(..., description="Browser fingerprint; reduced to 10-64 alphanumerics")

    @field_validator('fingerprint', mode='before')
    @classmethod
    def validate_fingerprint(cls, v):
        try:
            return sanitize_fingerprint(v)
        except SecurityValidationError as e:
            raise ValueError(str(e))
