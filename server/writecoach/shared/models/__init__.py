"""
Data models for the web server.
"""

from .requests import AnalyzeRequest, GenerateTopicRequest, UserCounterRequest

from .responses import (
    AnalysisResult,
    Certificate,
    CertificatesResponse,
    GeneratedTopic,
    HealthResponse,
    Suggestion,
    TopicSection,
    UserCountResponse,
    UserRegistrationResponse,
)

from .internal import (
    AttemptOutcome,
    CircuitStatus,
    DispatchFailure,
    DispatchResult,
    ProviderAttempt,
)

__all__ = [
    # Request models
    "AnalyzeRequest",
    "GenerateTopicRequest",
    "UserCounterRequest",

    # Response models
    "AnalysisResult",
    "Certificate",
    "CertificatesResponse",
    "GeneratedTopic",
    "HealthResponse",
    "Suggestion",
    "TopicSection",
    "UserCountResponse",
    "UserRegistrationResponse",

    # Internal models
    "AttemptOutcome",
    "CircuitStatus",
    "DispatchFailure",
    "DispatchResult",
    "ProviderAttempt",
]
