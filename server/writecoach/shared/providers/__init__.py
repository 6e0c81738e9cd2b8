"""
Chat-completion provider clients, one per failover tier.
"""

from .base import BaseProvider, ProviderResult
from .enums import Provider

# Import all provider implementations (triggers self-registration)
from .gemini import GeminiProvider
from .openrouter import OpenRouterProvider
from .github import GitHubModelsProvider

__all__ = [
    "BaseProvider",
    "ProviderResult",
    "Provider",
    "GeminiProvider",
    "OpenRouterProvider",
    "GitHubModelsProvider",
]
