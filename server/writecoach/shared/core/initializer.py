"""
Web Server Initializer - loads provider model lists and the certificate catalogue.
"""

import os
import yaml
from typing import Dict, List, Optional
from loguru import logger
import aiofiles
from pydantic import ValidationError

from ..models.responses import Certificate
from ..providers.enums import Provider
from ..providers.registry import get_provider_registry


DEFAULT_PROVIDER_MODELS: Dict[Provider, List[str]] = {
    Provider.PRIMARY: ["gemini-2.5-flash", "gemini-2.0-flash", "gemini-1.5-flash"],
    Provider.SECONDARY: [
        "deepseek/deepseek-chat",
        "meta-llama/llama-3.2-3b-instruct:free",
        "google/gemini-flash-1.5-8b:free",
    ],
    Provider.TERTIARY: ["gpt-4o-mini", "gpt-4o"],
}


class Initializer:
    """
    Loads the YAML catalogues used to build the provider chain and validate topics.
    """

    def __init__(self, provider_file_path: Optional[str] = None, certificates_file_path: Optional[str] = None):
        """
        Initialize with catalogue paths.

        Args:
            provider_file_path: Path to providers.yaml (provider -> ordered model tags)
            certificates_file_path: Path to certificates.yaml
        """
        self.provider_file_path = provider_file_path or os.getenv("WRITECOACH_PROVIDER_CONFIG_FILE", "providers.yaml")
        self.certificates_file_path = certificates_file_path or os.getenv("WRITECOACH_CERTIFICATES_FILE", "certificates.yaml")

        # Public attributes
        self.provider_models: Dict[Provider, List[str]] = {}
        self.certificates: Dict[str, Certificate] = {}

        logger.info(f"Initializer configured with provider file: {self.provider_file_path}")
        logger.info(f"Certificates file: {self.certificates_file_path}")

    async def initialize(self) -> None:
        try:
            await self._load_provider_config()
            await self._load_certificates()
            logger.info("Web Server Initializer startup complete")
        except Exception as e:
            logger.error(f"Web Server initialization failed: {str(e)}")
            raise

    async def _read_yaml(self, path: str):
        async with aiofiles.open(path, 'r', encoding='utf-8') as file:
            content = await file.read()
        return yaml.safe_load(content)

    async def _load_provider_config(self) -> None:
        """Load ordered model candidates per provider from YAML."""
        if not os.path.exists(self.provider_file_path):
            logger.warning(f"Provider config file not found: {self.provider_file_path}")
            self.provider_models = {provider: list(models) for provider, models in DEFAULT_PROVIDER_MODELS.items()}
            logger.info("Using default provider configuration")
            return

        raw = await self._read_yaml(self.provider_file_path) or {}
        registry = get_provider_registry()

        self.provider_models = {}
        for name, models in raw.items():
            provider = registry.resolve(name)
            if provider is None:
                raise ValueError(f"Unknown provider in {self.provider_file_path}: {name}")

            model_tags = []
            for model in models or []:
                if isinstance(model, dict):
                    model_tags.append(model["tag"])
                else:
                    model_tags.append(str(model))
            self.provider_models[provider] = model_tags

        logger.info(f"Loaded provider configuration: { {p.value: m for p, m in self.provider_models.items()} }")

    async def _load_certificates(self) -> None:
        """Load the certificate catalogue from YAML."""
        if not os.path.exists(self.certificates_file_path):
            logger.warning(f"Certificates file not found: {self.certificates_file_path}; catalogue is empty")
            self.certificates = {}
            return

        raw = await self._read_yaml(self.certificates_file_path) or {}
        try:
            certificates = [Certificate.model_validate(entry) for entry in raw.get("certificates", [])]
        except ValidationError as e:
            raise ValueError(f"Invalid certificate entry in {self.certificates_file_path}: {e}") from e

        self.certificates = {certificate.id: certificate for certificate in certificates}
        logger.info(f"Loaded {len(self.certificates)} certificates")

    def get_provider_models(self) -> Dict[Provider, List[str]]:
        return {provider: list(models) for provider, models in self.provider_models.items()}

    def get_certificate(self, certificate_id: str) -> Optional[Certificate]:
        return self.certificates.get(certificate_id)

    def list_certificates(self) -> List[Certificate]:
        return list(self.certificates.values())
