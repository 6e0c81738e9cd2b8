"""
Tests for catalogue loading at startup.
"""

import pytest

from writecoach.shared.core.config import DATA_DIR
from writecoach.shared.core.initializer import DEFAULT_PROVIDER_MODELS, Initializer
from writecoach.shared.providers import Provider


class TestInitializer:
    """providers.yaml and certificates.yaml loading."""

    @pytest.mark.asyncio
    async def test_bundled_catalogues(self):
        initializer = Initializer(str(DATA_DIR / "providers.yaml"), str(DATA_DIR / "certificates.yaml"))
        await initializer.initialize()

        models = initializer.get_provider_models()
        assert list(models) == [Provider.PRIMARY, Provider.SECONDARY, Provider.TERTIARY]
        assert models[Provider.PRIMARY][0] == "gemini-2.5-flash"
        assert len(initializer.list_certificates()) == 8
        assert initializer.get_certificate("ielts-academic").offers_band("7.0")
        assert initializer.get_certificate("missing") is None

    @pytest.mark.asyncio
    async def test_plain_model_names_and_partial_chain(self, tmp_path):
        providers = tmp_path / "providers.yaml"
        providers.write_text("openrouter:\n  - deepseek/deepseek-chat\n  - tag: qwen/qwen-2.5-7b-instruct\n")

        initializer = Initializer(str(providers), str(tmp_path / "absent.yaml"))
        await initializer.initialize()

        assert initializer.get_provider_models() == {
            Provider.SECONDARY: ["deepseek/deepseek-chat", "qwen/qwen-2.5-7b-instruct"]
        }
        assert initializer.list_certificates() == []

    @pytest.mark.asyncio
    async def test_missing_provider_file_uses_defaults(self, tmp_path):
        initializer = Initializer(str(tmp_path / "absent.yaml"), str(tmp_path / "absent.yaml"))
        await initializer.initialize()

        assert initializer.get_provider_models() == DEFAULT_PROVIDER_MODELS

    @pytest.mark.asyncio
    async def test_unknown_provider_is_rejected(self, tmp_path):
        providers = tmp_path / "providers.yaml"
        providers.write_text("anthropic:\n  - claude\n")

        with pytest.raises(ValueError, match="Unknown provider"):
            await Initializer(str(providers), str(tmp_path / "absent.yaml")).initialize()

    @pytest.mark.asyncio
    async def test_invalid_certificate_is_rejected(self, tmp_path):
        certificates = tmp_path / "certificates.yaml"
        certificates.write_text("certificates:\n  - id: broken\n    name: Broken\n")

        with pytest.raises(ValueError, match="Invalid certificate"):
            await Initializer(str(DATA_DIR / "providers.yaml"), str(certificates)).initialize()
