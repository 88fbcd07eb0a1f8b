from __future__ import annotations

import pytest

from resume_builder.services.llm_providers import (
    DEFAULT_GEMINI_MODEL,
    GeminiProvider,
    GenerationSettings,
    LLMError,
    provider_from_env,
)


class _FakeResponse:
    def __init__(self, text: str | None) -> None:
        self.text = text


def _install_fake_client(monkeypatch: pytest.MonkeyPatch, models: object | None = None) -> None:
    class _FakeClient:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key
            self.models = models

    import google.genai as _genai

    monkeypatch.setattr(_genai, "Client", _FakeClient, raising=True)


class TestGenerationSettings:
    def test_default_is_temperature_only(self) -> None:
        assert GenerationSettings().to_config() == {"temperature": 0.7}

    def test_all_values(self) -> None:
        settings = GenerationSettings(temperature=0.2, max_output_tokens=256, seed=7)
        assert settings.to_config() == {"temperature": 0.2, "max_output_tokens": 256, "seed": 7}

    def test_none_values_are_left_out(self) -> None:
        assert GenerationSettings(temperature=None).to_config() == {}


class TestGeminiProvider:
    def test_reads_key_and_model_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-api-key-123")
        monkeypatch.setenv("LLM_MODEL", "gemini-1.5-flash")
        _install_fake_client(monkeypatch)

        provider = GeminiProvider()

        assert provider.api_key == "test-api-key-123"
        assert provider.model == "gemini-1.5-flash"
        assert provider.client.api_key == "test-api-key-123"

    def test_explicit_arguments_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("LLM_MODEL", "env-model")
        _install_fake_client(monkeypatch)

        provider = GeminiProvider(api_key="arg-key", model="arg-model")

        assert (provider.api_key, provider.model) == ("arg-key", "arg-model")

    def test_default_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.delenv("LLM_MODEL", raising=False)
        _install_fake_client(monkeypatch)

        assert GeminiProvider().model == DEFAULT_GEMINI_MODEL == "gemini-2.0-flash"

    def test_missing_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        with pytest.raises(LLMError, match="Missing GEMINI_API_KEY environment variable"):
            GeminiProvider()

    @pytest.mark.parametrize(
        ("environ", "expected"),
        [({"GEMINI_API_KEY": "k"}, True), ({"GEMINI_API_KEY": ""}, False), ({}, False)],
    )
    def test_is_configured(self, environ: dict[str, str], expected: bool) -> None:
        assert GeminiProvider.is_configured(environ) is expected

    def test_complete_sends_prompt_and_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("LLM_MODEL", "gemini-test-model")
        calls: list[dict] = []

        class _FakeModels:
            def generate_content(self, *, model: str, contents: str, config: dict) -> _FakeResponse:
                calls.append({"model": model, "contents": contents, "config": config})
                return _FakeResponse("  Led a team of four.  ")

        _install_fake_client(monkeypatch, _FakeModels())

        text = GeminiProvider().complete("Rewrite this", GenerationSettings(max_output_tokens=64))

        assert text == "Led a team of four."
        assert calls == [
            {
                "model": "gemini-test-model",
                "contents": "Rewrite this",
                "config": {"temperature": 0.7, "max_output_tokens": 64},
            }
        ]

    def test_complete_without_text(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")

        class _FakeModels:
            def generate_content(self, *, model: str, contents: str, config: dict) -> _FakeResponse:
                return _FakeResponse(None)

        _install_fake_client(monkeypatch, _FakeModels())

        assert GeminiProvider().complete("Rewrite this", GenerationSettings()) == ""

    def test_api_failure_hides_prompt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")

        class _FakeModels:
            def generate_content(self, *, model: str, contents: str, config: dict) -> None:
                raise RuntimeError(f"could not process: {contents}")

        _install_fake_client(monkeypatch, _FakeModels())

        with pytest.raises(LLMError, match="Gemini API call failed: RuntimeError") as excinfo:
            GeminiProvider().complete("my secret resume text", GenerationSettings())

        assert "secret" not in str(excinfo.value)


class TestProviderFromEnv:
    def test_defaults_to_gemini(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        _install_fake_client(monkeypatch)

        assert isinstance(provider_from_env(), GeminiProvider)

    def test_name_is_case_insensitive(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        monkeypatch.setenv("LLM_PROVIDER", " Gemini ")
        _install_fake_client(monkeypatch)

        assert isinstance(provider_from_env(), GeminiProvider)

    def test_unknown_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM_PROVIDER", "unknown_provider")

        with pytest.raises(LLMError, match="Unknown LLM provider: unknown_provider"):
            provider_from_env()

    def test_unconfigured_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        with pytest.raises(LLMError, match="GEMINI_API_KEY"):
            provider_from_env()
