import dataclasses

import pytest

from collabdocs.core.exceptions import LLMError
from collabdocs.llm.client import LLMClient


@pytest.fixture
def client():
    llm = LLMClient(backoff_seconds=0)
    llm.settings = dataclasses.replace(llm.settings, groq_api_key="groq-key", google_api_key="google-key")
    return llm


def test_cascade_order(client):
    cascade = client.model_cascade()

    assert [a["provider"] for a in cascade] == ["groq", "google", "groq"]
    assert cascade[0]["model"] == client.settings.llm_model
    assert cascade[2]["model"] == client.settings.llm_model_fallback


def test_requested_model_goes_first(client):
    assert client.model_cascade("gemini-1.5-pro")[0] == {"provider": "google", "model": "gemini-1.5-pro"}


def test_providers_without_key_are_skipped(client):
    client.settings = dataclasses.replace(client.settings, groq_api_key="")

    assert [a["provider"] for a in client.model_cascade()] == ["google"]


def test_no_provider_configured():
    llm = LLMClient(backoff_seconds=0)
    llm.settings = dataclasses.replace(llm.settings, groq_api_key="", google_api_key="")

    with pytest.raises(LLMError):
        llm.generate("hello")


def test_falls_back_to_google(client, monkeypatch):
    def groq_down(*args, **kwargs):
        raise RuntimeError("503 from groq")

    monkeypatch.setattr(client, "_generate_groq", groq_down)
    monkeypatch.setattr(client, "_generate_google", lambda *args, **kwargs: "from gemini")

    assert client.generate("hello", system_prompt="be brief") == "from gemini"


def test_empty_completion_counts_as_failure(client, monkeypatch):
    replies = iter(["   ", "second try"])
    monkeypatch.setattr(client, "_generate_groq", lambda *args, **kwargs: next(replies))
    monkeypatch.setattr(client, "_generate_google", lambda *args, **kwargs: "")

    assert client.generate("hello") == "second try"


def test_all_providers_fail(client, monkeypatch):
    def down(*args, **kwargs):
        raise RuntimeError("rate limit")

    monkeypatch.setattr(client, "_generate_groq", down)
    monkeypatch.setattr(client, "_generate_google", down)

    with pytest.raises(LLMError, match="All LLM providers failed"):
        client.generate("hello")
