"""
LLM Client for Groq and Google Gemini.

This module provides one generate() call over two providers:
- API client initialization (lazy, per provider)
- Provider fallback cascade
- Error handling and logging

Providers without an API key are skipped. When every attempt fails the
caller gets an LLMError, which the API reports as 503.
"""
import time
from typing import Dict, List, Optional

import google.generativeai as genai
from groq import Groq

from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import LLMError
from collabdocs.core.logging_config import get_logger

logger = get_logger(__name__)


class LLMClient:
    """
    Hybrid client for the Groq and Google Gemini APIs.

    Default cascade:
        Groq (LLM_MODEL) -> Gemini (GOOGLE_LLM_MODEL) -> Groq (LLM_MODEL_FALLBACK)
    """

    def __init__(self, backoff_seconds: float = 1.0):
        """
        Args:
            backoff_seconds: Linear backoff step between fallback attempts
        """
        self.settings = get_settings()
        self.temperature = self.settings.llm_temperature
        self.max_tokens = self.settings.llm_max_tokens
        self.backoff_seconds = backoff_seconds

        self._groq_client: Optional[Groq] = None
        self._google_configured = False

        logger.info("Hybrid LLM Client initialized (Groq + Google)")

    @property
    def groq_client(self) -> Groq:
        if self._groq_client is None:
            self._groq_client = Groq(api_key=self.settings.groq_api_key)
        return self._groq_client

    def _configure_google(self) -> None:
        if not self._google_configured:
            genai.configure(api_key=self.settings.google_api_key)
            self._google_configured = True

    def _has_key(self, provider: str) -> bool:
        if provider == "google":
            return bool(self.settings.google_api_key)
        return bool(self.settings.groq_api_key)

    def model_cascade(self, model: Optional[str] = None) -> List[Dict[str, str]]:
        """Ordered provider/model attempts, caller's model first."""
        cascade = [
            {"provider": "groq", "model": self.settings.llm_model},
            {"provider": "google", "model": self.settings.google_llm_model},
            {"provider": "groq", "model": self.settings.llm_model_fallback},
        ]

        if model:
            is_google = "gemini" in model.lower()
            cascade.insert(0, {"provider": "google" if is_google else "groq", "model": model})

        return [attempt for attempt in cascade if self._has_key(attempt["provider"])]

    def generate(
        self,
        user_message: str,
        system_prompt: Optional[str] = None,
        history: Optional[List[Dict[str, str]]] = None,
        model: Optional[str] = None,
        stop: Optional[List[str]] = None
    ) -> str:
        """
        Generate a completion, falling back across providers.

        Args:
            user_message: Final user turn (for the assistant, the full RAG prompt)
            system_prompt: System instruction
            history: Prior turns as [{"role": "user"|"assistant", "content": ...}]
            model: Model to try before the default cascade
            stop: Stop sequences

        Returns:
            Generated text

        Raises:
            LLMError: If no provider is configured or all of them failed
        """
        if system_prompt is None:
            system_prompt = "You are a helpful assistant."

        cascade = self.model_cascade(model)
        if not cascade:
            logger.error("No LLM provider configured (GROQ_API_KEY / GOOGLE_API_KEY)")
            raise LLMError("No LLM provider is configured")

        last_error = None

        for i, attempt in enumerate(cascade):
            provider = attempt["provider"]
            target_model = attempt["model"]

            try:
                if i > 0:
                    logger.info(f"Attempt {i+1}: Falling back to {provider.title()} ({target_model})...")
                    if self.backoff_seconds:
                        time.sleep(self.backoff_seconds * i)

                if provider == "google":
                    text = self._generate_google(user_message, system_prompt, history, target_model, stop)
                else:
                    text = self._generate_groq(user_message, system_prompt, history, target_model, stop)

                if not text or not text.strip():
                    raise ValueError("Empty completion")
                return text

            except Exception as e:
                error_msg = str(e).lower()
                is_rate_limit = "429" in error_msg or "quota" in error_msg or "rate limit" in error_msg

                log_level = logger.warning if is_rate_limit else logger.error
                log_level(f"Provider failed ({provider}/{target_model}): {e}")

                last_error = e

        logger.critical("ALL LLM PROVIDERS FAILED.")
        raise LLMError(f"All LLM providers failed. Last error: {last_error}")

    def _generate_groq(self, user_message, system_prompt, history, model, stop=None) -> str:
        """Execute request using Groq."""
        messages = [{"role": "system", "content": system_prompt}]
        if history:
            messages.extend(history)
        messages.append({"role": "user", "content": user_message})

        response = self.groq_client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stop=stop
        )
        return response.choices[0].message.content

    def _generate_google(self, user_message, system_prompt, history, model, stop=None) -> str:
        """Execute request using Google Gemini."""
        self._configure_google()

        model_instance = genai.GenerativeModel(
            model_name=model,
            system_instruction=system_prompt
        )

        # OpenAI-style history -> Gemini roles
        chat_history = []
        if history:
            for msg in history:
                role = "user" if msg["role"] == "user" else "model"
                chat_history.append({"role": role, "parts": [msg["content"]]})

        generation_config = genai.types.GenerationConfig(
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            stop_sequences=stop,
        )

        chat = model_instance.start_chat(history=chat_history)
        response = chat.send_message(user_message, generation_config=generation_config)
        return response.text


# Module-level instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the LLM client singleton."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


def set_llm_client(client) -> None:
    """Replace the LLM client singleton (tests inject fakes here)."""
    global _llm_client
    _llm_client = client
