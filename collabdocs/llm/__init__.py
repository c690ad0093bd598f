"""
LLM module - Language model integration.

This module handles all LLM interactions:
- API calls to Groq and Google Gemini with fallback
- Prompt templates for the writing assistant
"""
from collabdocs.core.exceptions import LLMError
from collabdocs.llm.client import LLMClient, get_llm_client, set_llm_client

__all__ = [
    "LLMClient",
    "LLMError",
    "get_llm_client",
    "set_llm_client",
]
