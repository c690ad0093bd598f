"""
Prompts module - LLM prompt templates.

Prompts are stored as separate Python files so prompt changes are
reviewed like code.
"""
from collabdocs.llm.prompts.assistant_prompts import (
    WRITING_ASSISTANT_SYSTEM_PROMPT,
    WELCOME_MESSAGE,
    COMMAND_NAMES,
    APPLY_SUGGESTION_SYSTEM_PROMPT,
    DECISION_SYSTEM_PROMPT,
    get_command_system_prompt,
    get_command_user_prompt,
    get_apply_suggestion_user_prompt,
    get_decision_user_prompt,
)

__all__ = [
    "WRITING_ASSISTANT_SYSTEM_PROMPT",
    "WELCOME_MESSAGE",
    "COMMAND_NAMES",
    "APPLY_SUGGESTION_SYSTEM_PROMPT",
    "DECISION_SYSTEM_PROMPT",
    "get_command_system_prompt",
    "get_command_user_prompt",
    "get_apply_suggestion_user_prompt",
    "get_decision_user_prompt",
]
