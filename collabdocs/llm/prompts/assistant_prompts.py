"""
Writing Assistant Prompts.

System prompts for the chat assistant, the one-shot editing commands,
the apply-suggestion planner and the proactive-diff decision.
"""
import json
from typing import Dict, List, Optional


WRITING_ASSISTANT_SYSTEM_PROMPT = (
    "You are a helpful writing assistant. Your goal is to help the user improve their writing, "
    "provide suggestions, and answer questions about their documents. Focus on being constructive "
    "and providing clear, actionable feedback that helps the user improve their writing."
)

WELCOME_MESSAGE = "I'm your writing assistant. How can I help you today?"


# One-shot editing commands operate on selected text only
_COMMAND_INSTRUCTIONS: Dict[str, str] = {
    "grammar": (
        "Correct the grammar, spelling and punctuation of the text. "
        "Keep the meaning, tone and formatting. Return only the corrected text."
    ),
    "summarize": (
        "Summarize the text in a few sentences, keeping the key points. "
        "Return only the summary."
    ),
    "rephrase": (
        "Rephrase the text so it reads more clearly while keeping its meaning "
        "and roughly its length. Return only the rephrased text."
    ),
    "expand": (
        "Expand the text with more detail, examples or explanation while staying "
        "on topic and keeping the author's voice. Return only the expanded text."
    ),
    "shrink": (
        "Shorten the text substantially while keeping its essential meaning. "
        "Return only the shortened text."
    ),
    "factcheck": (
        "Fact-check the claims in the text. List each questionable claim with a short "
        "explanation and a correction where you are confident. If every claim looks "
        "accurate, say so."
    ),
}

COMMAND_NAMES = tuple(_COMMAND_INSTRUCTIONS.keys()) + ("rewrite",)


def get_command_system_prompt(command: str, style: Optional[str] = None) -> str:
    """
    Get the system prompt for a one-shot editing command.

    Args:
        command: One of COMMAND_NAMES
        style: Target style, only used by 'rewrite'

    Raises:
        KeyError: If the command is unknown
    """
    if command == "rewrite":
        instruction = (
            f"Rewrite the text in a {style or 'neutral'} style. Keep the meaning "
            "and the key information. Return only the rewritten text."
        )
    else:
        instruction = _COMMAND_INSTRUCTIONS[command]

    return f"You are a precise writing assistant.\n\n{instruction}\nDo not add commentary before or after."


def get_command_user_prompt(content: str) -> str:
    return f"Text:\n{content}"


# ============================================================
# Apply suggestion
# ============================================================

APPLY_SUGGESTION_SYSTEM_PROMPT = """You apply a writing suggestion to a set of documents.

You will receive the suggestion and a JSON array of candidate documents,
each with "id", "name" and "content".

Rules:
- Only change documents the suggestion actually applies to
- Return the FULL new content of every document you change
- Respond with a JSON array only, no prose, no code fences:
  [{"document_id": <id>, "new_content": "<full new content>"}]
- If nothing should change, respond with []"""


def get_apply_suggestion_user_prompt(suggestion: str, documents: List[Dict]) -> str:
    return (
        f"Suggestion:\n{suggestion}\n\n"
        f"Candidate documents (JSON):\n{json.dumps(documents, ensure_ascii=False)}"
    )


# ============================================================
# Proactive diff decision
# ============================================================

DECISION_SYSTEM_PROMPT = """You decide whether an AI writing assistant's reply should be shown to the user as a proposed edit (a diff) of their document.

Answer "True" when the reply is a rewritten, corrected or new version of document text that could replace part of the document.
Answer "False" when the reply is an explanation, a list of feedback, a question or general conversation.

Respond with exactly one word: True or False."""


def get_decision_user_prompt(
    ai_response: str,
    context_type: str,
    command_name: Optional[str] = None,
    user_prompt: Optional[str] = None,
    document_snippet: Optional[str] = None,
) -> str:
    parts = [f"Interaction type: {context_type}"]
    if command_name:
        parts.append(f"Command: {command_name}")
    if user_prompt:
        parts.append(f"User request:\n{user_prompt}")
    if document_snippet:
        parts.append(f"Document excerpt:\n{document_snippet}")
    parts.append(f"Assistant reply:\n{ai_response}")
    return "\n\n".join(parts)
