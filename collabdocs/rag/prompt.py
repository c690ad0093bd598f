"""
Context window budgeting and prompt assembly.

Token counts are estimated as whitespace-separated words. The prompt
sent to the LLM has three parts:

    Relevant Context:            (only when there is context)
    <context>
    ---
    Chat History (Recent first):
    User: ... / Assistant: ...   (chronological, newest kept first)
    ---
    User Query:
    <query>

    Assistant Response:
"""
from typing import Dict, Iterable, List, Optional, Sequence

from collabdocs.core.logging_config import get_logger

logger = get_logger(__name__)

ROLE_LABELS = {"user": "User", "assistant": "Assistant"}


def estimate_tokens(text: Optional[str]) -> int:
    """Approximate token count: number of whitespace-separated words."""
    if not text:
        return 0
    return len(text.split())


def truncate_to_tokens(text: str, max_tokens: int) -> str:
    """
    Keep the first max_tokens words.

    Text within budget is returned unchanged; truncated text has its
    words joined by single spaces.
    """
    words = text.split()
    if len(words) <= max_tokens:
        return text
    return " ".join(words[:max_tokens])


def build_context(
    primary: Optional[Dict[str, str]],
    retrieved: Iterable[Dict[str, str]],
    max_tokens: int,
) -> Optional[str]:
    """
    Join document text into one context block.

    Args:
        primary: Session-linked document ({"name", "content"}), placed first
        retrieved: Documents from similarity search, best match first
        max_tokens: Context budget

    Returns:
        Context string, or None when no document has content
    """
    documents = []
    if primary is not None:
        documents.append(primary)
    documents.extend(retrieved)

    blocks = []
    for document in documents:
        content = (document.get("content") or "").strip()
        if not content:
            continue
        blocks.append(f"Document: {document.get('name') or 'Untitled Document'}\n{content}")

    if not blocks:
        return None

    context = "\n\n".join(blocks)
    if estimate_tokens(context) > max_tokens:
        logger.debug(f"Context truncated to {max_tokens} tokens")
        context = truncate_to_tokens(context, max_tokens)
    return context


def format_history(history: Sequence[Dict[str, str]], max_tokens: int) -> str:
    """
    Render chat history newest-first within a token budget.

    Messages are taken from the end until the next one would exceed the
    budget; the kept lines are returned in chronological order.
    """
    lines: List[str] = []
    used = 0

    for message in reversed(history):
        label = ROLE_LABELS.get(message.get("role"))
        if label is None:
            continue

        line = f"{label}: {message.get('content', '')}\n"
        tokens = estimate_tokens(line)
        if used + tokens > max_tokens:
            logger.debug("History truncated due to length")
            break

        lines.append(line)
        used += tokens

    lines.reverse()
    return "".join(lines)


def construct_prompt(
    query: str,
    history: Sequence[Dict[str, str]],
    context: Optional[str],
    max_history_tokens: int = 1000,
    max_context_tokens: int = 1500,
) -> str:
    """
    Assemble the final prompt for the writing assistant.

    Args:
        query: The user's new message
        history: Prior messages, oldest first, as {"role", "content"}
        context: Retrieved context (see build_context) or None
        max_history_tokens: History budget
        max_context_tokens: Context budget

    Returns:
        Prompt text
    """
    parts = []

    if context:
        if estimate_tokens(context) > max_context_tokens:
            context = truncate_to_tokens(context, max_context_tokens)
        parts.append(f"Relevant Context:\n{context}\n\n---\n\n")

    parts.append("Chat History (Recent first):\n")
    parts.append(format_history(history, max_history_tokens))
    parts.append("\n---\n\n")

    parts.append(f"User Query:\n{query}\n\nAssistant Response:")

    prompt = "".join(parts)
    logger.debug(f"Prompt constructed ({estimate_tokens(prompt)} tokens estimated)")
    return prompt
