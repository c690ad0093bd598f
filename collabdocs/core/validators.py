"""
Input Validators - Sanitization and validation utilities.

Validation helpers return (is_valid, error_message) tuples; the
services turn a failed check into a ValidationError.
"""
import re
from typing import Optional, Tuple

import markdown
from bs4 import BeautifulSoup, Comment

from collabdocs.core.logging_config import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 8000
MAX_KEYBINDING_LENGTH = 64
MAX_NAME_LENGTH = 255

VALID_ROLES = ("viewer", "editor", "owner")

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# sanitize_text
_DROPPED_TAGS = ["script", "style", "head", "title", "iframe", "noscript"]
_BLOCK_TAGS = ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "blockquote", "pre", "table", "hr"]
_LINE_TAGS = ["li", "tr"]
# Whitespace-only text directly inside these carries no meaning
_CONTAINER_TAGS = {"[document]", "ul", "ol", "blockquote", "table", "thead", "tbody", "tfoot", "tr"}
_SPACES_REGEX = re.compile(r"[ \t\xa0]+")
_BLANK_LINES_REGEX = re.compile(r"\n{3,}")


def sanitize_message(message: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """
    Sanitize a user message.

    - Removes null bytes
    - Strips leading/trailing whitespace
    - Limits length

    Inner whitespace is preserved since messages often quote
    multi-line passages from a document.
    """
    if not message:
        return ""

    cleaned = message.replace("\x00", "").strip()

    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length]

    return cleaned


def validate_message(message: str) -> Tuple[bool, str, Optional[str]]:
    """
    Full validation and sanitization of an assistant message.

    Returns:
        Tuple of (is_valid, sanitized_message, error_message)
    """
    if not message or not message.strip():
        return False, "", "Message cannot be empty"

    if len(message.strip()) > MAX_MESSAGE_LENGTH:
        return False, "", f"Message too long (max {MAX_MESSAGE_LENGTH} characters)"

    sanitized = sanitize_message(message)
    if not sanitized:
        return False, "", "Message cannot be empty after sanitization"

    return True, sanitized, None


def validate_role(role: str) -> Tuple[bool, Optional[str]]:
    """Check a permission role is one of viewer, editor, owner."""
    if role not in VALID_ROLES:
        return False, f"Invalid role: {role}. Must be one of: {', '.join(VALID_ROLES)}"
    return True, None


def validate_keybinding(keybinding: str) -> Tuple[bool, Optional[str]]:
    """Check a keybinding string such as 'Ctrl+Shift+K'."""
    if not keybinding or not keybinding.strip():
        return False, "Keybinding cannot be empty"
    if len(keybinding) > MAX_KEYBINDING_LENGTH:
        return False, f"Keybinding too long (max {MAX_KEYBINDING_LENGTH} characters)"
    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    if not email or not EMAIL_REGEX.match(email.strip()):
        return False, "Invalid email address"
    return True, None


def validate_password(password: str) -> Tuple[bool, Optional[str]]:
    if not password:
        return False, "Password cannot be empty"
    if len(password) < 4:
        return False, "Password too short (min 4 characters)"
    return True, None


def validate_name(name: str, field: str = "name") -> Tuple[bool, Optional[str]]:
    if not name or not name.strip():
        return False, f"{field.capitalize()} cannot be empty"
    if len(name) > MAX_NAME_LENGTH:
        return False, f"{field.capitalize()} too long (max {MAX_NAME_LENGTH} characters)"
    return True, None


def sanitize_text(text: str) -> str:
    """
    Strip HTML tags, HTML entities and Markdown markup from text.

    The text is rendered with Markdown first (raw HTML passes through),
    then BeautifulSoup extracts the words. Paragraphs, headings, lists
    and quotes are separated by a blank line; list items and table rows
    by a line break. Runs of spaces collapse to one.

    Example:
        >>> sanitize_text("<b>Bold</b> &amp; **markdown** text.")
        'Bold & markdown text.'
    """
    if not text:
        return ""

    rendered = markdown.markdown(text.replace("\x00", ""), extensions=["extra", "sane_lists"])
    soup = BeautifulSoup(rendered, "html.parser")

    for element in soup.find_all(_DROPPED_TAGS):
        element.decompose()

    for string in soup.find_all(string=True):
        if isinstance(string, Comment):
            string.extract()
        elif not string.strip() and "\n" in string and string.parent.name in _CONTAINER_TAGS:
            string.extract()

    for element in soup.find_all("br"):
        element.replace_with("\n")
    for element in soup.find_all(_LINE_TAGS):
        element.append("\n")
    for element in soup.find_all(["td", "th"]):
        element.append(" ")
    for element in soup.find_all(_BLOCK_TAGS):
        element.insert_before("\n\n")
        element.insert_after("\n\n")

    lines = [_SPACES_REGEX.sub(" ", line).strip() for line in soup.get_text().split("\n")]
    cleaned = _BLANK_LINES_REGEX.sub("\n\n", "\n".join(lines))

    return cleaned.strip()
