import pytest

from collabdocs.core.validators import (
    MAX_KEYBINDING_LENGTH,
    sanitize_text,
    validate_email,
    validate_keybinding,
    validate_message,
    validate_password,
    validate_role,
)


# ============= sanitize_text =============


def test_sanitize_strips_inline_html_and_markdown():
    assert sanitize_text("<b>Bold</b> &amp; **markdown** text.") == "Bold & markdown text."


def test_sanitize_block_tags_become_line_breaks():
    assert sanitize_text("<p>First</p><p>Second</p>") == "First\n\nSecond"


def test_sanitize_drops_scripts():
    assert sanitize_text("Hello<script>alert(1)</script> world") == "Hello world"


def test_sanitize_markdown_structure():
    text = "# Title\n\n- item one\n- [a link](http://example.com)\n\n> quoted `code`"

    assert sanitize_text(text) == "Title\n\nitem one\na link\n\nquoted code"


def test_sanitize_keeps_comparison_operators():
    assert sanitize_text("if a < b and c > d then stop") == "if a < b and c > d then stop"


def test_sanitize_keeps_paragraph_break_before_heading_and_quote():
    assert sanitize_text("Intro\n\n# Heading") == "Intro\n\nHeading"
    assert sanitize_text("Intro\n\n> quoted") == "Intro\n\nquoted"


def test_sanitize_code_fence_keeps_code():
    assert sanitize_text("Run this:\n\n```python\nx = 1\n```") == "Run this:\n\nx = 1"


def test_sanitize_keeps_snake_case_words():
    assert sanitize_text("use my_variable_name here") == "use my_variable_name here"


def test_sanitize_underscore_emphasis():
    assert sanitize_text("this is _important_ and __very__ so") == "this is important and very so"


def test_sanitize_empty():
    assert sanitize_text("") == ""


# ============= validation helpers =============


@pytest.mark.parametrize("role", ["viewer", "editor", "owner"])
def test_valid_roles(role):
    assert validate_role(role) == (True, None)


def test_invalid_role():
    is_valid, error = validate_role("admin")
    assert not is_valid
    assert "admin" in error


def test_keybinding_limits():
    assert validate_keybinding("Ctrl+K")[0]
    assert not validate_keybinding("   ")[0]
    assert not validate_keybinding("x" * (MAX_KEYBINDING_LENGTH + 1))[0]


def test_email_and_password():
    assert validate_email("ada@example.com")[0]
    assert not validate_email("ada-at-example")[0]
    assert validate_password("abcd")[0]
    assert not validate_password("abc")[0]


def test_validate_message_sanitizes():
    is_valid, sanitized, error = validate_message("  hello\x00 there  ")

    assert is_valid
    assert sanitized == "hello there"
    assert error is None


def test_validate_message_rejects_blank():
    is_valid, _, error = validate_message("   ")
    assert not is_valid
    assert error == "Message cannot be empty"
