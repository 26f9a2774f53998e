"""
Unit tests for command call/result content blocks.
"""

from src.sonar.core.messages import CommandCall, CommandResult


def test_result_model_text_prefixes():
    assert CommandResult("done", success=True).model_text() == "✅done■"
    assert CommandResult("bad", success=False).model_text() == "❌bad■"


def test_result_escapes_special_characters():
    text = CommandResult("a ▶ b｜c", success=True).model_text()
    assert text == "✅a \\u25b6 b\\uff5cc■"


def test_display_text_is_raw_content():
    assert CommandResult("## Heading ■", success=True).display_text() == "## Heading ■"


def test_call_text_is_verbatim():
    call = CommandCall("▶hover a.py 0 0■")
    assert call.model_text() == "▶hover a.py 0 0■"
    assert str(call) == call.display_text()
