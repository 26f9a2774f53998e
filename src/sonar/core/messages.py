"""
Message classes for representing command calls and their results.
"""

import re
from dataclasses import dataclass
from typing import Optional

from src.sonar.core.constants import (
    COMMAND_END,
    COMMAND_START,
    ERROR_PREFIX,
    STDIN_SEPARATOR,
    SUCCESS_PREFIX,
)


@dataclass
class ParsedCommand:
    """
    Represents a parsed command with name, parameters, and optional data.
    """

    name: str
    parameters: str
    data: Optional[str] = None


class ContentBlock:
    """Base class for content exchanged with the tool host."""

    def __str__(self) -> str:
        return self.model_text()

    def model_text(self) -> str:
        raise NotImplementedError("Subclasses must implement model_text")

    def display_text(self) -> str:
        """Returns text suitable for display to the user."""
        return self.model_text()


class CommandCall(ContentBlock):
    """Represents a command call, including its start and end markers."""

    def __init__(self, content: str):
        self.content = content

    def model_text(self) -> str:
        return self.content


def _escape_special_chars(content: str) -> str:
    r"""
    Replace special command characters with their escaped unicode representation.

    Args:
        content: The content to process

    Returns:
        Content with special characters replaced by \u{hex} sequences
    """

    def escape_special_chars(match):
        return f"\\u{ord(match.group(0)):x}"

    special_chars = "".join(
        [COMMAND_START, COMMAND_END, STDIN_SEPARATOR, ERROR_PREFIX, SUCCESS_PREFIX]
    )
    pattern = f"[{re.escape(special_chars)}]"

    return re.sub(pattern, escape_special_chars, content)


class CommandResult(ContentBlock):
    """Represents a command result content block."""

    def __init__(
        self,
        content: str,
        success: bool,
        error: Optional[Exception] = None,
        command_call: Optional[ParsedCommand] = None,
    ):
        self.content = content
        self.success = success
        self.error = error
        self.command_call = command_call

    def model_text(self) -> str:
        prefix = SUCCESS_PREFIX if self.success else ERROR_PREFIX
        # Escape the content before formatting it in the output string
        escaped_content = _escape_special_chars(str(self.content))
        return f"{prefix}{escaped_content}{COMMAND_END}"

    def display_text(self) -> str:
        """Returns the raw report content for rendering."""
        return str(self.content)
