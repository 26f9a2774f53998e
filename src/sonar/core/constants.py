"""
Constants used throughout the Sonar application.
"""

# Special delimiter constants for command calls and results
COMMAND_START = "▶"
COMMAND_END = "■"
STDIN_SEPARATOR = "｜"
ERROR_PREFIX = "❌"
SUCCESS_PREFIX = "✅"

# Text returned when the language client cannot answer queries yet
NOT_READY_MESSAGE = "Error: Language client is not ready"

# Literal prefix of every list truncation marker in reports
TRUNCATION_MARKER = "... and {count} more"
