"""
Core exceptions module.

This module defines custom exceptions used throughout the Sonar application.
"""

class FatalError(Exception):
    """
    A fatal error that should not be caught and converted to a CommandResult.

    These errors represent unrecoverable conditions or programming errors that
    should be propagated up the call stack rather than being handled as a
    normal command failure.
    """
    pass


class NotReadyError(Exception):
    """
    The capability provider is not initialized.

    Raised once, before any query is issued, when a report is requested from a
    provider that cannot answer yet. No partial report is produced.
    """
    pass
