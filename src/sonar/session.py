"""
Session holding the workspace, the capability provider and the shell that
routes command statements to them.
"""

import datetime
import logging
import os
from dataclasses import dataclass, replace
from typing import Optional, TYPE_CHECKING

from src.sonar.exceptions import FatalError

# For type checking only - not imported at runtime
if TYPE_CHECKING:
    from src.lsp.provider import CapabilityProvider
    from src.sonar.shell import Shell

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    State shared by every command run in one CLI or tool-host invocation.

    Attributes:
        session_id: Identifier used in log lines
        _workspace: Root of the code being explored; relative paths resolve against it
        _provider: Capability provider answering code-intelligence queries
    """

    session_id: str
    _workspace: Optional[str] = None
    _shell: Optional["Shell"] = None
    _provider: Optional["CapabilityProvider"] = None

    @classmethod
    def builder(cls) -> "SessionBuilder":
        return SessionBuilder()

    @property
    def workspace(self) -> str:
        """The workspace root, or the current directory when none was given."""
        return self._workspace if self._workspace is not None else os.getcwd()

    @property
    def shell(self) -> "Shell":
        if self._shell is None:
            raise FatalError("Shell not available in session")
        return self._shell

    @property
    def provider(self) -> "CapabilityProvider":
        """The capability provider; a session without one cannot run queries."""
        if self._provider is None:
            raise FatalError("Capability provider not available in session")
        return self._provider


@dataclass(frozen=True)
class SessionBuilder:
    """
    Fluent, immutable builder for Session objects.

    Each setter returns a new builder, so a partially configured builder can
    be shared and extended.
    """

    _session_id: Optional[str] = None
    _workspace: Optional[str] = None
    _provider: Optional["CapabilityProvider"] = None

    def session_id(self, session_id: Optional[str]) -> "SessionBuilder":
        return replace(self, _session_id=session_id)

    def workspace(self, workspace: str) -> "SessionBuilder":
        return replace(self, _workspace=workspace)

    def provider(self, provider: "CapabilityProvider") -> "SessionBuilder":
        return replace(self, _provider=provider)

    @staticmethod
    def _default_session_id() -> str:
        now = datetime.datetime.now(datetime.timezone.utc).astimezone()
        return f"session-{now:%m%d-%H%M%S}"

    def initialize(self) -> Session:
        """Create the session and attach a shell with the built-in commands."""
        session = Session(
            session_id=self._session_id or self._default_session_id(),
            _workspace=self._workspace,
            _provider=self._provider,
        )

        from src.sonar.shell import Shell

        session._shell = Shell(session=session)
        logger.info(f"Session {session.session_id} initialized for workspace {session.workspace}")
        return session
