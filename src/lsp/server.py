"""
LSP server manager.

Launches a language server as a child process speaking JSON-RPC over stdio and
exposes it on a local TCP port, so that LSPClient can use the same socket
transport for launched servers and for servers that are already running.
"""

import logging
import os
import select
import shlex
import shutil
import socket
import subprocess
import threading
import time
from typing import Dict, List, Optional

# Configure logging
logger = logging.getLogger(__name__)

# Bytes per read on either side of the proxy
CHUNK_SIZE = 4096

# Seconds between checks of the running flag in blocking loops
POLL_INTERVAL = 0.5


class LSPServer:
    """Owns one language server process and the TCP listener in front of it."""

    # Language server command per language identifier
    SERVER_COMMANDS: Dict[str, List[str]] = {
        "python": ["pylsp"],
        "c": ["clangd"],
        "cpp": ["clangd"],
    }

    def __init__(self, workspace: Optional[str] = None):
        self._workspace = workspace
        self._process: Optional[subprocess.Popen] = None
        self._listener: Optional[socket.socket] = None
        self._port: Optional[int] = None
        self._language: Optional[str] = None
        self._running = False

    def server_command(self, language: str) -> Optional[List[str]]:
        """Return the command line used to launch the server for a language.

        SONAR_LSP_COMMAND overrides the built-in table.
        """
        override = os.environ.get("SONAR_LSP_COMMAND")
        if override:
            return shlex.split(override)
        return self.SERVER_COMMANDS.get(language.lower())

    def is_server_installed(self, language: str) -> bool:
        """Check if the language server executable is on PATH."""
        command = self.server_command(language)
        return bool(command) and shutil.which(command[0]) is not None

    def get_supported_languages(self) -> List[str]:
        return sorted(self.SERVER_COMMANDS.keys())

    def setup_local_server(self, language: str) -> Optional[int]:
        """Launch the server for ``language`` and listen on a free local port.

        A server already running for the same language is reused.

        Returns:
            The port number, or None if the server could not be started
        """
        language = language.lower()
        if self._running and self._language == language and self._alive():
            logger.info(f"Reusing {language} language server on port {self._port}")
            return self._port

        self.shutdown()

        process = self._launch(language)
        if process is None:
            return None

        try:
            listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind(("127.0.0.1", 0))
            listener.listen(1)
        except OSError as e:
            logger.error(f"Failed to open a local port for the {language} server: {e}")
            self._terminate(process)
            return None

        self._process = process
        self._listener = listener
        self._port = listener.getsockname()[1]
        self._language = language
        self._running = True

        threading.Thread(target=self._accept_loop, daemon=True, name="lsp-proxy-accept").start()
        logger.info(f"{language} language server (PID {process.pid}) proxied on port {self._port}")
        return self._port

    def _alive(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def _launch(self, language: str) -> Optional[subprocess.Popen]:
        command = self.server_command(language)
        if not command:
            logger.error(f"Unsupported language: {language}")
            return None
        if not self.is_server_installed(language):
            logger.error(f"Language server for {language} is not installed: {command[0]} not found on PATH")
            return None

        env = dict(os.environ, PYTHONUNBUFFERED="1")
        logger.info(f"Starting {language} language server: {' '.join(command)}")
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=env,
                cwd=self._workspace or None,
            )
        except OSError as e:
            logger.error(f"Failed to start {language} language server: {e}")
            return None

        if process.poll() is not None:
            logger.error(f"{language} language server exited immediately (code {process.returncode})")
            return None

        threading.Thread(
            target=self._log_stderr, args=(process,), daemon=True, name="lsp-server-stderr"
        ).start()
        return process

    @staticmethod
    def _log_stderr(process: subprocess.Popen) -> None:
        """Forward the server's stderr to the log; an undrained pipe would block it."""
        try:
            for raw in iter(process.stderr.readline, b""):
                line = raw.decode("utf-8", errors="replace").rstrip()
                if line:
                    logger.debug(f"[language server] {line}")
        except (OSError, ValueError):
            # Pipe closed by _terminate
            return

    def _accept_loop(self) -> None:
        listener = self._listener
        listener.settimeout(POLL_INTERVAL)
        while self._running:
            try:
                connection, address = listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Error accepting LSP client connection: {e}")
                break

            logger.info(f"LSP client connected from {address}")
            threading.Thread(
                target=self._proxy, args=(connection,), daemon=True, name=f"lsp-proxy-{address[1]}"
            ).start()
        logger.debug("LSP proxy accept loop exiting")

    def _proxy(self, connection: socket.socket) -> None:
        """Shuttle bytes between one client connection and the server process."""
        process = self._process
        if process is None or process.poll() is not None:
            logger.error("Cannot proxy client: language server is not running")
            connection.close()
            return

        upstream = threading.Thread(
            target=self._client_to_server, args=(connection, process), daemon=True
        )
        upstream.start()
        try:
            self._server_to_client(process, connection)
        finally:
            connection.close()
            upstream.join(timeout=1.0)
            if process.poll() is not None:
                logger.error(f"Language server exited with code {process.returncode}")
            logger.debug("LSP proxy connection closed")

    def _client_to_server(self, connection: socket.socket, process: subprocess.Popen) -> None:
        connection.settimeout(POLL_INTERVAL)
        try:
            while self._running and process.poll() is None:
                try:
                    data = connection.recv(CHUNK_SIZE)
                except socket.timeout:
                    continue
                if not data:
                    logger.debug("LSP client closed the connection")
                    break
                process.stdin.write(data)
                process.stdin.flush()
        except (OSError, ValueError) as e:
            # ValueError: write to a closed pipe during shutdown
            if self._running:
                logger.error(f"Error forwarding client data to language server: {e}")

    def _server_to_client(self, process: subprocess.Popen, connection: socket.socket) -> None:
        stdout = process.stdout
        try:
            while self._running and process.poll() is None:
                readable, _, _ = select.select([stdout], [], [], POLL_INTERVAL)
                if not readable:
                    continue
                data = stdout.read1(CHUNK_SIZE)
                if not data:
                    logger.debug("Language server closed its output")
                    break
                connection.sendall(data)
        except (OSError, ValueError) as e:
            if self._running:
                logger.error(f"Error forwarding language server output to client: {e}")

    @staticmethod
    def _terminate(process: subprocess.Popen) -> None:
        """Stop a process, escalating to kill if it does not exit promptly."""
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=1.0)
            except subprocess.TimeoutExpired:
                logger.warning("Language server did not terminate, killing it")
                process.kill()
                try:
                    process.wait(timeout=1.0)
                except subprocess.TimeoutExpired:
                    logger.error("Language server survived kill signal")

        for stream in (process.stdin, process.stdout, process.stderr):
            if stream:
                try:
                    stream.close()
                except OSError as e:
                    logger.debug(f"Error closing process stream: {e}")
        logger.info(f"Language server stopped (exit code: {process.returncode})")

    def shutdown(self) -> None:
        """Stop the server and release all resources."""
        self._running = False

        if self._listener is not None:
            try:
                self._listener.close()
            except OSError as e:
                logger.debug(f"Error closing listener: {e}")
            self._listener = None

        process, self._process = self._process, None
        if process is not None:
            logger.info("Shutting down language server")
            self._terminate(process)
            # Give proxy threads a moment to notice
            time.sleep(0.1)

        self._port = None
        self._language = None


def create_lsp_server(workspace: Optional[str] = None) -> LSPServer:
    """Create and return a new LSP server manager instance."""
    return LSPServer(workspace=workspace)
