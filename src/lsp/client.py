"""
LSP client for code navigation features.

Provides a streamlined interface for connecting to a language server over TCP
and querying code intelligence like definitions, references, symbols and
call/type hierarchies. Implements the CapabilityProvider interface.
"""

import json
import logging
import os
import socket
import threading
import time
from typing import Any, Dict, List, Optional

# Internal imports
from .server import create_lsp_server, LSPServer
from .provider import CapabilityProvider, LSPRequestError
from .models import (
    LspPosition, LspRange, LspLocation, LspHover,
    LspSymbol, LspSymbolInformation, LspHierarchyItem,
    LspIncomingCall, LspOutgoingCall,
)
from src.utils.uris import path_to_uri, uri_to_path

# Configure logging
logger = logging.getLogger(__name__)

# Set a default level for this module
if logger.level == logging.NOTSET:  # Only set level if not already configured
    logger.setLevel(logging.INFO)

# Language identifiers sent with textDocument/didOpen
LANGUAGE_IDS = {
    ".py": "python",
    ".pyi": "python",
    ".c": "c",
    ".h": "cpp",
    ".hh": "cpp",
    ".hpp": "cpp",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".js": "javascript",
    ".ts": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
}

# JSON-RPC error code for unsupported server->client requests
METHOD_NOT_FOUND = -32601


class LSPClient(CapabilityProvider):
    """Client for Language Server Protocol.

    Provides core code navigation capabilities:
    - Hover, definition, type definition, declaration, implementation
    - References
    - Document and workspace symbols
    - Call and type hierarchies
    - Document synchronization
    """

    def __init__(
        self,
        root_uri: Optional[str] = None,
        request_timeout: float = 10.0,
        server: Optional[LSPServer] = None,
    ):
        """Initialize LSP client."""
        self._root_uri = root_uri
        self._request_timeout = request_timeout
        self._server = server

        # Socket connection
        self._socket = None

        # State tracking
        self._initialized = False
        self._running = False
        self._reader_thread = None
        self._pending_requests = {}
        self._next_request_id = 1
        self._lock = threading.Lock()
        self._open_documents = set()

        # Progress tracking
        self._progress_tokens = set()

    def connect(self, host: str, port: int) -> bool:
        """Connect to an LSP server and initialize the session."""
        try:
            self._cleanup_connection()

            logger.info(f"Attempting to connect to LSP server at {host}:{port}")
            self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._socket.settimeout(5.0)  # Connection timeout
            self._socket.connect((host, port))

            self._socket.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            self._socket.settimeout(None)

            logger.info(f"Socket connected to LSP server at {host}:{port}")

            self._running = True
            self._start_reader_thread()

            init_result = self._initialize()
            if init_result:
                logger.info("LSP connection initialized successfully")
            else:
                logger.error("LSP initialization failed")
                self._cleanup_connection()

            return init_result

        except socket.timeout:
            logger.error(f"Timeout connecting to LSP server at {host}:{port}")
            return False
        except ConnectionRefusedError:
            logger.error(f"Connection refused by LSP server at {host}:{port}")
            return False
        except OSError as e:
            logger.error(f"Failed to connect to LSP server: {str(e)}")
            return False

    def is_ready(self) -> bool:
        """Whether the handshake completed and the connection is still open."""
        return self._initialized and self._socket is not None

    def _cleanup_connection(self):
        """Release socket and thread resources."""
        self._running = False

        if self._socket:
            try:
                self._socket.close()
            except OSError as e:
                logger.debug(f"Error closing socket: {e}")
            self._socket = None

        self._initialized = False
        self._open_documents.clear()

        # Wait briefly for reader thread to clean up
        if self._reader_thread and self._reader_thread.is_alive():
            time.sleep(0.2)

    def _initialize(self) -> bool:
        """Perform LSP initialization handshake."""
        workspace_folders = None
        if self._root_uri:
            name = os.path.basename(uri_to_path(self._root_uri).rstrip(os.sep)) or self._root_uri
            workspace_folders = [{"uri": self._root_uri, "name": name}]

        params = {
            "processId": os.getpid(),
            "clientInfo": {
                "name": "sonar",
                "version": "1.0.0",
            },
            "rootUri": self._root_uri,
            "capabilities": {
                # Only request capabilities we actually use
                "textDocument": {
                    "synchronization": {"didSave": False},
                    "hover": {"contentFormat": ["markdown", "plaintext"]},
                    "definition": {"linkSupport": True},
                    "typeDefinition": {"linkSupport": True},
                    "declaration": {"linkSupport": True},
                    "implementation": {"linkSupport": True},
                    "references": {},
                    "documentSymbol": {"hierarchicalDocumentSymbolSupport": True},
                    "callHierarchy": {},
                    "typeHierarchy": {},
                },
                "workspace": {
                    "symbol": {},
                    "workspaceFolders": True,
                    "configuration": True,
                },
                "window": {"workDoneProgress": True},
            },
            "workspaceFolders": workspace_folders,
        }

        logger.info("Initializing LSP server connection (with extended timeout)")
        response = self.send_request(
            "initialize", params, timeout=30.0, allow_uninitialized=True
        )

        if not response:
            logger.error("Invalid initialization response: None")
            return False

        if "error" in response:
            error = response["error"] or {}
            error_msg = error.get('message', 'Unknown error')
            logger.error(f"LSP initialization error: {error_msg}")
            return False

        result = response.get("result") or {}
        capabilities = result.get("capabilities", {})

        capability_list = list(capabilities.keys())
        if capability_list:
            logger.info(f"Server capabilities received: {', '.join(capability_list)}")
        else:
            logger.warning("Server returned no capabilities")

        # Send initialized notification to complete handshake
        if not self._send_notification("initialized", {}):
            logger.error("Failed to send 'initialized' notification")
            return False

        logger.info("LSP server initialized successfully")
        self._initialized = True
        return True

    def shutdown(self) -> None:
        """Terminate LSP session and clean up resources."""
        if self._initialized:
            logger.info("Shutting down LSP session")

            try:
                self.send_request("shutdown", {})
                self._send_notification("exit", {})
            except OSError as e:
                logger.error(f"Error during shutdown: {e}")

        self._cleanup_connection()
        if self._reader_thread:
            self._reader_thread.join(timeout=2.0)
            self._reader_thread = None

        if self._server:
            self._server.shutdown()
            self._server = None

        logger.info("LSP session shut down")

    def send_request(
        self, method: str, params: Dict[str, Any], timeout: float = 10.0, allow_uninitialized: bool = False
    ) -> Optional[Dict[str, Any]]:
        """Send a request to the LSP server and wait for the response.

        Args:
            method: The LSP method to call
            params: Parameters for the request
            timeout: Maximum time to wait for response in seconds
            allow_uninitialized: Whether to allow sending request when not initialized

        Returns:
            The response from the server or None if the request failed
        """
        if not self._socket:
            logger.error(f"Cannot send request {method}: No connection")
            return None

        if not self._initialized and not allow_uninitialized:
            logger.error(f"Cannot send request {method}: Connection not initialized")
            return None

        # Set up synchronization primitives
        response_event = threading.Event()
        response_container = [None]  # Using list as mutable container

        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._pending_requests[request_id] = (response_event, response_container)

        message = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params
        }

        logger.debug(f"Preparing request {request_id}: {method} (timeout: {timeout}s)")

        if not self._send_message(message):
            logger.error(f"Failed to send {method} request to server")
            with self._lock:
                self._pending_requests.pop(request_id, None)
            return None

        start_time = time.time()
        received = response_event.wait(timeout)
        with self._lock:
            self._pending_requests.pop(request_id, None)

        if received:
            return response_container[0]

        elapsed = time.time() - start_time
        logger.error(f"{method} request (id={request_id}) timed out after {elapsed:.1f} seconds")
        return None

    def _request(self, method: str, params: Dict[str, Any]) -> Any:
        """Send a request and return its result payload.

        Raises:
            LSPRequestError: If the client is not ready, the request times out
                or the server answers with an error
        """
        if not self.is_ready():
            raise LSPRequestError(f"Cannot send {method}: LSP not initialized")

        response = self.send_request(method, params, timeout=self._request_timeout)
        if response is None:
            raise LSPRequestError(f"No response from language server for {method}")

        if "error" in response:
            error = response["error"] or {}
            raise LSPRequestError(
                f"{method} failed: {error.get('message', 'Unknown error')} (code {error.get('code')})"
            )

        return response.get("result")

    def _send_notification(self, method: str, params: Dict[str, Any]) -> bool:
        """Send notification without expecting a response."""
        notification = {"jsonrpc": "2.0", "method": method, "params": params}

        return self._send_message(notification)

    def _send_response(self, request_id: Any, result: Any = None, error: Optional[Dict[str, Any]] = None) -> bool:
        """Answer a request initiated by the server."""
        message = {"jsonrpc": "2.0", "id": request_id}
        if error is not None:
            message["error"] = error
        else:
            message["result"] = result
        return self._send_message(message)

    def _send_message(self, message: Dict[str, Any]) -> bool:
        """Encode and send a message to the server.

        Args:
            message: The message to send

        Returns:
            True if the message was sent successfully, False otherwise
        """
        if not self._socket:
            logger.error("Cannot send message: Not connected to LSP server")
            return False

        message_id = message.get("id", "(notification)")
        method = message.get("method", "response")
        logger.debug(f"Sending message {message_id} method={method}")

        content_bytes = json.dumps(message).encode("utf-8")
        header_bytes = f"Content-Length: {len(content_bytes)}\r\n\r\n".encode("ascii")

        try:
            self._socket.sendall(header_bytes + content_bytes)
            logger.debug(f"Message {message_id} sent successfully")
            return True
        except ConnectionResetError:
            logger.error("Connection reset by server while sending message")
            self._socket = None
            return False
        except BrokenPipeError:
            logger.error("Broken pipe while sending message - server may have disconnected")
            self._socket = None
            return False
        except OSError as e:
            logger.error(f"Socket error while sending message: {e}")
            self._socket = None
            return False

    def _start_reader_thread(self):
        """Launch background thread for message processing."""
        def reader_func():
            """Thread function that reads messages from the socket."""
            buffer = bytearray()

            try:
                while self._running:
                    sock = self._socket
                    if not sock:
                        logger.error("Reader thread: socket is closed")
                        break

                    # Add timeout to make the thread responsive to shutdown requests
                    sock.settimeout(0.5)

                    try:
                        data = sock.recv(4096)

                        if not data:
                            logger.warning("Connection closed by server (empty data received)")
                            break

                        buffer.extend(data)
                        buffer = self._process_buffer(buffer)

                    except socket.timeout:
                        continue
                    except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError) as e:
                        if self._running:
                            logger.error(f"Connection error: {e}")
                        break
                    except OSError as e:
                        if self._running:
                            logger.error(f"Error in reader thread: {e}")
                        break
            finally:
                logger.info("Reader thread exiting")
                self._running = False

        self._reader_thread = threading.Thread(
            target=reader_func,
            daemon=True,
            name="lsp-reader-thread"
        )
        self._reader_thread.start()

    def _process_buffer(self, buffer: bytearray) -> bytearray:
        """Extract complete LSP messages from the buffer and process them."""
        remaining_buffer = buffer

        while True:
            header_sep = b'\r\n\r\n'
            if header_sep not in remaining_buffer:
                break

            header, rest = remaining_buffer.split(header_sep, 1)

            content_length = None
            for line in header.decode('ascii', errors='replace').splitlines():
                if line.lower().startswith('content-length:'):
                    try:
                        content_length = int(line.split(':', 1)[1].strip())
                        break
                    except (ValueError, IndexError):
                        pass

            if content_length is None:
                logger.error("No valid Content-Length header found")
                # Skip this malformed header and try to resync
                remaining_buffer = bytearray(rest)
                continue

            if len(rest) < content_length:
                # Incomplete message, wait for more data
                break

            content = rest[:content_length]
            remaining_buffer = bytearray(rest[content_length:])

            try:
                message = json.loads(content.decode('utf-8'))
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.error(f"Invalid JSON in message content: {bytes(content[:100])!r}...")
                continue

            # Batches and bare values are not valid LSP messages
            if not isinstance(message, dict):
                logger.error(f"Ignoring non-object JSON-RPC message: {bytes(content[:100])!r}")
                continue

            self._handle_message(message)

        return remaining_buffer

    def _handle_message(self, message: Dict[str, Any]) -> None:
        """Route incoming messages to appropriate handlers."""
        # Responses to pending requests
        if "id" in message and ("result" in message or "error" in message):
            request_id = message["id"]
            with self._lock:
                pending = self._pending_requests.get(request_id)
            if pending:
                logger.debug(f"Received response for request {request_id}")
                pending[1][0] = message
                pending[0].set()
            else:
                logger.warning(f"Received response for unknown request ID: {request_id}")

        # Server notifications
        elif "method" in message and "id" not in message:
            self._handle_notification(message.get("method", "unknown"), message.get("params") or {})

        # Server requests
        elif "method" in message and "id" in message:
            self._handle_server_request(message["id"], message["method"], message.get("params") or {})

        else:
            logger.warning(f"Received unrecognized message format: {list(message.keys())}")

    def _handle_notification(self, method: str, params: Dict[str, Any]) -> None:
        """Log server notifications."""
        logger.debug(f"Received notification: {method}")

        # Map LSP message types to Python logging levels
        level_map = {1: logging.ERROR, 2: logging.WARNING, 3: logging.INFO, 4: logging.DEBUG}

        if method == "window/logMessage":
            level = level_map.get(params.get("type", 3), logging.INFO)
            logger.log(level, f"[LSP Server] {params.get('message', '')}")

        elif method == "window/showMessage":
            level = level_map.get(params.get("type", 3), logging.INFO)
            logger.log(level, f"[LSP Message] {params.get('message', '')}")

        elif method == "$/progress":
            token = params.get("token", "")
            value = params.get("value") or {}
            kind = value.get("kind")
            title = value.get("title", "")
            text = value.get("message", "")
            percentage = value.get("percentage")
            percentage_str = f" ({percentage}%)" if percentage is not None else ""

            if kind == "begin":
                logger.info(f"[LSP Progress] Started: {title}")
                if text:
                    logger.info(f"[LSP Progress]   {text}{percentage_str}")
            elif kind == "report":
                logger.info(f"[LSP Progress] {text or title}{percentage_str}")
            elif kind == "end":
                logger.info(f"[LSP Progress] Completed: {text or title}")
                self._progress_tokens.discard(token)

    def _handle_server_request(self, request_id: Any, method: str, params: Dict[str, Any]) -> None:
        """Answer requests the server sends to the client."""
        logger.debug(f"Received server request: {method}")

        if method == "window/workDoneProgress/create":
            self._progress_tokens.add(params.get("token", ""))
            self._send_response(request_id, None)
        elif method == "workspace/configuration":
            # No client-side settings: one null per requested section
            self._send_response(request_id, [None] * len(params.get("items", [])))
        elif method in ("client/registerCapability", "client/unregisterCapability"):
            self._send_response(request_id, None)
        elif method == "workspace/workspaceFolders":
            folders = None
            if self._root_uri:
                folders = [{"uri": self._root_uri, "name": os.path.basename(uri_to_path(self._root_uri))}]
            self._send_response(request_id, folders)
        else:
            logger.warning(f"Received server request (not implemented): {method}")
            self._send_response(
                request_id,
                error={"code": METHOD_NOT_FOUND, "message": f"Unsupported method: {method}"},
            )

    def did_open(self, uri: str) -> None:
        """Send textDocument/didOpen for a file the first time it is queried."""
        if uri in self._open_documents:
            return

        path = uri_to_path(uri)
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()
        except OSError as e:
            # The server may still answer from its own index
            logger.debug(f"Not opening {uri}: {e}")
            return

        language_id = LANGUAGE_IDS.get(os.path.splitext(path)[1].lower(), "plaintext")
        params = {
            "textDocument": {
                "uri": uri,
                "languageId": language_id,
                "version": 1,
                "text": text,
            }
        }
        if self._send_notification("textDocument/didOpen", params):
            self._open_documents.add(uri)

    def _position_request(
        self, method: str, uri: str, position: LspPosition, extra: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Issue a request addressed by document URI and position."""
        if self.is_ready():
            self.did_open(uri)

        params = {
            "textDocument": {"uri": uri},
            "position": {"line": position.line, "character": position.character},
        }
        if extra:
            params.update(extra)

        return self._request(method, params)

    def get_hover(self, uri: str, position: LspPosition) -> Optional[LspHover]:
        """Get hover information for symbol at position."""
        result = self._position_request("textDocument/hover", uri, position)
        if not isinstance(result, dict) or "contents" not in result:
            return None

        range_data = result.get("range")
        return LspHover(
            contents=self._extract_hover_text(result.get("contents")),
            range=self._convert_range(range_data) if range_data else None,
        )

    def get_definition(self, uri: str, position: LspPosition) -> List[LspLocation]:
        """Find definition locations for symbol at position."""
        return self._convert_locations(
            self._position_request("textDocument/definition", uri, position)
        )

    def get_type_definition(self, uri: str, position: LspPosition) -> List[LspLocation]:
        return self._convert_locations(
            self._position_request("textDocument/typeDefinition", uri, position)
        )

    def get_declaration(self, uri: str, position: LspPosition) -> List[LspLocation]:
        return self._convert_locations(
            self._position_request("textDocument/declaration", uri, position)
        )

    def get_implementation(self, uri: str, position: LspPosition) -> List[LspLocation]:
        return self._convert_locations(
            self._position_request("textDocument/implementation", uri, position)
        )

    def get_references(
        self, uri: str, position: LspPosition, include_declaration: bool = True
    ) -> List[LspLocation]:
        """Find references to the symbol at position."""
        return self._convert_locations(
            self._position_request(
                "textDocument/references", uri, position,
                extra={"context": {"includeDeclaration": include_declaration}},
            )
        )

    def get_document_symbols(self, uri: str) -> List[LspSymbol]:
        """Get the symbol outline of a document."""
        if self.is_ready():
            self.did_open(uri)

        result = self._request("textDocument/documentSymbol", {"textDocument": {"uri": uri}})
        if not isinstance(result, list):
            return []
        return [self._convert_document_symbol(item) for item in result if isinstance(item, dict)]

    def get_workspace_symbols(self, query: str) -> List[LspSymbolInformation]:
        """Search symbols across the workspace."""
        result = self._request("workspace/symbol", {"query": query})
        if not isinstance(result, list):
            return []
        return [self._convert_symbol_information(item) for item in result if isinstance(item, dict)]

    def prepare_call_hierarchy(self, uri: str, position: LspPosition) -> List[LspHierarchyItem]:
        return self._convert_hierarchy_items(
            self._position_request("textDocument/prepareCallHierarchy", uri, position)
        )

    def get_call_hierarchy_incoming_calls(self, item: LspHierarchyItem) -> List[LspIncomingCall]:
        result = self._request("callHierarchy/incomingCalls", {"item": self._hierarchy_item_payload(item)})
        if not isinstance(result, list):
            return []
        return [
            LspIncomingCall(
                from_item=self._convert_hierarchy_item(call.get("from", {})),
                from_ranges=[self._convert_range(r) for r in call.get("fromRanges", [])],
            )
            for call in result if isinstance(call, dict)
        ]

    def get_call_hierarchy_outgoing_calls(self, item: LspHierarchyItem) -> List[LspOutgoingCall]:
        result = self._request("callHierarchy/outgoingCalls", {"item": self._hierarchy_item_payload(item)})
        if not isinstance(result, list):
            return []
        return [
            LspOutgoingCall(
                to=self._convert_hierarchy_item(call.get("to", {})),
                from_ranges=[self._convert_range(r) for r in call.get("fromRanges", [])],
            )
            for call in result if isinstance(call, dict)
        ]

    def prepare_type_hierarchy(self, uri: str, position: LspPosition) -> List[LspHierarchyItem]:
        return self._convert_hierarchy_items(
            self._position_request("textDocument/prepareTypeHierarchy", uri, position)
        )

    def get_type_hierarchy_supertypes(self, item: LspHierarchyItem) -> List[LspHierarchyItem]:
        return self._convert_hierarchy_items(
            self._request("typeHierarchy/supertypes", {"item": self._hierarchy_item_payload(item)})
        )

    def get_type_hierarchy_subtypes(self, item: LspHierarchyItem) -> List[LspHierarchyItem]:
        return self._convert_hierarchy_items(
            self._request("typeHierarchy/subtypes", {"item": self._hierarchy_item_payload(item)})
        )

    def _convert_position(self, pos_dict: Dict[str, Any]) -> LspPosition:
        """Convert a position dictionary to an LspPosition object."""
        if not isinstance(pos_dict, dict):
            return LspPosition(line=0, character=0)
        return LspPosition(
            line=pos_dict.get("line", 0),
            character=pos_dict.get("character", 0),
        )

    def _convert_range(self, range_dict: Dict[str, Any]) -> LspRange:
        """Convert a range dictionary to an LspRange object."""
        if not isinstance(range_dict, dict) or "start" not in range_dict or "end" not in range_dict:
            return LspRange(
                start=LspPosition(line=0, character=0),
                end=LspPosition(line=0, character=0)
            )
        return LspRange(
            start=self._convert_position(range_dict.get("start", {})),
            end=self._convert_position(range_dict.get("end", {}))
        )

    def _convert_location(self, loc_dict: Dict[str, Any]) -> Optional[LspLocation]:
        """Convert a Location or LocationLink dictionary to an LspLocation object."""
        if "targetUri" in loc_dict:
            # LocationLink
            range_data = loc_dict.get("targetRange") or loc_dict.get("targetSelectionRange")
            return LspLocation(
                uri=loc_dict.get("targetUri", ""),
                range=self._convert_range(range_data),
            )
        if "uri" in loc_dict:
            return LspLocation(
                uri=loc_dict.get("uri", ""),
                range=self._convert_range(loc_dict.get("range", {})),
            )
        return None

    def _convert_locations(self, result: Any) -> List[LspLocation]:
        """Normalize a Location | Location[] | LocationLink[] | null result."""
        if result is None:
            return []
        if isinstance(result, dict):
            result = [result]
        if not isinstance(result, list):
            logger.warning(f"Unexpected location response format: {type(result)}")
            return []

        locations = []
        for item in result:
            if not isinstance(item, dict):
                continue
            location = self._convert_location(item)
            if location is not None:
                locations.append(location)
        return locations

    def _convert_document_symbol(self, data: Dict[str, Any]) -> LspSymbol:
        """Convert a DocumentSymbol or a flat SymbolInformation to an LspSymbol."""
        if "location" in data and "range" not in data:
            symbol_range = self._convert_range((data.get("location") or {}).get("range", {}))
            return LspSymbol(
                name=data.get("name", ""),
                kind=data.get("kind", 0),
                range=symbol_range,
                selection_range=symbol_range,
                detail=data.get("containerName"),
            )

        symbol_range = self._convert_range(data.get("range", {}))
        selection = data.get("selectionRange")
        return LspSymbol(
            name=data.get("name", ""),
            kind=data.get("kind", 0),
            range=symbol_range,
            selection_range=self._convert_range(selection) if selection else symbol_range,
            detail=data.get("detail"),
            children=[
                self._convert_document_symbol(child)
                for child in data.get("children") or []
                if isinstance(child, dict)
            ],
        )

    def _convert_symbol_information(self, data: Dict[str, Any]) -> LspSymbolInformation:
        """Convert a SymbolInformation or WorkspaceSymbol dictionary."""
        location = self._convert_location(data.get("location") or {})
        if location is None:
            location = LspLocation(uri="", range=self._convert_range({}))
        return LspSymbolInformation(
            name=data.get("name", ""),
            kind=data.get("kind", 0),
            location=location,
            container_name=data.get("containerName"),
        )

    def _convert_hierarchy_item(self, data: Dict[str, Any]) -> LspHierarchyItem:
        """Convert a CallHierarchyItem or TypeHierarchyItem, keeping the raw payload."""
        symbol_range = self._convert_range(data.get("range", {}))
        selection = data.get("selectionRange")
        return LspHierarchyItem(
            name=data.get("name", ""),
            kind=data.get("kind", 0),
            uri=data.get("uri", ""),
            range=symbol_range,
            selection_range=self._convert_range(selection) if selection else symbol_range,
            detail=data.get("detail"),
            raw=dict(data),
        )

    def _convert_hierarchy_items(self, result: Any) -> List[LspHierarchyItem]:
        if not isinstance(result, list):
            return []
        return [self._convert_hierarchy_item(item) for item in result if isinstance(item, dict)]

    def _hierarchy_item_payload(self, item: LspHierarchyItem) -> Dict[str, Any]:
        """Return the payload to send back for a hierarchy item."""
        if item.raw:
            return item.raw

        def range_payload(r: LspRange) -> Dict[str, Any]:
            return {
                "start": {"line": r.start.line, "character": r.start.character},
                "end": {"line": r.end.line, "character": r.end.character},
            }

        payload = {
            "name": item.name,
            "kind": item.kind,
            "uri": item.uri,
            "range": range_payload(item.range),
            "selectionRange": range_payload(item.selection_range),
        }
        if item.detail is not None:
            payload["detail"] = item.detail
        return payload

    def _extract_hover_text(self, contents: Any) -> str:
        """Extract hover text from MarkupContent, MarkedString or a list of them."""
        if contents is None:
            return ""

        if isinstance(contents, str):
            return contents
        if isinstance(contents, dict):
            return contents.get("value", "") or ""
        if isinstance(contents, list):
            parts = [self._extract_hover_text(item) for item in contents]
            return "\n\n".join(part for part in parts if part)

        return ""


def create_lsp_client(
    language: str = "python",
    workspace: Optional[str] = None,
    server: Optional[LSPServer] = None,
) -> LSPClient:
    """Create an LSP client connected to a locally launched language server.

    The returned client owns the server and stops it on shutdown. If the
    server cannot be started the client is returned unconnected, and
    ``is_ready()`` reports False.
    """
    server = server or create_lsp_server(workspace=workspace)
    client = LSPClient(
        root_uri=path_to_uri(workspace) if workspace else None,
        server=server,
    )

    port = server.setup_local_server(language)
    if port is None:
        logger.error(f"Failed to start {language} language server")
        return client

    logger.info(f"Started {language} language server on port {port}")
    if client.connect("127.0.0.1", port):
        logger.info(f"Client connected to {language} language server")
    else:
        logger.error(f"Failed to connect client to {language} language server")

    return client
