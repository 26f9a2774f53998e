"""
Unit tests for the LSP client: message framing, routing and payload
conversion. No language server is started; the socket is a MagicMock.
"""

import json
import threading
from unittest.mock import MagicMock, patch

import pytest

from src.lsp.client import LSPClient, METHOD_NOT_FOUND
from src.lsp.models import LspPosition
from src.lsp.provider import LSPRequestError


def frame(message) -> bytes:
    body = json.dumps(message).encode("utf-8")
    return f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body


def sent_messages(sock: MagicMock):
    """Decode every message written to the mocked socket."""
    messages = []
    for call in sock.sendall.call_args_list:
        data = call.args[0]
        _, body = data.split(b"\r\n\r\n", 1)
        messages.append(json.loads(body.decode("utf-8")))
    return messages


@pytest.fixture
def client():
    c = LSPClient(root_uri="file:///work/project")
    c._socket = MagicMock()
    c._initialized = True
    return c


def rng(sl, sc, el, ec):
    return {"start": {"line": sl, "character": sc}, "end": {"line": el, "character": ec}}


# --- framing -----------------------------------------------------------------


def test_process_buffer_delivers_complete_messages_and_keeps_partial(client):
    event = threading.Event()
    container = [None]
    client._pending_requests[7] = (event, container)

    first = frame({"jsonrpc": "2.0", "id": 7, "result": {"ok": True}})
    second = frame({"jsonrpc": "2.0", "id": 8, "result": None})
    buffer = bytearray(first + second[:10])

    remaining = client._process_buffer(buffer)

    assert event.is_set()
    assert container[0]["result"] == {"ok": True}
    assert bytes(remaining) == second[:10]


def test_process_buffer_handles_multibyte_content(client):
    event = threading.Event()
    container = [None]
    client._pending_requests[1] = (event, container)

    remaining = client._process_buffer(bytearray(frame({"jsonrpc": "2.0", "id": 1, "result": "héllo ✓"})))

    assert remaining == bytearray()
    assert container[0]["result"] == "héllo ✓"


def test_process_buffer_skips_invalid_json(client):
    body = b"{not json"
    bad = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body
    assert client._process_buffer(bytearray(bad)) == bytearray()


@pytest.mark.parametrize("body", [b"[]", b"null", b'"text"', b"42"])
def test_process_buffer_skips_non_object_messages(client, body):
    event = threading.Event()
    container = [None]
    client._pending_requests[5] = (event, container)

    bad = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body
    buffer = bytearray(bad + frame({"jsonrpc": "2.0", "id": 5, "result": "after"}))

    assert client._process_buffer(buffer) == bytearray()
    assert event.is_set()
    assert container[0]["result"] == "after"


def test_send_message_uses_content_length_framing(client):
    assert client._send_notification("initialized", {})
    data = client._socket.sendall.call_args.args[0]
    header, body = data.split(b"\r\n\r\n", 1)
    assert header == f"Content-Length: {len(body)}".encode("ascii")
    assert json.loads(body) == {"jsonrpc": "2.0", "method": "initialized", "params": {}}


# --- routing -----------------------------------------------------------------


def test_server_configuration_request_is_answered(client):
    client._handle_message({
        "jsonrpc": "2.0", "id": 3, "method": "workspace/configuration",
        "params": {"items": [{"section": "a"}, {"section": "b"}]},
    })
    assert sent_messages(client._socket) == [{"jsonrpc": "2.0", "id": 3, "result": [None, None]}]


def test_unknown_server_request_gets_method_not_found(client):
    client._handle_message({"jsonrpc": "2.0", "id": "x", "method": "custom/thing", "params": {}})
    reply = sent_messages(client._socket)[0]
    assert reply["id"] == "x"
    assert reply["error"]["code"] == METHOD_NOT_FOUND


def test_progress_create_is_acknowledged(client):
    client._handle_message({
        "jsonrpc": "2.0", "id": 5, "method": "window/workDoneProgress/create",
        "params": {"token": "index"},
    })
    assert "index" in client._progress_tokens
    client._handle_message({
        "jsonrpc": "2.0", "method": "$/progress",
        "params": {"token": "index", "value": {"kind": "end"}},
    })
    assert "index" not in client._progress_tokens


def test_notifications_are_not_answered(client):
    client._handle_message({
        "jsonrpc": "2.0", "method": "window/logMessage", "params": {"type": 3, "message": "hi"},
    })
    client._socket.sendall.assert_not_called()


# --- requests ----------------------------------------------------------------


def test_request_raises_when_not_ready():
    c = LSPClient()
    with pytest.raises(LSPRequestError):
        c._request("textDocument/hover", {})


def test_request_raises_on_missing_response(client):
    with patch.object(client, "send_request", return_value=None):
        with pytest.raises(LSPRequestError):
            client._request("workspace/symbol", {"query": "x"})


def test_request_raises_on_error_response(client):
    response = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "internal"}}
    with patch.object(client, "send_request", return_value=response):
        with pytest.raises(LSPRequestError, match="internal"):
            client._request("workspace/symbol", {"query": "x"})


def test_empty_result_is_empty_list(client):
    with patch.object(client, "send_request", return_value={"id": 1, "result": None}):
        assert client.get_workspace_symbols("x") == []
        assert client.prepare_call_hierarchy("untitled:a", LspPosition(0, 0)) == []


def test_references_sends_declaration_context(client):
    with patch.object(client, "send_request", return_value={"id": 1, "result": []}) as send:
        client.get_references("untitled:a", LspPosition(4, 2), include_declaration=False)
    method, params = send.call_args.args[:2]
    assert method == "textDocument/references"
    assert params["position"] == {"line": 4, "character": 2}
    assert params["context"] == {"includeDeclaration": False}


def test_hierarchy_item_round_trips_raw_payload(client):
    raw = {
        "name": "bar", "kind": 6, "uri": "file:///work/a.py",
        "range": rng(1, 0, 3, 0), "selectionRange": rng(1, 4, 1, 7),
        "data": {"opaque": 42},
    }
    with patch.object(client, "send_request", return_value={"id": 1, "result": [raw]}):
        items = client.prepare_call_hierarchy("untitled:a", LspPosition(1, 5))

    with patch.object(client, "send_request", return_value={"id": 2, "result": []}) as send:
        client.get_call_hierarchy_incoming_calls(items[0])
    assert send.call_args.args[1] == {"item": raw}


# --- conversion --------------------------------------------------------------


def test_convert_locations_accepts_single_location(client):
    result = client._convert_locations({"uri": "file:///a.py", "range": rng(2, 1, 2, 5)})
    assert len(result) == 1
    assert result[0].uri == "file:///a.py"
    assert result[0].range.start == LspPosition(2, 1)


def test_convert_location_link_prefers_target_range(client):
    link = {
        "targetUri": "file:///b.py",
        "targetRange": rng(10, 0, 20, 0),
        "targetSelectionRange": rng(10, 4, 10, 9),
    }
    location = client._convert_locations([link])[0]
    assert location.uri == "file:///b.py"
    assert location.range.start == LspPosition(10, 0)


def test_convert_location_link_falls_back_to_selection_range(client):
    link = {"targetUri": "file:///b.py", "targetSelectionRange": rng(10, 4, 10, 9)}
    assert client._convert_locations([link])[0].range.start == LspPosition(10, 4)


def test_convert_locations_handles_null_and_junk(client):
    assert client._convert_locations(None) == []
    assert client._convert_locations([None, 3, {"nothing": True}]) == []


def test_convert_document_symbol_tree(client):
    data = {
        "name": "Foo", "kind": 5, "range": rng(0, 0, 10, 0), "selectionRange": rng(0, 6, 0, 9),
        "children": [{"name": "bar", "kind": 6, "range": rng(2, 4, 5, 0)}],
    }
    symbol = client._convert_document_symbol(data)
    assert symbol.name == "Foo"
    assert symbol.selection_range.start == LspPosition(0, 6)
    assert [c.name for c in symbol.children] == ["bar"]
    # Missing selectionRange falls back to the full range
    assert symbol.children[0].selection_range == symbol.children[0].range


def test_convert_symbol_information_as_flat_symbol(client):
    data = {
        "name": "helper", "kind": 12, "containerName": "utils",
        "location": {"uri": "file:///a.py", "range": rng(3, 0, 6, 0)},
    }
    symbol = client._convert_document_symbol(data)
    assert symbol.range.start == LspPosition(3, 0)
    assert symbol.children == []

    info = client._convert_symbol_information(data)
    assert info.location.uri == "file:///a.py"
    assert info.container_name == "utils"


@pytest.mark.parametrize(
    "contents,expected",
    [
        ("plain", "plain"),
        ({"kind": "markdown", "value": "**bold**"}, "**bold**"),
        ({"language": "python", "value": "def f(): ..."}, "def f(): ..."),
        (["first", {"language": "python", "value": "second"}, ""], "first\n\nsecond"),
        (None, ""),
    ],
)
def test_extract_hover_text(client, contents, expected):
    assert client._extract_hover_text(contents) == expected
