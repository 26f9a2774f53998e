"""
Conversions between filesystem paths and document URIs.
"""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname


def path_to_uri(path: str) -> str:
    """Convert a filesystem path to an absolute ``file://`` URI."""
    return Path(os.path.abspath(os.path.expanduser(path))).as_uri()


def uri_to_path(uri: str) -> str:
    """Convert a ``file://`` URI to a filesystem path.

    URIs with any other scheme are returned unchanged.
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return uri
    return url2pathname(parsed.path)


def to_uri(path_or_uri: str, workspace: Optional[str] = None) -> str:
    """Resolve user input to a document URI.

    Accepts an existing URI, an absolute path, or a path relative to the
    workspace.
    """
    if "://" in path_or_uri:
        return path_or_uri
    path = os.path.expanduser(path_or_uri)
    if not os.path.isabs(path) and workspace:
        path = os.path.join(workspace, path)
    return path_to_uri(path)
