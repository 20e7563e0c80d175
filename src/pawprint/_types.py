"""Shared type definitions for pawprint."""

from typing import Literal

# Mode of operation
type PawprintMode = Literal["dev", "build", "serve"]

# Filesystem event kinds understood by the watch dispatcher
type WatchKind = Literal["add", "change", "unlink", "addDir", "unlinkDir"]

# Route URL pattern (e.g., "/", "/blog/post", "/blog/:page")
type UrlPattern = str

# JavaScript identifier bound by a generated import or export
type Symbol = str

# SSE client identifier
type ClientID = str
