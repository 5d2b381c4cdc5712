"""
Moniker Identifier Strategy

Two identifier families:
- export identifier: human-composable "<module>:<dotted.path>"
- local identifier: opaque hash of the canonical key
  (document path, qualified name, kind)
"""

import base64
import hashlib
import json
from typing import NamedTuple

from ..domain.models import SymbolKind


class CanonicalKey(NamedTuple):
    """Identity of a non-exported declaration within its document"""

    document: str  # root-relative path
    qualified_name: str
    kind: SymbolKind

    def serialize(self) -> str:
        return json.dumps([self.document, self.qualified_name, self.kind.value], separators=(",", ":"))


def generate_export_identifier(module_path: str, dotted_path: str | None = None) -> str:
    """
    Generate an export moniker identifier.

    Examples:
    - "a:"              (module root)
    - "a:N.a"
    - "lib/a:RAL.console.warn"
    """
    return f"{module_path}:{dotted_path or ''}"


def generate_import_identifier(external_module: str, qualified_name: str) -> str:
    return f"{external_module}:{qualified_name}"


def generate_local_identifier(key: CanonicalKey, digest_bytes: int = 16) -> str:
    """
    Generate an opaque local moniker identifier.

    SHA-256 of the serialized key, truncated and base64 encoded.
    With the default 16 bytes the result is 24 characters ending in "==".
    """
    digest = hashlib.sha256(key.serialize().encode("utf-8")).digest()[:digest_bytes]
    return base64.b64encode(digest).decode("ascii")


def join_path(*segments: str) -> str:
    """Dotted path from non-empty segments"""
    return ".".join(segment for segment in segments if segment)
