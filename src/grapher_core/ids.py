"""3D Grapher - Deterministic Identity Functions."""
from __future__ import annotations

import base64
import hashlib
import re
import unicodedata

from .protocol import CONSTANT_PREFIX, SCRATCH_PREFIX

_PATH_RE = re.compile(r"[^a-z0-9_./-]")


def canonicalize(text: str) -> str:
    """Canonicalize a function path: NFKC, casefold, whitespace to underscores."""
    if not text:
        return ""
    t = unicodedata.normalize("NFKC", text).casefold()
    t = "_".join(t.split())
    return _PATH_RE.sub("_", t)


def _hash(b: bytes, prefix: str) -> str:
    """Compute truncated SHA-256 hash with base32 encoding."""
    h = hashlib.sha256(b).digest()[:15]
    return prefix + base64.b32encode(h).decode("ascii").lower().rstrip("=")


def function_id(namespace: str, path: str) -> str:
    """Generate a namespaced function id from a namespace and a path."""
    return f"{namespace}:{canonicalize(path)}"


def body_suffix(body: str) -> str:
    """Short content hash used to disambiguate internal functions sharing a label."""
    return _hash(body.encode("utf-8"), "")[:8]


def build_id(config_json: str) -> str:
    """Generate deterministic build ID from the canonical configuration."""
    return _hash(config_json.encode("utf-8"), "b_")


def scratch_name(index: int) -> str:
    return f"{SCRATCH_PREFIX}{index}"


def constant_name(value: int) -> str:
    return f"{CONSTANT_PREFIX}{value}"
