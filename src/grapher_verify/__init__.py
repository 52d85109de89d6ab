"""Grapher Verify - pack signature and integrity checks."""
from .logic import verify_pack

__all__ = ["verify_pack"]
