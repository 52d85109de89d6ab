"""Grapher Compile - kernels, animation and pack assembly."""
from .pack import build_pack

__all__ = ["build_pack"]
