"""Grapher Core - fixed-point registers, commands and the scoreboard machine."""
from .config import GrapherConfig, load_config
from .ids import canonicalize, function_id
from .machine import ScoreboardMachine

__all__ = ["GrapherConfig", "load_config", "canonicalize", "function_id", "ScoreboardMachine"]
