"""Typed command values.

Each command is an immutable value that knows how to render itself as game
text and which registers it reads and writes. Kernels return ordered lists of
these; the pack writer renders them and the scoreboard machine executes them.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from fractions import Fraction
from typing import Union

from .fixedpoint import format_coordinate, format_decimal
from .protocol import HEAD_SLOT, MARKER_ENTITY, MARKER_NBT

_OBJECTIVE_RE = re.compile(r"^[A-Za-z0-9_.+-]{1,16}$")
_PLAYER_RE = re.compile(r"^[A-Za-z0-9_.+$#-]{1,40}$")
_TAG_RE = re.compile(r"^[A-Za-z0-9_.+-]+$")
_RESOURCE_RE = re.compile(r"^[a-z0-9_.-]+:[a-z0-9_./-]+$")

OPERATIONS = ("=", "+=", "-=", "*=", "/=", "%=")
COMPARISONS = ("<", ">")
SCHEDULE_MODES = ("append", "replace")

Scale = Union[int, Fraction]


def _check(pattern: re.Pattern, value: str, what: str) -> None:
    if not isinstance(value, str) or not pattern.match(value):
        raise ValueError(f"Invalid {what}: {value!r}")


@dataclass(frozen=True)
class Register:
    """A named integer cell: a fake player on a scoreboard objective."""

    name: str
    objective: str

    def __post_init__(self) -> None:
        _check(_PLAYER_RE, self.name, "register name")
        _check(_OBJECTIVE_RE, self.objective, "objective")

    def __str__(self) -> str:
        return f"{self.name} {self.objective}"


class Command:
    """Base class. Subclasses are frozen dataclasses."""

    def render(self) -> str:
        raise NotImplementedError

    def reads(self) -> frozenset[Register]:
        return frozenset()

    def writes(self) -> frozenset[Register]:
        return frozenset()

    def children(self) -> tuple[Command, ...]:
        return ()


@dataclass(frozen=True)
class CreateObjective(Command):
    objective: str

    def __post_init__(self) -> None:
        _check(_OBJECTIVE_RE, self.objective, "objective")

    def render(self) -> str:
        return f"scoreboard objectives add {self.objective} dummy"


@dataclass(frozen=True)
class RemoveObjective(Command):
    objective: str

    def __post_init__(self) -> None:
        _check(_OBJECTIVE_RE, self.objective, "objective")

    def render(self) -> str:
        return f"scoreboard objectives remove {self.objective}"


@dataclass(frozen=True)
class SetScore(Command):
    target: Register
    value: int

    def render(self) -> str:
        return f"scoreboard players set {self.target} {int(self.value)}"

    def writes(self) -> frozenset[Register]:
        return frozenset({self.target})


@dataclass(frozen=True)
class AddScore(Command):
    """Add a literal. Negative literals render as ``remove``."""

    target: Register
    value: int

    def render(self) -> str:
        if self.value < 0:
            return f"scoreboard players remove {self.target} {-int(self.value)}"
        return f"scoreboard players add {self.target} {int(self.value)}"

    def reads(self) -> frozenset[Register]:
        return frozenset({self.target})

    def writes(self) -> frozenset[Register]:
        return frozenset({self.target})


@dataclass(frozen=True)
class Operation(Command):
    """``target op source`` between two registers."""

    target: Register
    op: str
    source: Register

    def __post_init__(self) -> None:
        if self.op not in OPERATIONS:
            raise ValueError(f"Unsupported operation: {self.op!r}")

    def render(self) -> str:
        return f"scoreboard players operation {self.target} {self.op} {self.source}"

    def reads(self) -> frozenset[Register]:
        if self.op == "=":
            return frozenset({self.source})
        return frozenset({self.target, self.source})

    def writes(self) -> frozenset[Register]:
        return frozenset({self.target})


@dataclass(frozen=True)
class ReadAxis(Command):
    """Store the executing entity's position axis, times ``scale``, into a register."""

    target: Register
    axis: int
    scale: Scale

    def render(self) -> str:
        return (
            f"execute store result score {self.target} run "
            f"data get entity @s Pos[{self.axis}] {format_decimal(self.scale)}"
        )

    def writes(self) -> frozenset[Register]:
        return frozenset({self.target})


@dataclass(frozen=True)
class WriteAxis(Command):
    """Write a register, times ``scale``, into the executing entity's position axis."""

    axis: int
    source: Register
    scale: Scale

    def render(self) -> str:
        return (
            f"execute store result entity @s Pos[{self.axis}] double "
            f"{format_decimal(self.scale)} run scoreboard players get {self.source}"
        )

    def reads(self) -> frozenset[Register]:
        return frozenset({self.source})


@dataclass(frozen=True)
class IfScore(Command):
    """Run ``then`` only when ``register comparison value`` holds (strictly)."""

    register: Register
    comparison: str
    value: int
    then: Command

    def __post_init__(self) -> None:
        if self.comparison not in COMPARISONS:
            raise ValueError(f"Unsupported comparison: {self.comparison!r}")

    def render(self) -> str:
        if self.comparison == "<":
            rng = f"..{self.value - 1}"
        else:
            rng = f"{self.value + 1}.."
        return f"execute if score {self.register} matches {rng} run {self.then.render()}"

    def reads(self) -> frozenset[Register]:
        return frozenset({self.register})

    def children(self) -> tuple[Command, ...]:
        return (self.then,)


@dataclass(frozen=True)
class AsMarkers(Command):
    """Run ``then`` once per entity carrying ``tag``, as that entity."""

    tag: str
    then: Command

    def __post_init__(self) -> None:
        _check(_TAG_RE, self.tag, "entity tag")

    def render(self) -> str:
        return f"execute as @e[tag={self.tag}] run {self.then.render()}"

    def children(self) -> tuple[Command, ...]:
        return (self.then,)


@dataclass(frozen=True)
class RunFunction(Command):
    function: str

    def __post_init__(self) -> None:
        _check(_RESOURCE_RE, self.function, "function id")

    def render(self) -> str:
        return f"function {self.function}"


@dataclass(frozen=True)
class Schedule(Command):
    function: str
    ticks: int
    mode: str = "append"

    def __post_init__(self) -> None:
        _check(_RESOURCE_RE, self.function, "function id")
        if self.mode not in SCHEDULE_MODES:
            raise ValueError(f"Unsupported schedule mode: {self.mode!r}")
        if self.ticks < 1:
            raise ValueError(f"Schedule delay must be at least one tick, got {self.ticks}")

    def render(self) -> str:
        return f"schedule function {self.function} {self.ticks}t {self.mode}"


@dataclass(frozen=True)
class SummonMarker(Command):
    x: float
    y: float
    z: float
    tag: str

    def __post_init__(self) -> None:
        _check(_TAG_RE, self.tag, "entity tag")

    def render(self) -> str:
        nbt = MARKER_NBT[:-1] + f',Tags:["{self.tag}"]}}'
        pos = " ".join(format_coordinate(v) for v in (self.x, self.y, self.z))
        return f"summon {MARKER_ENTITY} {pos} {nbt}"


@dataclass(frozen=True)
class KillSelf(Command):
    def render(self) -> str:
        return "kill @s"


@dataclass(frozen=True)
class SetHeadItem(Command):
    item: str

    def __post_init__(self) -> None:
        _check(_RESOURCE_RE, self.item, "item id")

    def render(self) -> str:
        return f'data modify entity @s {HEAD_SLOT} set value {{id:"{self.item}",Count:1b}}'


@dataclass(frozen=True)
class PlaySound(Command):
    """Play a sound at the nearest player."""

    sound: str
    volume: float = 1
    pitch: float = 1

    def __post_init__(self) -> None:
        _check(_RESOURCE_RE, self.sound, "sound id")

    def render(self) -> str:
        return (
            f"execute as @p at @s run playsound {self.sound} block @s ~ ~ ~ "
            f"{format_decimal(self.volume)} {format_decimal(self.pitch)}"
        )


def render_function(commands: list[Command]) -> str:
    return "".join(c.render() + "\n" for c in commands)
