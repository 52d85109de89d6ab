"""In-memory scoreboard machine.

Executes typed commands the way the game would: scores live on objectives,
markers have positions, functions call functions, and scheduled functions
fire on later ticks. Used to evaluate kernels in tests and to trace a pack.
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from fractions import Fraction

from .commands import (
    AddScore,
    AsMarkers,
    Command,
    CreateObjective,
    IfScore,
    KillSelf,
    Operation,
    PlaySound,
    ReadAxis,
    Register,
    RemoveObjective,
    RunFunction,
    Schedule,
    SetHeadItem,
    SetScore,
    SummonMarker,
    WriteAxis,
)
from .fixedpoint import fits, floor_div, floor_mod, trunc_div, trunc_mod, wrap
from .protocol import DEFAULT_REGISTER_WIDTH

MAX_CALL_DEPTH = 64


class RegisterOverflowError(OverflowError):
    """A register operation left the signed register range."""


class UnsetRegisterError(KeyError):
    """A register was read before anything wrote it."""


@dataclass
class Marker:
    pos: list[float]
    tags: set[str] = field(default_factory=set)
    head_item: str | None = None
    alive: bool = True

    @property
    def x(self) -> float:
        return self.pos[0]

    @property
    def y(self) -> float:
        return self.pos[1]

    @property
    def z(self) -> float:
        return self.pos[2]


class ScoreboardMachine:
    def __init__(
        self,
        functions: Mapping[str, list[Command]] | None = None,
        tick_functions: Iterable[str] = (),
        *,
        division: str = "floor",
        strict: bool = True,
        width: int = DEFAULT_REGISTER_WIDTH,
    ):
        if division not in ("floor", "truncate"):
            raise ValueError(f"Unknown division mode: {division!r}")
        self.functions = dict(functions or {})
        self.tick_functions = list(tick_functions)
        self.division = division
        self.strict = strict
        self.width = width

        self.objectives: set[str] = set()
        self.scores: dict[Register, int] = {}
        self.markers: list[Marker] = []
        self.scheduled: list[tuple[int, str]] = []
        self.sounds: list[str] = []
        self.tick_count = 0
        self._depth = 0

    # ── Scores ───────────────────────────────────────────────────────────

    def get(self, reg: Register) -> int:
        if reg not in self.scores:
            raise UnsetRegisterError(f"{reg} has no score")
        return self.scores[reg]

    def set(self, reg: Register, value: int) -> None:
        if reg.objective not in self.objectives:
            raise KeyError(f"Unknown scoreboard objective {reg.objective!r}")
        value = int(value)
        if not fits(value, self.width):
            if self.strict:
                raise RegisterOverflowError(
                    f"{reg} = {value} overflows a {self.width}-bit register"
                )
            value = wrap(value, self.width)
        self.scores[reg] = value

    def _divide(self, a: int, b: int) -> int:
        return floor_div(a, b) if self.division == "floor" else trunc_div(a, b)

    def _modulo(self, a: int, b: int) -> int:
        return floor_mod(a, b) if self.division == "floor" else trunc_mod(a, b)

    def _operate(self, cmd: Operation) -> None:
        src = self.get(cmd.source)
        if cmd.op == "=":
            self.set(cmd.target, src)
            return
        if cmd.target in self.scores:
            cur = self.scores[cmd.target]
        elif self.strict:
            raise UnsetRegisterError(f"{cmd.target} has no score")
        else:
            cur = 0
        if cmd.op == "+=":
            self.set(cmd.target, cur + src)
        elif cmd.op == "-=":
            self.set(cmd.target, cur - src)
        elif cmd.op == "*=":
            self.set(cmd.target, cur * src)
        elif cmd.op == "/=":
            self.set(cmd.target, self._divide(cur, src))
        elif cmd.op == "%=":
            self.set(cmd.target, self._modulo(cur, src))

    # ── Entities ─────────────────────────────────────────────────────────

    def summon(self, x: float, y: float, z: float, tag: str) -> Marker:
        marker = Marker([float(x), float(y), float(z)], {tag})
        self.markers.append(marker)
        return marker

    def tagged(self, tag: str) -> list[Marker]:
        return [m for m in self.markers if m.alive and tag in m.tags]

    @staticmethod
    def _require(executor: Marker | None, cmd: Command) -> Marker:
        if executor is None:
            raise RuntimeError(f"{type(cmd).__name__} needs an executing entity")
        return executor

    # ── Execution ────────────────────────────────────────────────────────

    def execute(self, cmd: Command, executor: Marker | None = None) -> None:
        if isinstance(cmd, SetScore):
            self.set(cmd.target, cmd.value)
        elif isinstance(cmd, AddScore):
            if cmd.target in self.scores or self.strict:
                cur = self.get(cmd.target)
            else:
                cur = 0
            self.set(cmd.target, cur + cmd.value)
        elif isinstance(cmd, Operation):
            self._operate(cmd)
        elif isinstance(cmd, ReadAxis):
            me = self._require(executor, cmd)
            self.set(cmd.target, math.floor(me.pos[cmd.axis] * float(cmd.scale)))
        elif isinstance(cmd, WriteAxis):
            me = self._require(executor, cmd)
            me.pos[cmd.axis] = float(Fraction(self.get(cmd.source)) * Fraction(cmd.scale))
        elif isinstance(cmd, IfScore):
            value = self.scores.get(cmd.register)
            if value is None:
                return
            if (cmd.comparison == "<" and value < cmd.value) or (
                cmd.comparison == ">" and value > cmd.value
            ):
                self.execute(cmd.then, executor)
        elif isinstance(cmd, AsMarkers):
            for marker in self.tagged(cmd.tag):
                self.execute(cmd.then, marker)
        elif isinstance(cmd, RunFunction):
            self.call(cmd.function, executor)
        elif isinstance(cmd, Schedule):
            due = self.tick_count + cmd.ticks
            if cmd.mode == "replace":
                self.scheduled = [s for s in self.scheduled if s[1] != cmd.function]
            self.scheduled.append((due, cmd.function))
        elif isinstance(cmd, CreateObjective):
            self.objectives.add(cmd.objective)
        elif isinstance(cmd, RemoveObjective):
            self.objectives.discard(cmd.objective)
            self.scores = {r: v for r, v in self.scores.items() if r.objective != cmd.objective}
        elif isinstance(cmd, SummonMarker):
            self.summon(cmd.x, cmd.y, cmd.z, cmd.tag)
        elif isinstance(cmd, KillSelf):
            self._require(executor, cmd).alive = False
            self.markers = [m for m in self.markers if m.alive]
        elif isinstance(cmd, SetHeadItem):
            self._require(executor, cmd).head_item = cmd.item
        elif isinstance(cmd, PlaySound):
            self.sounds.append(cmd.sound)
        else:
            raise TypeError(f"Cannot execute {type(cmd).__name__}")

    def run(self, commands: Iterable[Command], executor: Marker | None = None) -> None:
        for cmd in commands:
            self.execute(cmd, executor)

    def call(self, function: str, executor: Marker | None = None) -> None:
        if function not in self.functions:
            raise KeyError(f"Unknown function {function}")
        if self._depth >= MAX_CALL_DEPTH:
            raise RecursionError(f"Function call depth exceeded in {function}")
        self._depth += 1
        try:
            self.run(self.functions[function], executor)
        finally:
            self._depth -= 1

    def tick(self) -> None:
        """Advance one tick: due scheduled functions, then tick functions."""
        self.tick_count += 1
        due = sorted((s for s in self.scheduled if s[0] <= self.tick_count), key=lambda s: s[0])
        self.scheduled = [s for s in self.scheduled if s[0] > self.tick_count]
        for _, function in due:
            self.call(function)
        for function in self.tick_functions:
            self.call(function)
