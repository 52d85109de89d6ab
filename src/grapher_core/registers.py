"""Register allocation and ordering audit."""
from __future__ import annotations

from collections.abc import Iterable, Mapping

from .commands import Command, Register, RunFunction, SetScore
from .ids import constant_name, scratch_name


class ScoreAllocator:
    """Hands out registers on one objective.

    Scratch registers are fresh on every call. Constant registers are
    deduplicated by value and only get their value once ``init_constants``
    is run, so that must happen after every kernel has been built.
    """

    def __init__(self, objective: str):
        self.objective = objective
        self._next = 0
        self._constants: dict[int, Register] = {}

    def score(self) -> Register:
        reg = Register(scratch_name(self._next), self.objective)
        self._next += 1
        return reg

    def named(self, name: str) -> Register:
        return Register(name, self.objective)

    def constant(self, value: int) -> Register:
        value = int(value)
        if value not in self._constants:
            self._constants[value] = Register(constant_name(value), self.objective)
        return self._constants[value]

    @property
    def constants(self) -> dict[int, Register]:
        return dict(self._constants)

    def init_constants(self) -> list[Command]:
        return [SetScore(reg, value) for value, reg in sorted(self._constants.items())]


def reads_before_writes(
    commands: Iterable[Command],
    functions: Mapping[str, list[Command]] | None = None,
    ignore: Iterable[Register] = (),
) -> list[Register]:
    """Registers read before anything in ``commands`` wrote them.

    Function calls are inlined from ``functions``. Conditional commands count
    as reads of their predicate register, and their nested command is walked
    as if it ran.
    """
    functions = functions or {}
    written: set[Register] = set(ignore)
    found: list[Register] = []

    def walk(cmds: Iterable[Command], depth: int) -> None:
        if depth > 32:
            raise RecursionError("function call depth exceeded while auditing")
        for cmd in cmds:
            for reg in sorted(cmd.reads(), key=str):
                if reg not in written and reg not in found:
                    found.append(reg)
            written.update(cmd.writes())
            if isinstance(cmd, RunFunction) and cmd.function in functions:
                walk(functions[cmd.function], depth + 1)
            walk(cmd.children(), depth + 1)

    walk(commands, 0)
    return found
