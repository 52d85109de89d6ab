import pytest

from grapher_core.commands import (
    AddScore,
    AsMarkers,
    CreateObjective,
    IfScore,
    KillSelf,
    Operation,
    ReadAxis,
    Register,
    RunFunction,
    Schedule,
    SetScore,
    WriteAxis,
)
from grapher_core.fixedpoint import format_decimal, to_fixed, wrap
from grapher_core.machine import RegisterOverflowError, ScoreboardMachine, UnsetRegisterError
from grapher_core.registers import ScoreAllocator, reads_before_writes

A = Register("a", "obj")
B = Register("b", "obj")


def booted(**kwargs):
    machine = ScoreboardMachine(**kwargs)
    machine.execute(CreateObjective("obj"))
    return machine


@pytest.mark.parametrize(
    "division, a, b, quotient, remainder",
    [
        ("floor", -7, 2, -4, 1),
        ("truncate", -7, 2, -3, -1),
        ("floor", 7, 2, 3, 1),
        ("truncate", 7, 2, 3, 1),
    ],
)
def test_division_modes(division, a, b, quotient, remainder):
    machine = booted(division=division)
    machine.run([SetScore(A, a), SetScore(B, b), Operation(A, "/=", B)])
    assert machine.get(A) == quotient
    machine.run([SetScore(A, a), Operation(A, "%=", B)])
    assert machine.get(A) == remainder


def test_division_by_zero_raises():
    machine = booted()
    with pytest.raises(ZeroDivisionError):
        machine.run([SetScore(A, 5), SetScore(B, 0), Operation(A, "/=", B)])


def test_overflow_is_fatal_in_strict_mode():
    machine = booted()
    with pytest.raises(RegisterOverflowError):
        machine.run([SetScore(A, 2 ** 31 - 1), AddScore(A, 1)])


def test_overflow_wraps_like_the_game_otherwise():
    machine = booted(strict=False)
    machine.run([SetScore(A, 2 ** 31 - 1), AddScore(A, 1)])
    assert machine.get(A) == -(2 ** 31)
    assert wrap(2 ** 32 + 5) == 5


def test_add_creates_unset_score_when_not_strict():
    machine = booted(strict=False)
    machine.execute(AddScore(A, 7))
    assert machine.get(A) == 7
    with pytest.raises(UnsetRegisterError):
        booted().execute(AddScore(A, 7))


def test_reading_unset_register_raises():
    machine = booted()
    with pytest.raises(UnsetRegisterError):
        machine.execute(Operation(A, "=", B))
    with pytest.raises(UnsetRegisterError):
        machine.run([SetScore(B, 1), Operation(A, "+=", B)])


def test_unknown_objective():
    machine = ScoreboardMachine()
    with pytest.raises(KeyError):
        machine.execute(SetScore(A, 1))


def test_conditions_are_strict_and_skip_unset():
    machine = booted()
    machine.run([SetScore(A, 5), SetScore(B, 0)])
    machine.execute(IfScore(A, "<", 5, SetScore(B, 1)))
    machine.execute(IfScore(A, ">", 5, SetScore(B, 2)))
    assert machine.get(B) == 0
    machine.execute(IfScore(A, ">", 4, SetScore(B, 3)))
    assert machine.get(B) == 3
    machine.execute(IfScore(Register("missing", "obj"), "<", 100, SetScore(B, 4)))
    assert machine.get(B) == 3


def test_entity_axis_read_floors_and_write_scales():
    machine = booted()
    marker = machine.summon(-0.5, 36.0, 1.25, "m")
    machine.execute(ReadAxis(A, 0, 3), marker)
    assert machine.get(A) == -2
    machine.execute(ReadAxis(B, 2, 300), marker)
    assert machine.get(B) == 375
    machine.execute(WriteAxis(1, B, 2), marker)
    assert marker.y == 750.0


def test_entity_commands_need_an_executor():
    machine = booted()
    with pytest.raises(RuntimeError):
        machine.execute(ReadAxis(A, 0, 1))


def test_as_markers_and_kill():
    machine = booted()
    for i in range(3):
        machine.summon(i, 0, 0, "m")
    machine.summon(9, 0, 0, "other")
    machine.execute(AsMarkers("m", KillSelf()))
    assert [m.x for m in machine.markers] == [9.0]


def test_schedule_append_and_replace():
    machine = ScoreboardMachine({"ns:f": [CreateObjective("obj")], "ns:g": [CreateObjective("g")]})
    machine.execute(Schedule("ns:f", 2, "append"))
    machine.execute(Schedule("ns:f", 4, "append"))
    machine.execute(Schedule("ns:f", 3, "replace"))
    machine.execute(Schedule("ns:g", 1, "append"))
    assert machine.scheduled == [(3, "ns:f"), (1, "ns:g")]
    machine.tick()
    assert machine.objectives == {"g"}
    machine.tick()
    machine.tick()
    assert machine.objectives == {"g", "obj"}
    assert machine.scheduled == []


def test_recursive_function_is_stopped():
    machine = ScoreboardMachine({"ns:loop": [RunFunction("ns:loop")]})
    with pytest.raises(RecursionError):
        machine.call("ns:loop")


def test_allocator_deduplicates_constants():
    alloc = ScoreAllocator("obj")
    assert alloc.constant(300) is alloc.constant(300)
    assert alloc.constant(-1).name == "$c-1"
    assert alloc.score() != alloc.score()
    assert [c.render() for c in alloc.init_constants()] == [
        "scoreboard players set $c-1 obj -1",
        "scoreboard players set $c300 obj 300",
    ]


def test_audit_reports_reads_before_writes():
    cmds = [Operation(A, "+=", B), SetScore(B, 1), Operation(A, "=", B)]
    assert reads_before_writes(cmds) == [A, B]
    assert reads_before_writes(cmds, ignore=[A]) == [B]


def test_fixed_point_helpers():
    assert to_fixed(0.04, 300) == 12
    assert to_fixed(-0.04, 300) == -12
    assert to_fixed(-0.5, 100) == -50
    assert to_fixed(0.005, 100) == 1
    assert format_decimal(1 / 300) == "0.0033333333333333335"
    assert format_decimal(2.5e-06) == "0.0000025"
    assert format_decimal(300) == "300"
