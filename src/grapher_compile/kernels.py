"""Surface kernels.

Each kernel returns the command list run once per marker, as that marker.
Registers hold reals times R. Comments of the form ``# res = n`` give the
power of R a register is scaled by after that line.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from fractions import Fraction

from grapher_core.commands import (
    AddScore,
    Command,
    IfScore,
    Operation,
    ReadAxis,
    Register,
    RunFunction,
    SetScore,
    WriteAxis,
)
from grapher_core.config import GrapherConfig, height_scale
from grapher_core.fixedpoint import to_fixed
from grapher_core.protocol import AXIS_X, AXIS_Y, AXIS_Z
from grapher_core.registers import ScoreAllocator

from .animation import AnimationState


@dataclass(frozen=True)
class SineRegisters:
    """Argument and result of ``calc_sine``. Callers must copy the result out
    before calling again; the input register is clobbered."""

    input: Register
    output: Register

    @classmethod
    def allocate(cls, allocator: ScoreAllocator) -> SineRegisters:
        return cls(allocator.score(), allocator.score())


@dataclass(frozen=True)
class KernelContext:
    config: GrapherConfig
    allocator: ScoreAllocator
    state: AnimationState
    sine: SineRegisters
    calc_sine: str  # function id of the compiled calc_sine body


def calc_sine(allocator: ScoreAllocator, sine: SineRegisters, resolution: int) -> list[Command]:
    """A sine-like wave with period 2, based on Bhaskara I's approximation.

    Not actually sine. Reference, in reals:
        modX = x % 1
        result = 16 * modX * (1 - modX) / (5 - modX * (1 - modX))
        if x % 2 > 1: result *= -1
    """
    r = resolution
    cmds: list[Command] = []

    # x % 1
    mod_x = allocator.score()
    cmds.append(Operation(mod_x, "=", sine.input))
    cmds.append(Operation(mod_x, "%=", allocator.constant(1 * r)))

    # modX * (1 - modX)
    mod_exp = allocator.score()
    cmds.append(SetScore(mod_exp, 1 * r))
    cmds.append(Operation(mod_exp, "-=", mod_x))
    cmds.append(Operation(mod_exp, "*=", mod_x))  # res = 2

    denominator = mod_x  # reuse the score
    cmds.append(SetScore(denominator, 5 * r * r))
    cmds.append(Operation(denominator, "-=", mod_exp))  # res = 2

    cmds.append(SetScore(sine.output, 16 * r))  # res = 1
    cmds.append(Operation(sine.output, "*=", mod_exp))  # res = 3
    cmds.append(Operation(sine.output, "/=", denominator))  # res = 1

    # negate on odd half-periods
    cmds.append(Operation(sine.input, "%=", allocator.constant(2 * r)))
    cmds.append(IfScore(sine.input, ">", 1 * r,
                        Operation(sine.output, "*=", allocator.constant(-1))))
    return cmds


def _quadratic(ctx: KernelContext, combine: str) -> list[Command]:
    config = ctx.config
    r = config.resolution
    state = ctx.state

    x_score = ctx.allocator.score()
    z_score = ctx.allocator.score()
    cmds: list[Command] = [
        ReadAxis(x_score, AXIS_X, r),
        ReadAxis(z_score, AXIS_Z, r),
        Operation(x_score, "+=", state.pan_x),
        Operation(z_score, "+=", state.pan_z),
        Operation(x_score, "*=", x_score),
        Operation(z_score, "*=", z_score),
        Operation(x_score, combine, z_score),  # res = 2
    ]

    # The write multiplies everything by the coefficient, so the constant is
    # added divided by it: a(...) + C = (... + C/a) * a
    folded = to_fixed(config.y_origin, r * r * config.quadratic_divisor)
    cmds.append(Operation(x_score, "+=", ctx.allocator.constant(folded)))

    cmds.append(WriteAxis(AXIS_Y, x_score, height_scale(config)))
    return cmds


def paraboloid(ctx: KernelContext) -> list[Command]:
    """y = ((x + panX)^2 + (z + panZ)^2) / 5 + altitude"""
    return _quadratic(ctx, "+=")


def saddle(ctx: KernelContext) -> list[Command]:
    """y = ((x + panX)^2 - (z + panZ)^2) / 5 + altitude"""
    return _quadratic(ctx, "-=")


def sine(ctx: KernelContext) -> list[Command]:
    """y = sine(x / 3 + frame) + sine(z / 3 + frame) + altitude"""
    config = ctx.config
    r = config.resolution
    input_scale = Fraction(r, config.sine_divisor)
    recenter = to_fixed(config.sine_recenter, input_scale)
    sine_regs = ctx.sine

    def axis_input(axis: int) -> list[Command]:
        cmds: list[Command] = [ReadAxis(sine_regs.input, axis, input_scale)]
        if recenter:
            cmds.append(AddScore(sine_regs.input, recenter))
        cmds.append(Operation(sine_regs.input, "+=", ctx.state.frame))
        cmds.append(RunFunction(ctx.calc_sine))
        return cmds

    temp = ctx.allocator.score()
    cmds = axis_input(AXIS_X)
    cmds.append(Operation(temp, "=", sine_regs.output))
    cmds += axis_input(AXIS_Z)
    cmds.append(Operation(temp, "+=", sine_regs.output))
    cmds.append(Operation(temp, "+=", ctx.allocator.constant(config.fixed(config.y_origin))))
    cmds.append(WriteAxis(AXIS_Y, temp, Fraction(1, r)))
    return cmds


def ripple(ctx: KernelContext) -> list[Command]:
    """y = sine((x^2 + z^2) / 8 + frame) + altitude

    Radiates from the ripple centre; does not pan.
    """
    config = ctx.config
    r = config.resolution

    x_score = ctx.sine.input
    z_score = ctx.allocator.score()
    cmds: list[Command] = [
        ReadAxis(x_score, AXIS_X, r),
        ReadAxis(z_score, AXIS_Z, r),
    ]
    if config.fixed(config.ripple_center_x):
        cmds.append(AddScore(x_score, -config.fixed(config.ripple_center_x)))
    if config.fixed(config.ripple_center_z):
        cmds.append(AddScore(z_score, -config.fixed(config.ripple_center_z)))

    cmds += [
        Operation(x_score, "*=", x_score),
        Operation(z_score, "*=", z_score),
        Operation(x_score, "+=", z_score),  # res = 2
        Operation(x_score, "/=", ctx.allocator.constant(config.ripple_divisor * r)),  # res = 1
        Operation(x_score, "+=", ctx.state.frame),
        RunFunction(ctx.calc_sine),
        Operation(ctx.sine.output, "+=", ctx.allocator.constant(config.fixed(config.y_origin))),
        WriteAxis(AXIS_Y, ctx.sine.output, Fraction(1, r)),
    ]
    return cmds


SURFACES: dict[str, Callable[[KernelContext], list[Command]]] = {
    "paraboloid": paraboloid,
    "saddle": saddle,
    "sine": sine,
    "ripple": ripple,
}
