"""Pan and frame animation.

Three bounded integrators run once per tick. Pan offsets bounce between
their bounds; frame only grows.
"""
from __future__ import annotations

from dataclasses import dataclass

from grapher_core.commands import AddScore, Command, IfScore, Operation, Register, SetScore
from grapher_core.config import GrapherConfig
from grapher_core.protocol import FRAME_REGISTER, PAN_X_REGISTER, PAN_Z_REGISTER
from grapher_core.registers import ScoreAllocator


@dataclass(frozen=True)
class AnimationState:
    """Long-lived registers written by ``animate`` and only read by the surfaces."""

    pan_x: Register
    pan_z: Register
    frame: Register
    velocity_x: Register
    velocity_z: Register

    @classmethod
    def allocate(cls, allocator: ScoreAllocator) -> AnimationState:
        return cls(
            pan_x=allocator.named(PAN_X_REGISTER),
            pan_z=allocator.named(PAN_Z_REGISTER),
            frame=allocator.named(FRAME_REGISTER),
            velocity_x=allocator.score(),
            velocity_z=allocator.score(),
        )

    @property
    def shared(self) -> tuple[Register, ...]:
        return (self.pan_x, self.pan_z, self.frame)


def init_velocity(state: AnimationState, config: GrapherConfig) -> list[Command]:
    return [
        SetScore(state.velocity_x, config.fixed(config.pan_speed_x)),
        SetScore(state.velocity_z, config.fixed(config.pan_speed_z)),
    ]


def reset_animation(state: AnimationState, config: GrapherConfig) -> list[Command]:
    return [
        SetScore(state.pan_x, config.fixed(config.pan_reset_x)),
        SetScore(state.pan_z, config.fixed(config.pan_reset_z)),
        SetScore(state.frame, 0),
    ]


def animate(state: AnimationState, config: GrapherConfig) -> list[Command]:
    speed_x = config.fixed(config.pan_speed_x)
    speed_z = config.fixed(config.pan_speed_z)
    return [
        IfScore(state.pan_x, "<", config.fixed(config.pan_lower_x),
                SetScore(state.velocity_x, speed_x)),
        IfScore(state.pan_z, "<", config.fixed(config.pan_lower_z),
                SetScore(state.velocity_z, speed_z)),
        IfScore(state.pan_x, ">", config.fixed(config.pan_upper_x),
                SetScore(state.velocity_x, -speed_x)),
        IfScore(state.pan_z, ">", config.fixed(config.pan_upper_z),
                SetScore(state.velocity_z, -speed_z)),
        Operation(state.pan_x, "+=", state.velocity_x),
        Operation(state.pan_z, "+=", state.velocity_z),
        AddScore(state.frame, config.fixed(config.frame_speed)),
    ]
