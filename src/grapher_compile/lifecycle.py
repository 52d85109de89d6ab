"""Graph lifecycle: load, summon, flicker, teardown."""
from __future__ import annotations

from grapher_core.commands import (
    AsMarkers,
    Command,
    CreateObjective,
    KillSelf,
    PlaySound,
    RemoveObjective,
    RunFunction,
    Schedule,
    SetHeadItem,
    SummonMarker,
)
from grapher_core.config import GrapherConfig
from grapher_core.protocol import (
    FLICKER_DURATIONS,
    POWER_ON_PITCH,
    POWER_ON_SOUND,
    POWER_ON_VOLUME,
    TURN_OFF_DELAY_TICKS,
)
from grapher_core.registers import ScoreAllocator

from .animation import AnimationState, init_velocity


def init(config: GrapherConfig, allocator: ScoreAllocator, state: AnimationState) -> list[Command]:
    """Recreate the objective and load constants. Build this after every kernel."""
    return [
        RemoveObjective(config.objective),
        CreateObjective(config.objective),
        *allocator.init_constants(),
        *init_velocity(state, config),
    ]


def remove_graph(config: GrapherConfig) -> list[Command]:
    return [AsMarkers(config.marker_tag, KillSelf())]


def cleanup(config: GrapherConfig, remove_graph_id: str) -> list[Command]:
    return [RunFunction(remove_graph_id), RemoveObjective(config.objective)]


def flicker(config: GrapherConfig, item: str) -> list[Command]:
    return [AsMarkers(config.marker_tag, SetHeadItem(item))]


def flicker_schedule(flicker_on_id: str, flicker_off_id: str) -> list[Command]:
    cmds: list[Command] = []
    time = 0
    for duration, interval in FLICKER_DURATIONS:
        time += duration
        cmds.append(Schedule(flicker_off_id, time, "append"))
        time += interval
        cmds.append(Schedule(flicker_on_id, time, "append"))
    return cmds


def turn_on(
    config: GrapherConfig,
    remove_graph_id: str,
    reset_animation_id: str,
    flicker_on_id: str,
    flicker_off_id: str,
) -> list[Command]:
    cmds: list[Command] = [RunFunction(remove_graph_id), RunFunction(reset_animation_id)]
    cmds += [SummonMarker(x, y, z, config.marker_tag) for x, y, z in config.grid()]
    cmds.append(RunFunction(flicker_on_id))
    cmds += flicker_schedule(flicker_on_id, flicker_off_id)
    cmds.append(PlaySound(POWER_ON_SOUND, POWER_ON_VOLUME, POWER_ON_PITCH))
    return cmds


def turn_off(flicker_off_id: str, remove_graph_id: str) -> list[Command]:
    return [
        RunFunction(flicker_off_id),
        Schedule(remove_graph_id, TURN_OFF_DELAY_TICKS, "append"),
    ]
