"""Pack assembly: turns a configuration into named command lists and files."""
from __future__ import annotations

import json

from grapher_core.commands import AsMarkers, Command, RunFunction, render_function
from grapher_core.config import GrapherConfig
from grapher_core.ids import body_suffix, function_id
from grapher_core.machine import ScoreboardMachine
from grapher_core.protocol import ITEM_OFF, ITEM_ON, LOAD_TAG, TICK_TAG
from grapher_core.registers import ScoreAllocator

from . import lifecycle
from .animation import AnimationState, animate, reset_animation
from .kernels import SURFACES, KernelContext, SineRegisters, calc_sine


class Datapack:
    """Function table of one pack plus its load and tick hooks."""

    def __init__(self, config: GrapherConfig):
        self.config = config
        self.functions: dict[str, list[Command]] = {}
        self.load_functions: list[str] = []
        self.tick_functions: list[str] = []

    def function_id(self, path: str) -> str:
        return function_id(self.config.namespace, path)

    def public(self, path: str, commands: list[Command]) -> str:
        fid = self.function_id(path)
        if fid in self.functions:
            raise ValueError(f"Duplicate function {fid}")
        self.functions[fid] = list(commands)
        return fid

    def internal(self, label: str, commands: list[Command]) -> str:
        fid = self.function_id(f"{self.config.internal_namespace}/{label}")
        if fid in self.functions and self.functions[fid] != list(commands):
            fid = f"{fid}_{body_suffix(render_function(commands))}"
        self.functions[fid] = list(commands)
        return fid

    @staticmethod
    def function_file(fid: str) -> str:
        namespace, path = fid.split(":", 1)
        return f"data/{namespace}/functions/{path}.mcfunction"

    def files(self) -> dict[str, bytes]:
        """Relative path -> file content."""
        meta = {
            "pack": {
                "pack_format": self.config.pack_format,
                "description": self.config.description,
            }
        }
        out = {"pack.mcmeta": (json.dumps(meta, indent=2, ensure_ascii=False) + "\n").encode("utf-8")}
        for fid, commands in sorted(self.functions.items()):
            out[self.function_file(fid)] = render_function(commands).encode("utf-8")
        if self.load_functions:
            out[LOAD_TAG] = _tag(self.load_functions)
        if self.tick_functions:
            out[TICK_TAG] = _tag(self.tick_functions)
        return out


def _tag(values: list[str]) -> bytes:
    return (json.dumps({"values": values}, indent=2) + "\n").encode("utf-8")


class GrapherPack(Datapack):
    """The compiled grapher, keeping handles on its shared registers."""

    def __init__(self, config: GrapherConfig):
        super().__init__(config)
        self.allocator = ScoreAllocator(config.objective)
        self.state = AnimationState.allocate(self.allocator)
        self.sine = SineRegisters.allocate(self.allocator)
        self.surfaces: dict[str, str] = {}
        self.calc_sine = ""
        self.kernels: dict[str, str] = {}

    def machine(self, **kwargs) -> ScoreboardMachine:
        """A fresh scoreboard machine with this pack loaded (load functions already run)."""
        machine = ScoreboardMachine(self.functions, self.tick_functions, **kwargs)
        for fid in self.load_functions:
            machine.call(fid)
        return machine


def build_pack(config: GrapherConfig) -> GrapherPack:
    config.validate()
    pack = GrapherPack(config)
    allocator = pack.allocator

    calc_sine_id = pack.internal("calc_sine", calc_sine(allocator, pack.sine, config.resolution))
    pack.calc_sine = calc_sine_id
    ctx = KernelContext(config, allocator, pack.state, pack.sine, calc_sine_id)

    remove_id = pack.public("remove_graph", lifecycle.remove_graph(config))
    flicker_on_id = pack.internal("flicker_on", lifecycle.flicker(config, ITEM_ON))
    flicker_off_id = pack.internal("flicker_off", lifecycle.flicker(config, ITEM_OFF))
    pack.public("cleanup", lifecycle.cleanup(config, remove_id))
    reset_id = pack.public("reset_animation", reset_animation(pack.state, config))
    pack.public("turn_on", lifecycle.turn_on(config, remove_id, reset_id, flicker_on_id, flicker_off_id))
    pack.public("turn_off", lifecycle.turn_off(flicker_off_id, remove_id))

    for name, kernel in SURFACES.items():
        body_id = pack.internal(f"set_{name}", kernel(ctx))
        pack.kernels[name] = body_id
        pack.surfaces[name] = pack.public(name, [AsMarkers(config.marker_tag, RunFunction(body_id))])

    animate_id = pack.public("animate", animate(pack.state, config))
    if config.tick_surface is not None:
        pack.tick_functions.append(
            pack.public("tick", [RunFunction(animate_id), RunFunction(pack.surfaces[config.tick_surface])])
        )

    # constants are only complete once every kernel above has been built
    pack.load_functions.append(pack.internal("init", lifecycle.init(config, allocator, pack.state)))
    return pack
