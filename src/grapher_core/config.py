"""Grapher configuration and its validation."""
from __future__ import annotations

import json
import math
import re
import warnings
from dataclasses import asdict, dataclass, fields
from fractions import Fraction
from pathlib import Path
from typing import Optional

from .fixedpoint import int_bounds, to_fixed
from .protocol import (
    DEFAULT_INTERNAL_NAMESPACE,
    DEFAULT_MARKER_TAG,
    DEFAULT_NAMESPACE,
    DEFAULT_OBJECTIVE,
    DEFAULT_REGISTER_WIDTH,
    PACK_DESCRIPTION,
    PACK_FORMAT,
    SURFACE_NAMES,
)

_NAMESPACE_RE = re.compile(r"^[a-z0-9_.-]+$")
_OBJECTIVE_RE = re.compile(r"^[A-Za-z0-9_.+-]{1,16}$")
_TAG_RE = re.compile(r"^[A-Za-z0-9_.+-]+$")


def _round_half_up(v: float) -> int:
    return math.floor(v + 0.5)


@dataclass(frozen=True)
class GrapherConfig:
    """Everything the compiled pack depends on.

    Real-valued fields are in world units (blocks, blocks per tick). They are
    converted to scaled integers with ``resolution`` when the pack is built.
    """

    namespace: str = DEFAULT_NAMESPACE
    internal_namespace: str = DEFAULT_INTERNAL_NAMESPACE
    objective: str = DEFAULT_OBJECTIVE
    marker_tag: str = DEFAULT_MARKER_TAG
    pack_format: int = PACK_FORMAT
    description: str = PACK_DESCRIPTION

    # scoreboards don't support decimals, so values are multiplied by this
    resolution: int = 300
    register_width: int = DEFAULT_REGISTER_WIDTH

    x_size: int = 9
    z_size: int = 9
    x_spacing: float = 0.5
    z_spacing: float = 0.5
    x_origin: Optional[float] = None
    z_origin: Optional[float] = None
    y_origin: float = 36.0

    pan_speed_x: float = 0.04
    pan_speed_z: float = 0.03
    frame_speed: float = 0.03
    pan_lower_x: float = -1.5
    pan_upper_x: float = 1.0
    pan_lower_z: float = -1.5
    pan_upper_z: float = 1.0
    pan_reset_x: float = -0.5
    pan_reset_z: float = -0.5

    quadratic_divisor: int = 5
    sine_divisor: int = 3
    ripple_divisor: int = 8
    # world-space shift applied to the sine surface input before frame is added
    sine_recenter: float = 0.0
    ripple_center_x: float = 0.0
    ripple_center_z: float = 0.0

    # when set, a tick function runs animate and then this surface every tick
    tick_surface: Optional[str] = None

    @property
    def origin(self) -> tuple[float, float, float]:
        x0 = self.x_origin
        if x0 is None:
            x0 = 0.5 + _round_half_up(-self.x_size / 2) * self.x_spacing
        z0 = self.z_origin
        if z0 is None:
            z0 = 0.5 + _round_half_up(-self.z_size / 2) * self.z_spacing
        return x0, self.y_origin, z0

    def grid(self) -> list[tuple[float, float, float]]:
        """Marker positions, x-major."""
        x0, y0, z0 = self.origin
        return [
            (x0 + x * self.x_spacing, y0, z0 + z * self.z_spacing)
            for x in range(self.x_size)
            for z in range(self.z_size)
        ]

    def fixed(self, value: float) -> int:
        return to_fixed(value, self.resolution)

    def to_dict(self) -> dict:
        return asdict(self)

    def canonical_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    def validate(self) -> "GrapherConfig":
        """Reject configurations the kernels cannot evaluate exactly."""
        if not _NAMESPACE_RE.match(self.namespace):
            raise ValueError(f"FATAL: Invalid namespace {self.namespace!r}")
        if not _NAMESPACE_RE.match(self.internal_namespace.replace("/", "")):
            raise ValueError(f"FATAL: Invalid internal namespace {self.internal_namespace!r}")
        if not _OBJECTIVE_RE.match(self.objective):
            raise ValueError(f"FATAL: Invalid objective {self.objective!r}")
        if not _TAG_RE.match(self.marker_tag):
            raise ValueError(f"FATAL: Invalid marker tag {self.marker_tag!r}")

        numeric = [
            "resolution", "register_width", "x_size", "z_size", "x_spacing", "z_spacing",
            "y_origin", "pan_speed_x", "pan_speed_z", "frame_speed",
            "pan_lower_x", "pan_upper_x", "pan_lower_z", "pan_upper_z", "pan_reset_x", "pan_reset_z",
            "quadratic_divisor", "sine_divisor", "ripple_divisor",
            "sine_recenter", "ripple_center_x", "ripple_center_z",
        ]
        if self.x_origin is not None:
            numeric.append("x_origin")
        if self.z_origin is not None:
            numeric.append("z_origin")
        for name in numeric:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"FATAL: {name} must be a number, got {value!r}")

        positive = {
            "resolution": self.resolution,
            "register_width": self.register_width,
            "x_size": self.x_size,
            "z_size": self.z_size,
            "x_spacing": self.x_spacing,
            "z_spacing": self.z_spacing,
            "pan_speed_x": self.pan_speed_x,
            "pan_speed_z": self.pan_speed_z,
            "frame_speed": self.frame_speed,
            "quadratic_divisor": self.quadratic_divisor,
            "sine_divisor": self.sine_divisor,
            "ripple_divisor": self.ripple_divisor,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"FATAL: {name} must be positive, got {value}")
        for name in ("resolution", "register_width", "x_size", "z_size",
                     "quadratic_divisor", "sine_divisor", "ripple_divisor"):
            if not isinstance(getattr(self, name), int):
                raise ValueError(f"FATAL: {name} must be an integer")

        for axis in ("x", "z"):
            lower = getattr(self, f"pan_lower_{axis}")
            upper = getattr(self, f"pan_upper_{axis}")
            reset = getattr(self, f"pan_reset_{axis}")
            if lower >= upper:
                raise ValueError(
                    f"FATAL: Pan bounds for {axis} overlap (lower {lower} >= upper {upper})"
                )
            if not lower <= reset <= upper:
                raise ValueError(
                    f"FATAL: Pan reset {reset} for {axis} lies outside [{lower}, {upper}]"
                )

        if self.tick_surface is not None and self.tick_surface not in SURFACE_NAMES:
            raise ValueError(
                f"FATAL: Unknown tick surface {self.tick_surface!r}; "
                f"expected one of {', '.join(SURFACE_NAMES)}"
            )

        for name in ("pan_speed_x", "pan_speed_z", "frame_speed"):
            if self.fixed(getattr(self, name)) == 0:
                warn_msg = (
                    f"{name}={getattr(self, name)} rounds to 0 at resolution "
                    f"{self.resolution}; the animation will not move"
                )
                warnings.warn(warn_msg)

        _, hi = int_bounds(self.register_width)
        for stage, magnitude in overflow_envelope(self).items():
            if magnitude > hi:
                raise ValueError(
                    f"FATAL: {stage} reaches {magnitude}, beyond the "
                    f"{self.register_width}-bit register limit {hi}; "
                    f"reduce the grid extent or the resolution"
                )
        return self


def overflow_envelope(config: GrapherConfig) -> dict[str, int]:
    """Worst-case magnitude reached by each kernel stage."""
    r = config.resolution
    x0, _, z0 = config.origin
    x_far = max(abs(x0), abs(x0 + (config.x_size - 1) * config.x_spacing))
    z_far = max(abs(z0), abs(z0 + (config.z_size - 1) * config.z_spacing))

    # pan can overshoot a bound by one velocity step before it turns back
    pan_x = max(abs(config.pan_lower_x), abs(config.pan_upper_x)) + config.pan_speed_x
    pan_z = max(abs(config.pan_lower_z), abs(config.pan_upper_z)) + config.pan_speed_z
    pan_x_fixed = config.fixed(pan_x)
    pan_z_fixed = config.fixed(pan_z)

    qx = math.ceil(x_far * r) + pan_x_fixed
    qz = math.ceil(z_far * r) + pan_z_fixed
    folded = abs(to_fixed(config.y_origin, r * r * config.quadratic_divisor))

    rx = math.ceil((x_far + abs(config.ripple_center_x)) * r)
    rz = math.ceil((z_far + abs(config.ripple_center_z)) * r)

    sine_scale = Fraction(r, config.sine_divisor)
    sine_input = math.ceil(max(x_far, z_far) * sine_scale) + abs(to_fixed(config.sine_recenter, sine_scale))

    # modX * (R - modX) peaks at R*R/4
    peak = (r * r) // 4

    return {
        "pan excursion": max(pan_x_fixed, pan_z_fixed),
        "frame step": abs(config.fixed(config.frame_speed)),
        "sine input": sine_input,
        "quadratic sum": qx * qx + qz * qz + folded,
        "ripple sum of squares": rx * rx + rz * rz,
        "ripple divisor": config.ripple_divisor * r,
        "periodic denominator": 5 * r * r,
        "periodic numerator": 16 * r * peak,
        "surface height": max(abs(config.fixed(config.y_origin)) + 2 * 4 * r, folded),
    }


def load_config(path: Path | None = None, **overrides) -> GrapherConfig:
    """Load JSON overrides on top of the defaults, apply keyword overrides, validate."""
    values: dict = {}
    if path is not None:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"FATAL: Config {path} must hold a JSON object")
        values.update(data)
    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(GrapherConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"FATAL: Unknown config keys: {', '.join(unknown)}")
    return GrapherConfig(**values).validate()


def height_scale(config: GrapherConfig) -> Fraction:
    """Output scale of the quadratic surfaces: coefficient over R squared."""
    return Fraction(1, config.quadratic_divisor * config.resolution ** 2)
