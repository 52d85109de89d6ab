import json
import warnings

import pytest

from grapher_core.config import GrapherConfig, load_config, overflow_envelope
from grapher_core.fixedpoint import int_bounds
from grapher_compile.pack import build_pack

INT32_MAX = int_bounds(32)[1]


def test_defaults_validate():
    config = GrapherConfig().validate()
    assert config.origin == (-1.5, 36.0, -1.5)
    assert len(config.grid()) == 81
    assert config.grid()[-1] == (2.5, 36.0, 2.5)


def test_even_grid_origin_rounds_half_up():
    config = GrapherConfig(x_size=10, z_size=10)
    assert config.origin == (-2.0, 36.0, -2.0)


def test_explicit_origin_wins():
    config = GrapherConfig(x_origin=-2.5, z_origin=-2.5)
    assert config.origin == (-2.5, 36.0, -2.5)


@pytest.mark.parametrize(
    "overrides, match",
    [
        ({"namespace": "3D Grapher"}, "namespace"),
        ({"marker_tag": 'x"] run kill @a['}, "marker tag"),
        ({"objective": "a_very_long_objective_name"}, "objective"),
        ({"resolution": 0}, "resolution"),
        ({"resolution": 300.0}, "integer"),
        ({"pan_speed_x": -0.04}, "pan_speed_x"),
        ({"pan_lower_x": 1.0, "pan_upper_x": 1.0}, "overlap"),
        ({"pan_reset_z": 2.0}, "outside"),
        ({"tick_surface": "torus"}, "tick surface"),
        ({"resolution": 1000}, "periodic numerator"),
        ({"x_size": 241, "z_size": 241, "x_spacing": 1.0, "z_spacing": 1.0}, "quadratic sum"),
        ({"frame_speed": 1e7}, "frame step"),
        ({"sine_recenter": 1e8}, "sine input"),
        ({"ripple_divisor": 10_000_000}, "ripple divisor"),
        ({"pan_lower_x": "-1.5"}, "pan_lower_x must be a number"),
    ],
)
def test_rejected_configurations(overrides, match):
    with pytest.raises(ValueError, match=match):
        GrapherConfig(**overrides).validate()


def test_zero_speed_warns():
    with pytest.warns(UserWarning, match="frame_speed"):
        GrapherConfig(resolution=10, frame_speed=0.01).validate()


def test_resolution_limit_of_periodic_kernel():
    GrapherConfig(resolution=812).validate()
    with pytest.raises(ValueError, match="periodic numerator"):
        GrapherConfig(resolution=813).validate()


@pytest.mark.parametrize("r", [50, 100, 300, 600, 812, 813, 1000])
@pytest.mark.parametrize("size", [5, 9, 41, 201, 401])
def test_validation_agrees_with_envelope(r, size):
    config = GrapherConfig(resolution=r, x_size=size, z_size=size, x_spacing=1.0, z_spacing=1.0)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        envelope = overflow_envelope(config)
        fits = all(v <= INT32_MAX for v in envelope.values())
        if fits:
            config.validate()
        else:
            with pytest.raises(ValueError, match="register limit"):
                config.validate()


def test_accepted_extreme_grid_does_not_overflow():
    config = GrapherConfig(x_size=201, z_size=201, x_spacing=1.0, z_spacing=1.0).validate()
    pack = build_pack(config)
    machine = pack.machine()
    x0, y0, z0 = config.origin
    x1 = x0 + (config.x_size - 1) * config.x_spacing
    z1 = z0 + (config.z_size - 1) * config.z_spacing
    pan_x = config.fixed(max(abs(config.pan_lower_x), abs(config.pan_upper_x)) + config.pan_speed_x)
    pan_z = config.fixed(max(abs(config.pan_lower_z), abs(config.pan_upper_z)) + config.pan_speed_z)

    for x, z in [(x0, z0), (x0, z1), (x1, z0), (x1, z1)]:
        for px, pz in [(pan_x, pan_z), (-pan_x, -pan_z), (pan_x, -pan_z)]:
            machine.markers.clear()
            machine.summon(x, y0, z, config.marker_tag)
            machine.set(pack.state.pan_x, px)
            machine.set(pack.state.pan_z, pz)
            machine.set(pack.state.frame, 0)
            for surface in pack.surfaces.values():
                machine.call(surface)


def test_load_config_overrides(tmp_path):
    path = tmp_path / "grapher.json"
    path.write_text(json.dumps({"resolution": 100, "sine_recenter": -0.5}), encoding="utf-8")
    config = load_config(path, tick_surface="sine", resolution=None)
    assert config.resolution == 100
    assert config.sine_recenter == -0.5
    assert config.tick_surface == "sine"


def test_load_config_rejects_unknown_keys(tmp_path):
    path = tmp_path / "grapher.json"
    path.write_text(json.dumps({"resolutoin": 100}), encoding="utf-8")
    with pytest.raises(ValueError, match="resolutoin"):
        load_config(path)


def test_canonical_json_is_stable():
    assert GrapherConfig().canonical_json() == GrapherConfig().canonical_json()
    assert GrapherConfig().canonical_json() != GrapherConfig(resolution=100).canonical_json()


def test_rendered_literals_fit_a_register():
    limit = int_bounds(32)[1]
    pack = build_pack(GrapherConfig(frame_speed=1000.0, sine_recenter=-1000.0, ripple_divisor=1000))
    for fid, body in pack.functions.items():
        for cmd in body:
            numbers = [int(t) for t in cmd.render().replace("..", " ").split() if t.lstrip("-").isdigit()]
            assert all(abs(n) <= limit for n in numbers), (fid, cmd.render())


def test_load_config_reports_non_numeric_values(tmp_path):
    path = tmp_path / "grapher.json"
    path.write_text(json.dumps({"resolution": "300"}), encoding="utf-8")
    with pytest.raises(ValueError, match="FATAL: resolution must be a number"):
        load_config(path)
