import pytest

from grapher_core.config import GrapherConfig
from grapher_core.registers import reads_before_writes
from grapher_compile.pack import build_pack


def run_sine(pack, machine, x):
    machine.set(pack.sine.input, x)
    machine.call(pack.calc_sine)
    return machine.get(pack.sine.output)


@pytest.fixture(params=[100, 300])
def sine_pack(request):
    pack = build_pack(GrapherConfig(resolution=request.param))
    return pack, pack.machine()


def test_zero_on_whole_inputs(sine_pack):
    pack, machine = sine_pack
    r = pack.config.resolution
    for k in range(-6, 7):
        assert run_sine(pack, machine, k * r) == 0


def test_matches_reference_and_stays_bounded(sine_pack, reference_sine):
    pack, machine = sine_pack
    r = pack.config.resolution
    for x in range(-3 * r, 3 * r + 1, 7):
        out = run_sine(pack, machine, x)
        assert out == reference_sine(x, r)
        assert -16 * r / 5 <= out <= 16 * r / 5


def test_odd_symmetry_per_half_period(sine_pack):
    pack, machine = sine_pack
    r = pack.config.resolution
    for x in range(-2 * r, 2 * r, 11):
        assert run_sine(pack, machine, x) == -run_sine(pack, machine, x + r)


def test_peak_values():
    pack = build_pack(GrapherConfig(resolution=300))
    machine = pack.machine()
    assert run_sine(pack, machine, 150) == 252
    assert run_sine(pack, machine, 450) == -252

    pack = build_pack(GrapherConfig(resolution=100))
    machine = pack.machine()
    assert run_sine(pack, machine, 50) == 84


def test_input_is_clobbered_to_parity(pack, machine):
    run_sine(pack, machine, 1234)
    assert machine.get(pack.sine.input) == 1234 % 600


@pytest.mark.parametrize("r", [100, 300, 812])
def test_denominator_is_always_positive(r):
    peaks = [(r - m) * m for m in range(r)]
    assert max(peaks) == r * r // 4
    assert all(5 * r * r - p > 0 for p in peaks)


def test_only_reads_its_argument(pack):
    body = pack.functions[pack.calc_sine]
    constants = pack.allocator.constants.values()
    assert reads_before_writes(body, pack.functions, ignore=constants) == [pack.sine.input]
