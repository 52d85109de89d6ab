import pytest

from grapher_core.config import GrapherConfig
from grapher_compile.pack import build_pack


def periodic(x: int, r: int) -> int:
    """Integer reference for calc_sine with floor modulo."""
    mod_x = x % r
    mod_exp = (r - mod_x) * mod_x
    out = (16 * r * mod_exp) // (5 * r * r - mod_exp)
    if x % (2 * r) > r:
        out = -out
    return out


@pytest.fixture
def reference_sine():
    return periodic


@pytest.fixture
def pack():
    return build_pack(GrapherConfig())


@pytest.fixture
def machine(pack):
    return pack.machine()
