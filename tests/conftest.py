# tests/conftest.py
"""
Shared fixtures: a fresh substrate with a couple of frozen host
constructors, an outer binding environment, and a runtime over them.
"""

import math

import pytest

from valija import Host, JSObject, make_valija


def _point_init(this, x, y):
    this.put("x", x)
    this.put("y", y)


def _point3_init(this, x, y, z):
    _point_init(this, x, y)
    this.put("z", z)


@pytest.fixture
def host():
    return Host()


@pytest.fixture
def point_ctor(host):
    """Frozen host ``Point`` with a ``norm`` method and two statics."""
    return host.define_ctor(
        "Point",
        _point_init,
        methods={
            "norm": lambda this: math.hypot(this.lookup("x"), this.lookup("y")),
            "valueOf": lambda this: this.lookup("x"),
        },
        statics={"dimensions": 2, "valueOf": "static-coercer"},
    )


@pytest.fixture
def point3_ctor(host, point_ctor):
    """Frozen host ``Point3`` inheriting from ``Point``."""
    return host.define_ctor(
        "Point3",
        _point3_init,
        super_ctor=point_ctor,
        methods={"depth": lambda this: this.lookup("z")},
    )


@pytest.fixture
def outers(host):
    return JSObject(host.object_prototype)


@pytest.fixture
def valija(host, outers):
    return make_valija(outers, host=host)


@pytest.fixture
def plain(host):
    """Factory for plain ``{}``-style objects."""
    def make(**props):
        return JSObject(host.object_prototype, props)
    return make
