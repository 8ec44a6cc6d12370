"""
valija/runtime.py
=================

The Valija runtime maker.

``make_valija(outers)`` builds one plugin instance of the runtime: its
own emulation roots, its own shadow table, and a frozen ``Valija``
façade over them.  Every module instance handed the same façade shares
that table, and so sees every other instance's monkey-patches.  Two
façades never share anything: the plugin, not the module, is the unit
of isolation.

Usage::

    from valija import Host, JSObject, make_valija

    host = Host()
    outers = JSObject(host.object_prototype)
    valija = make_valija(outers, host=host)

    def point(dis, x, y):
        valija.set(dis, "x", x)
        valija.set(dis, "y", y)

    Pt = valija.dis(point)
    valija.set(valija.read(Pt, "prototype"), "dist",
               valija.dis(lambda dis: math.hypot(valija.read(dis, "x"),
                                                 valija.read(dis, "y"))))
    p = valija.construct(Pt, [3, 4])
    valija.call_method(p, "dist", [])      # 5.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from valija.access import PropertyAccess
from valija.config import RuntimeConfig
from valija.disfunction import DisfunctionFactory, Roots, seed_roots
from valija.errors import ValijaReferenceError
from valija.host import UNDEFINED, Host, JSObject
from valija.shadows import ShadowResolver
from valija.supplement import SupplementResolver

logger = logging.getLogger(__name__)

__all__ = ["Valija", "make_valija"]


@dataclass(frozen=True, eq=False)
class Valija:
    """
    Frozen façade over one plugin instance of the runtime.

    Attributes cannot be rebound.  State lives in the shadow table and
    the emulation roots, which are shared by everyone holding this
    façade.
    """

    host: Host
    config: RuntimeConfig
    roots: Roots
    _outers: Any
    _access: PropertyAccess
    _shadows: ShadowResolver
    _supplements: SupplementResolver
    _factory: DisfunctionFactory

    # -- typeof / instanceof -----------------------------------------------
    def type_of(self, obj: Any) -> str:
        return self._access.type_of(obj)

    def instance_of(self, obj: Any, func: Any) -> bool:
        return self._access.instance_of(obj, func)

    # -- property access ---------------------------------------------------
    def read(self, obj: Any, name: str) -> Any:
        return self._access.read(obj, name)

    def set(self, obj: Any, name: str, value: Any) -> Any:
        return self._access.write(obj, name, value)

    def remove(self, obj: Any, name: str) -> bool:
        return self._access.remove(obj, name)

    def keys(self, obj: Any) -> List[str]:
        return self._access.keys(obj)

    def can_read_rev(self, name: str, obj: Any) -> bool:
        return self._access.can_read_rev(name, obj)

    # -- calls -------------------------------------------------------------
    def call_func(self, func: Any, args: Sequence[Any] = ()) -> Any:
        return self._access.call_func(func, args)

    def call_method(self, obj: Any, name: str, args: Sequence[Any] = ()) -> Any:
        return self._access.call_method(obj, name, args)

    def construct(self, ctor: Any, args: Sequence[Any] = ()) -> Any:
        return self._access.construct(ctor, args)

    def dis(self, raw: Callable[..., Any], name: Optional[str] = None) -> JSObject:
        return self._factory.dis(raw, name)

    # -- outers ------------------------------------------------------------
    def get_outers(self) -> JSObject:
        self.host.enforce_type(self._outers, "object", "outers")
        return self._outers

    def read_outer(self, name: str) -> Any:
        if self.can_read_rev(name, self._outers):
            return self.read(self._outers, name)
        raise ValijaReferenceError(name)

    def set_outer(self, name: str, value: Any) -> Any:
        return self.host.put(self._outers, name, value)

    def init_outer(self, name: str) -> None:
        """Declare a top-level binding without clobbering an existing one."""
        if self.can_read_rev(name, self._outers):
            return
        self.set(self._outers, name, UNDEFINED)

    # -- introspection -----------------------------------------------------
    def shadow_of(self, func: Any) -> JSObject:
        return self._shadows.shadow_of(func)

    def fake_proto_of(self, func: Any) -> Any:
        return self._shadows.fake_proto_of(func)

    def supplement_of(self, obj: Any) -> Any:
        return self._supplements.supplement_of(obj)

    @property
    def shadow_count(self) -> int:
        return len(self._shadows.table)


def make_valija(
    outers: Any,
    *,
    host: Optional[Host] = None,
    config: Optional[RuntimeConfig] = None,
) -> Valija:
    """
    Build one plugin instance of the runtime over ``outers``.

    ``outers`` is the global-like binding environment; its ``Function``
    binding is replaced by the emulated, monkey-patchable ``Function``.
    """
    host = host or Host()
    config = config or RuntimeConfig()

    for warning in config.validate():
        logger.warning("RuntimeConfig: %s", warning)

    roots = seed_roots(host, config)
    factory = DisfunctionFactory(host, roots, config)
    shadows = ShadowResolver(host, roots, factory.forwarder, config)
    supplements = SupplementResolver(host, shadows)
    access = PropertyAccess(host, roots, shadows, supplements, config)

    host.put(outers, "Function", roots.disfunction)

    logger.info("valija runtime ready (%d seeded shadows)", len(shadows.table))
    return Valija(
        host=host,
        config=config,
        roots=roots,
        _outers=outers,
        _access=access,
        _shadows=shadows,
        _supplements=supplements,
        _factory=factory,
    )
