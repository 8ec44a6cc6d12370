"""
valija/shadows.py
=================

The per-plugin table of shadows and the lazy resolver that fills it.

A shadow is the monkey-patchable stand-in for a real, frozen callable.
It is a ``JSObject`` chained from the Disfunction prototype holding
copies of the callable's statics plus a ``prototype`` member: the
pseudo-prototype Valija code sees as ``func.prototype``.

Shadow chains mirror the real ancestry:

    shadow_of(Sub).prototype  ──▶  shadow_of(Base).prototype  ──▶  ...  ──▶  Object pseudo-prototype
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, Iterator, Optional

from valija.config import DEFAULT_CONFIG, RuntimeConfig
from valija.disfunction import Roots
from valija.errors import InternalError, ValijaErrorCodes
from valija.host import UNDEFINED, Host, JSObject

logger = logging.getLogger(__name__)

__all__ = ["ShadowTable", "ShadowResolver"]


class ShadowTable:
    """
    Function category → shadow.

    Grows monotonically.  One table per runtime instance; every module
    instance sharing that runtime shares its table.
    """

    def __init__(self) -> None:
        self._shadows: Dict[Hashable, JSObject] = {}

    def get(self, category: Hashable) -> Optional[JSObject]:
        return self._shadows.get(category)

    def register(self, category: Hashable, shadow: JSObject) -> JSObject:
        if category in self._shadows:
            raise InternalError(
                f"shadow for category {category!r} registered twice",
                code=ValijaErrorCodes.DUPLICATE_SHADOW,
            )
        self._shadows[category] = shadow
        return shadow

    def categories(self) -> Iterator[Hashable]:
        return iter(self._shadows)

    def __contains__(self, category: object) -> bool:
        return category in self._shadows

    def __len__(self) -> int:
        return len(self._shadows)


class ShadowResolver:
    """
    Resolves the shadow of any real callable, building missing ones.

    The shadows of the host's ``Object`` and ``Function`` are seeded at
    construction, before any resolution can recurse into them.
    """

    def __init__(
        self,
        host: Host,
        roots: Roots,
        forwarder: Callable[[str], JSObject],
        config: RuntimeConfig = DEFAULT_CONFIG,
    ) -> None:
        self._host = host
        self._roots = roots
        self._forwarder = forwarder
        self._config = config
        self.table = ShadowTable()

        self.table.register(host.func_category(host.Object), roots.object_shadow)
        self.table.register(host.func_category(host.Function), roots.disfunction)

    def shadow_of(self, func: Any) -> JSObject:
        """
        Return the monkey-patchable shadow of ``func``'s category,
        creating it and its parents as needed.
        """
        self._host.enforce_type(func, "function", "shadow_of() argument")
        category = self._host.func_category(func)
        shadow = self.table.get(category)
        if shadow is None:
            shadow = self._build(func, category)
        return shadow

    def fake_proto_of(self, func: Any) -> Any:
        """
        Handle Valija ``func.prototype``.

        A real callable answers with its shadow's pseudo-prototype; an
        object answers with its own ``prototype``; anything else with
        ``undefined``.
        """
        if self._host.is_callable(func):
            return self.shadow_of(func).lookup("prototype")
        if isinstance(func, JSObject):
            return func.lookup("prototype")
        return UNDEFINED

    def _build(self, func: Any, category: Hashable) -> JSObject:
        host = self._host
        skip = self._config.coercion_members

        parent_func = host.super_ctor(func)
        if host.is_callable(parent_func):
            parent = self.shadow_of(parent_func)
        else:
            parent = self._roots.object_shadow

        parent_proto = parent.lookup("prototype")
        if not isinstance(parent_proto, JSObject):
            parent_proto = self._roots.object_prototype

        shadow = host.beget(self._roots.disfunction_prototype)
        proto = host.beget(parent_proto)
        shadow.put("prototype", proto, enumerable=False)
        proto.put("constructor", func, enumerable=False)

        for name in host.own_property_names(func, exclude=skip):
            shadow.put(name, host.get(func, name),
                       enumerable=host.is_enumerable(func, name))

        for name in host.method_names(func, exclude=skip):
            proto.put(name, self._forwarder(name), enumerable=False)

        self.table.register(category, shadow)
        logger.debug(
            "created shadow for %r (category %r, parent %r)",
            func, category, parent_func,
        )
        return shadow
