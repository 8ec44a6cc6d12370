"""
valija/access.py
================

The property access protocol: every Valija-level object operation goes
through here.

Reads consult, in order, the real own property, the real (frozen)
chain, and then the object's supplement.  Writes and deletes on a real
callable go to its shadow, never to the callable itself.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from valija.config import DEFAULT_CONFIG, RuntimeConfig
from valija.disfunction import Roots
from valija.errors import NotCallableError
from valija.host import UNDEFINED, USELESS, Host, JSObject
from valija.shadows import ShadowResolver
from valija.supplement import SupplementResolver

__all__ = ["PropertyAccess"]


class PropertyAccess:
    """Mediates read/write/delete/enumerate/typeof/instanceof/call/new."""

    def __init__(
        self,
        host: Host,
        roots: Roots,
        shadows: ShadowResolver,
        supplements: SupplementResolver,
        config: RuntimeConfig = DEFAULT_CONFIG,
    ) -> None:
        self._host = host
        self._roots = roots
        self._shadows = shadows
        self._supplements = supplements
        self._config = config

    # -- type tests ------------------------------------------------------
    def type_of(self, obj: Any) -> str:
        """
        Handle Valija ``typeof obj``.

        Objects inheriting from the Disfunction prototype answer
        ``"function"``.
        """
        result = self._host.type_tag(obj)
        if result != "object" or obj is None:
            return result
        if self._host.inherits_from(obj, self._roots.disfunction_prototype):
            return "function"
        return result

    def instance_of(self, obj: Any, func: Any) -> bool:
        """
        Handle Valija ``obj instanceof func``.

        True if the real ``instanceof`` holds, or if ``obj`` inherits
        from ``func``'s fake prototype.
        """
        host = self._host
        if host.is_callable(func) and host.instance_of(obj, func):
            return True
        return host.inherits_from(obj, self._shadows.fake_proto_of(func))

    # -- property access ---------------------------------------------------
    def read(self, obj: Any, name: str) -> Any:
        """Handle Valija ``obj[name]``."""
        host = self._host
        if host.is_callable(obj):
            return self._shadows.shadow_of(obj).lookup(name)
        if host.has_own(obj, name):
            return host.get(obj, name)

        # Inherited real members win over the supplement.
        if host.has(obj, name):
            return host.get(obj, name)

        step_parent = self._shadows.fake_proto_of(host.direct_constructor(obj))
        if (isinstance(step_parent, JSObject)
                and step_parent.has(name)
                and not self._config.is_coercion_member(name)):
            return step_parent.lookup(name)
        return host.get(obj, name)

    def write(self, obj: Any, name: str, value: Any) -> Any:
        """Handle Valija ``obj[name] = value``.  Returns ``value``."""
        host = self._host
        if host.is_callable(obj):
            self._shadows.shadow_of(obj).put(name, value)
        else:
            host.put(obj, name, value)
        return value

    def remove(self, obj: Any, name: str) -> bool:
        """Handle Valija ``delete obj[name]``."""
        host = self._host
        if host.is_callable(obj):
            return self._shadows.shadow_of(obj).delete(name)
        return host.delete(obj, name)

    def keys(self, obj: Any) -> List[str]:
        """Handle Valija ``for (name in obj)``."""
        host = self._host
        result = host.enumerable_keys(obj)
        supplement = self._supplements.supplement_of(obj)
        if isinstance(supplement, JSObject):
            hidden = self._config.hidden_supplement_names
            for name in supplement.enumerable_keys():
                if not host.has(obj, name) and name not in hidden:
                    result.append(name)
        return result

    def can_read_rev(self, name: str, obj: Any) -> bool:
        if self._host.has(obj, name):
            return True
        supplement = self._supplements.supplement_of(obj)
        return isinstance(supplement, JSObject) and supplement.has(name)

    # -- calls -------------------------------------------------------------
    def apply(self, func: Any, this: Any, args: Sequence[Any]) -> Any:
        """
        Apply ``func`` to ``this`` and ``args``.

        Real callables go straight to the host; disfunctions go through
        their own ``apply`` member.
        """
        host = self._host
        if host.is_callable(func):
            return host.call(func, this, args)
        if isinstance(func, JSObject):
            applier = func.lookup("apply")
            if host.is_callable(applier):
                return host.call(applier, func, [this, list(args)])
        raise NotCallableError(repr(func), actual_type=self.type_of(func))

    def call_func(self, func: Any, args: Sequence[Any]) -> Any:
        """Handle Valija ``func(args...)``.  No usable ``this`` is passed."""
        return self.apply(func, USELESS, args)

    def call_method(self, obj: Any, name: str, args: Sequence[Any]) -> Any:
        """Handle Valija ``obj[name](args...)``."""
        method = self.read(obj, name)
        if method is UNDEFINED:
            raise NotCallableError(f"{name!r}", actual_type="undefined")
        return self.apply(method, obj, args)

    def construct(self, ctor: Any, args: Sequence[Any]) -> Any:
        """Handle Valija ``new ctor(args...)``."""
        host = self._host
        if host.is_callable(ctor):
            return host.construct(ctor, args)
        prototype = host.get(ctor, "prototype")
        if not isinstance(prototype, JSObject):
            prototype = self._roots.object_prototype
        result = host.beget(prototype)
        alt_result = self.apply(ctor, result, args)
        if isinstance(alt_result, JSObject) or host.is_callable(alt_result):
            return alt_result
        return result
