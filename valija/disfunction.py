"""
valija/disfunction.py
=====================

Emulated function objects ("disfunctions") and the root objects every
shadow and disfunction hangs off.

A disfunction is a plain ``JSObject`` chained from the Disfunction
prototype.  It is not itself a Python callable.  Its ``call`` member is
the raw callable, whose first parameter is the reserved receiver slot;
``apply`` and ``bind`` are genuine callables closing over it.

Provides:

* ``Roots``               – the seeded Object/Function emulation roots
* ``seed_roots``          – builds ``Roots`` for one runtime instance
* ``DisfunctionFactory``  – ``dis(raw, name=None)``
* ``header_pattern`` / ``render_header`` – redacted ``toString`` text
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Pattern, Sequence, Tuple

from valija.config import DEFAULT_CONFIG, RuntimeConfig
from valija.host import UNDEFINED, USELESS, Host, JSObject

logger = logging.getLogger(__name__)

__all__ = [
    "Roots",
    "seed_roots",
    "header_pattern",
    "render_header",
    "DisfunctionFactory",
]


@dataclass(frozen=True)
class Roots:
    """
    The emulation roots of one runtime instance.

    ``object_prototype`` is the one monkey-patchable ``Object.prototype``.
    ``disfunction_prototype`` is the monkey-patchable ``Function.prototype``
    and ``disfunction`` the ``Function`` that owns it.  ``object_shadow``
    is the shadow seeded for the host's ``Object``.
    """

    object_prototype: JSObject
    disfunction_prototype: JSObject
    disfunction: JSObject
    object_shadow: JSObject


def seed_roots(host: Host, config: RuntimeConfig = DEFAULT_CONFIG) -> Roots:
    object_prototype = host.beget(host.object_prototype)
    object_prototype.put("constructor", host.Object, enumerable=False)

    disfunction_prototype = host.beget(object_prototype)
    disfunction = host.beget(disfunction_prototype)
    disfunction.put("prototype", disfunction_prototype, enumerable=False)
    disfunction.put("length", 1, enumerable=False)
    disfunction_prototype.put("constructor", disfunction, enumerable=False)

    source = config.disfunction_source

    def to_string(*_: Any) -> str:
        return source

    disfunction_prototype.put("toString", to_string, enumerable=False)

    object_shadow = host.beget(disfunction_prototype)
    object_shadow.put("prototype", object_prototype, enumerable=False)

    return Roots(
        object_prototype=object_prototype,
        disfunction_prototype=disfunction_prototype,
        disfunction=disfunction,
        object_shadow=object_shadow,
    )


# ===================================================================== #
#  Header parsing                                                       #
# ===================================================================== #

def header_pattern(receiver_param: str = "dis") -> Pattern[str]:
    """
    Pattern over a callable's source text.

    Group 1 is the function name, group 2 the parameter list with the
    leading receiver parameter (``dis`` or ``$dis``, optionally
    annotated) skipped.  Accepts ``function``, ``def`` and ``async def``
    headers; the first header in the text wins.
    """
    return re.compile(
        # Name: anything up to whitespace or an open paren, so we don't
        # care which identifier charset the source uses.
        r"^[ \t]*(?:async[ \t]+)?(?:function|def)\b\s*([^\s(]*)\s*\("
        r"(?:\$?" + re.escape(receiver_param) + r"\b\s*(?::[^,)]*)?,?\s*)?"
        # A close paren inside a default value ends the list early.
        r"([^)]*)\)",
        re.MULTILINE,
    )


_DEFAULT_HEADER = header_pattern()


def render_header(
    source: Optional[str],
    name: Optional[str] = None,
    *,
    pattern: Pattern[str] = _DEFAULT_HEADER,
    body: str = DEFAULT_CONFIG.redacted_body,
) -> Tuple[str, Optional[str]]:
    """
    Return ``(print_rep, name)`` for ``source``.

    ``name`` wins over the name recovered from the header.  If the
    header does not match, the generic representation is used.
    """
    match = pattern.search(source) if source else None
    if match is None:
        logger.debug("function header did not match; using generic representation")
        return f"function {name or ''}() {{\n  {body}\n}}", name
    if name is None:
        name = match.group(1)
    params = match.group(2).strip()
    return f"function {name}({params}) {{\n  {body}\n}}", name


# ===================================================================== #
#  Factory                                                              #
# ===================================================================== #

class DisfunctionFactory:
    """Builds disfunctions for one runtime instance."""

    def __init__(self, host: Host, roots: Roots, config: RuntimeConfig = DEFAULT_CONFIG) -> None:
        self._host = host
        self._roots = roots
        self._config = config
        self._pattern = header_pattern(config.receiver_param)

    def dis(self, raw: Callable[..., Any], name: Optional[str] = None) -> JSObject:
        """Handle Valija ``function name(...) {...}``."""
        host = self._host
        host.enforce_type(raw, "function", "dis() argument")

        result = host.beget(self._roots.disfunction_prototype)

        def apply(self_: Any, args: Optional[Sequence[Any]] = None) -> Any:
            if args is None or args is UNDEFINED:
                args = ()
            return host.call(raw, USELESS, [self_, *args])

        def bind(*left: Any) -> Callable[..., Any]:
            def bound(*more: Any) -> Any:
                return host.call(raw, USELESS, [*left, *more])
            return bound

        result.put("call", raw, enumerable=False)
        result.put("apply", apply, enumerable=False)
        result.put("bind", bind, enumerable=False)

        prototype = host.beget(self._roots.object_prototype)
        prototype.put("constructor", result, enumerable=False)
        result.put("prototype", prototype, enumerable=False)
        # Clamped: a raw callable with no receiver slot reports 0, not -1.
        result.put("length", max(host.arity(raw) - 1, 0), enumerable=False)

        print_rep, name = render_header(
            host.source_text(raw),
            name,
            pattern=self._pattern,
            body=self._config.redacted_body,
        )

        def to_string(*_: Any) -> str:
            return print_rep

        result.put("toString", to_string, enumerable=False)

        if name:
            result.put("name", name, enumerable=False)
        return result

    def forwarder(self, name: str) -> JSObject:
        """
        A disfunction that calls the receiver's real ``name`` method.

        Installed on pseudo-prototypes for methods nobody has overridden.
        """
        host = self._host

        def forward(dis: Any, *args: Any) -> Any:
            return host.call(host.get(dis, name), dis, args)

        return self.dis(forward, name)
