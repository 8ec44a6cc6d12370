"""
valija/mitigation.py
====================

Interface to the source-to-source gotcha mitigator.

The rewriter itself lives outside this package.  What lives here is its
option record and the dispatch rule: with every flag off the source
passes through untouched, so an absent rewriter is only an error when
something was actually asked of it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Protocol, Tuple

from valija.errors import ConfigurationError, ValijaErrorCodes

logger = logging.getLogger(__name__)

__all__ = ["MitigateOptions", "Mitigator", "mitigate"]

# camelCase keys of the container's option record.
_WIRE_NAMES = {
    "rewritePropertyUpdateExpr": "rewrite_property_update_expr",
    "rewritePropertyCompoundAssignmentExpr": "rewrite_property_compound_assignment_expr",
}


@dataclass(frozen=True)
class MitigateOptions:
    """
    Independent rewrite flags.

    ``rewrite_property_update_expr`` turns ``o.x++`` into
    ``o[(1, "x")]++``; ``rewrite_property_compound_assignment_expr``
    does the same for ``o.x += 1`` and friends.  Either way the base and
    the property name are evaluated exactly once, left to right, before
    the read-modify-write.
    """

    rewrite_property_update_expr: bool = False
    rewrite_property_compound_assignment_expr: bool = False

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "MitigateOptions":
        """Build from either the camelCase or the snake_case spelling.  Values must be booleans."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            attr = _WIRE_NAMES.get(key, key)
            if attr not in known:
                raise ConfigurationError(
                    f"unknown mitigation option {key!r}",
                    code=ValijaErrorCodes.BAD_OPTION,
                )
            if not isinstance(value, bool):
                raise ConfigurationError(
                    f"mitigation option {key!r} must be a boolean, got {value!r}",
                    code=ValijaErrorCodes.BAD_OPTION,
                )
            kwargs[attr] = value
        return cls(**kwargs)

    def enabled(self) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(self) if getattr(self, f.name))

    def any_enabled(self) -> bool:
        return bool(self.enabled())


class Mitigator(Protocol):
    def __call__(self, source: str, options: MitigateOptions) -> str: ...


def mitigate(
    source: str,
    options: Optional[MitigateOptions] = None,
    rewriter: Optional[Mitigator] = None,
) -> str:
    """Run ``rewriter`` over ``source`` if any option asks for it."""
    options = options or MitigateOptions()
    if not options.any_enabled():
        return source
    if rewriter is None:
        raise ConfigurationError(
            f"mitigation requested ({', '.join(options.enabled())}) "
            "but no rewriter is configured",
            code=ValijaErrorCodes.MISSING_REWRITER,
        )
    logger.debug("mitigating %d chars with %s", len(source), ", ".join(options.enabled()))
    return rewriter(source, options)
