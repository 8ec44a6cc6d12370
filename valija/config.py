"""
valija/config.py
================

Tuning knobs for the Valija runtime.

``RuntimeConfig`` is passed to :func:`valija.runtime.make_valija`.  Its
``validate()`` method returns warnings rather than raising; the maker
logs them and carries on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

__all__ = ["RuntimeConfig", "DEFAULT_CONFIG"]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class RuntimeConfig:
    """Tuning knobs for the Valija runtime."""

    # Value-coercion members.  Never copied into a shadow, never given a
    # forwarding stub, never served from a supplement.
    coercion_members: Tuple[str, ...] = ("valueOf",)
    # Supplement names ``keys()`` never appends.
    hidden_supplement_names: Tuple[str, ...] = ("constructor",)
    # Reserved leading receiver parameter of raw callables.
    receiver_param: str = "dis"
    redacted_body: str = "[cajoled code]"
    disfunction_source: str = "disfunction(var_args){\n   [cajoled code]\n}"

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if not _IDENTIFIER.match(self.receiver_param):
            warnings.append(
                f"receiver_param {self.receiver_param!r} is not an identifier; "
                "function headers will not have it stripped"
            )
        if "constructor" in self.coercion_members:
            warnings.append(
                "coercion_members contains 'constructor'; shadows will "
                "still carry their back-reference"
            )
        if not self.redacted_body.strip():
            warnings.append("redacted_body is blank")
        for name in self.coercion_members + self.hidden_supplement_names:
            if not isinstance(name, str):
                warnings.append(f"member name {name!r} is not a string")
        return warnings

    def is_coercion_member(self, name: str) -> bool:
        return name in self.coercion_members


DEFAULT_CONFIG = RuntimeConfig()
