"""
valija/supplement.py
====================

The per-plugin "subjective supplement" of an object: the extension
object consulted once lookup on the object's real chain has failed.
"""

from __future__ import annotations

from typing import Any

from valija.host import Host
from valija.shadows import ShadowResolver

__all__ = ["SupplementResolver"]


class SupplementResolver:
    """
    A callable's supplement is its own shadow, which carries patched
    statics.  Anything else gets the pseudo-prototype of its real direct
    constructor, so plain instances see monkey-patched methods while
    the real prototype stays frozen.
    """

    def __init__(self, host: Host, shadows: ShadowResolver) -> None:
        self._host = host
        self._shadows = shadows

    def supplement_of(self, obj: Any) -> Any:
        if self._host.is_callable(obj):
            return self._shadows.shadow_of(obj)
        ctor = self._host.direct_constructor(obj)
        return self._shadows.fake_proto_of(ctor)
