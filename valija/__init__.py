"""valija — mutable prototype emulation over a frozen object substrate.

Legacy code expects to monkey-patch shared prototypes such as
``Object.prototype``.  Inside a capability-secure container those
prototypes are frozen.  ``valija`` keeps a per-plugin table of mutable
"shadows" and routes every object operation through it, so patches
appear to work while the real objects never change.

Submodules
----------
errors
    Exception hierarchy and ``VLJ-NNNN`` error codes.

config
    ``RuntimeConfig`` tuning knobs.

host
    In-memory capability-secure substrate: ``JSObject``,
    ``HostFunction``, ``Host``.

disfunction
    Emulated function objects and the seeded emulation roots.

shadows
    ``ShadowTable`` and the lazy ``ShadowResolver``.

supplement
    Per-object "subjective supplement" lookup.

access
    The property access protocol.

runtime
    ``make_valija`` and the frozen ``Valija`` façade.

mitigation
    Option record and dispatch for the source gotcha mitigator.

main
    CLI entry-point (``python -m valija``).

Usage
-----
Programmatic::

    from valija import Host, JSObject, make_valija

    host = Host()
    valija = make_valija(JSObject(host.object_prototype), host=host)
    ObjectProto = valija.read(host.Object, "prototype")
    valija.set(ObjectProto, "greet", valija.dis(lambda dis: "hi"))
    valija.call_method(JSObject(host.object_prototype), "greet", [])   # "hi"
"""

from __future__ import annotations

from valija.config import RuntimeConfig
from valija.errors import (
    ConfigurationError,
    FrozenObjectError,
    NotCallableError,
    ValijaError,
    ValijaReferenceError,
    ValijaTypeError,
)
from valija.host import UNDEFINED, USELESS, Host, HostFunction, JSObject
from valija.mitigation import MitigateOptions, mitigate
from valija.runtime import Valija, make_valija

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "UNDEFINED",
    "USELESS",
    "Host",
    "HostFunction",
    "JSObject",
    "RuntimeConfig",
    "Valija",
    "make_valija",
    "MitigateOptions",
    "mitigate",
    "ValijaError",
    "ValijaTypeError",
    "NotCallableError",
    "FrozenObjectError",
    "ValijaReferenceError",
    "ConfigurationError",
]
