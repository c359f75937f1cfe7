"""Dependency injection through circuits.

A circuit holds at most one instance per wired type and builds instances on
demand from their declared dependencies, synchronously with `tap` or on the
asyncio path with `tap_async`.

Exports:
- `Circuit`, `tap`, `tap_async`: resolution, with a lazily created default circuit.
- Wiring: `set_requires`/`requires`, `set_standalone`/`standalone`,
  `set_singleton`/`singleton`, `set_preconstruct`/`preconstruct`,
  `set_preconstruct_async`/`preconstruct_async`, `set_setup`/`setup`,
  `set_preloads`/`preloads`, `unwire`, `is_wired`.
- Construction context: `Context`, `get_context`, `get_circuit`, `link`.
- Providers: `Providable`, `ProviderInfo`, `ValueProvider`, `AsyncValueProvider`
  and the `create_*_provider` factories.
- Utilities: `combine`, `with_circuit`, `conditional`, `conditional_async`, `lazy`.
- Errors: `ResolutionError` and its subclasses.
"""

from ._circuit import Circuit, link, tap, tap_async
from ._context import Context, get_circuit, get_context
from ._definition import (
    Definition,
    Registry,
    is_wired,
    preconstruct,
    preconstruct_async,
    preloads,
    registry,
    requires,
    set_preconstruct,
    set_preconstruct_async,
    set_preloads,
    set_requires,
    set_setup,
    set_singleton,
    set_standalone,
    setup,
    singleton,
    standalone,
    unwire,
)
from ._errors import (
    AlreadyInitializedError,
    AsyncDependencyError,
    CircularDependencyError,
    InvalidProvidableError,
    NoContextError,
    ResolutionError,
    UnwiredError,
)
from ._provider import AsyncValueProvider, Providable, ProviderInfo, ValueProvider
from ._providers import (
    BasicValueProvider,
    create_async_dynamic_provider,
    create_async_provider,
    create_async_static_provider,
    create_dynamic_provider,
    create_provider,
    create_static_provider,
)
from ._utilities import (
    combine,
    conditional,
    conditional_async,
    lazy,
    set_conditional,
    set_conditional_async,
    with_circuit,
)


__all__ = [
    "AlreadyInitializedError",
    "AsyncDependencyError",
    "AsyncValueProvider",
    "BasicValueProvider",
    "CircularDependencyError",
    "Circuit",
    "Context",
    "Definition",
    "InvalidProvidableError",
    "NoContextError",
    "Providable",
    "ProviderInfo",
    "Registry",
    "ResolutionError",
    "UnwiredError",
    "ValueProvider",
    "combine",
    "conditional",
    "conditional_async",
    "create_async_dynamic_provider",
    "create_async_provider",
    "create_async_static_provider",
    "create_dynamic_provider",
    "create_provider",
    "create_static_provider",
    "get_circuit",
    "get_context",
    "is_wired",
    "lazy",
    "link",
    "preconstruct",
    "preconstruct_async",
    "preloads",
    "registry",
    "requires",
    "set_conditional",
    "set_conditional_async",
    "set_preconstruct",
    "set_preconstruct_async",
    "set_preloads",
    "set_requires",
    "set_setup",
    "set_singleton",
    "set_standalone",
    "setup",
    "singleton",
    "standalone",
    "tap",
    "tap_async",
    "unwire",
    "with_circuit",
]
