from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from ._context import Context, activate, current_context
from ._definition import Definition, registry
from ._errors import (
    AlreadyInitializedError,
    AsyncDependencyError,
    CircularDependencyError,
    NoContextError,
    UnwiredError,
)
from ._provider import provider_info


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Sequence

    T = TypeVar("T")

# (circuit, type) pairs whose async build is an ancestor of the running task
_building: ContextVar[tuple[tuple[Circuit, type], ...]] = ContextVar("litewire_building", default=())


class Circuit:
    """Container holding at most one instance per type.

    - `tap` builds synchronously, `tap_async` builds on the asyncio path
    - concurrent `tap_async` calls for one type share a single construction
    - singleton-bound types are always resolved through their bound circuit
    - the circuit installs itself, so `Circuit` can be declared as a dependency.
    """

    _default: ClassVar[Circuit | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._instances: dict[type, object] = {}
        self._pending: dict[type, asyncio.Task[object]] = {}
        self._lock = threading.RLock()
        self.install(Circuit, self)

    @staticmethod
    def get_default() -> Circuit:
        """Return the process-wide default circuit, created on first use."""
        if Circuit._default is None:
            with Circuit._default_lock:
                if Circuit._default is None:
                    Circuit._default = Circuit()
        return Circuit._default

    def tap(self, target: type[T]) -> Any:
        """Resolve `target` synchronously.

        Raises `AsyncDependencyError` when `target` (or one of its dependencies)
        needs the async path.
        """
        return self._resolve(target, None)

    async def tap_async(self, target: type[T]) -> Any:
        """Resolve `target`, awaiting async construction, setup and providers."""
        return await self._resolve_async(target, None)

    def install(self, target: type[T], instance: T) -> T:
        """Put a pre-built instance in the cache. `target` does not need to be wired."""
        with self._lock:
            if target in self._instances:
                raise AlreadyInitializedError(target)
            self._instances[target] = instance
        return instance

    def uninstall(self, target: type[T]) -> T | None:
        with self._lock:
            return self._instances.pop(target, None)  # type: ignore[return-value]

    def is_installed(self, target: type) -> bool:
        return target in self._instances

    def get(self, target: type[T]) -> T | None:
        """Return the raw cached instance without building or unwrapping it."""
        return self._instances.get(target)  # type: ignore[return-value]

    def is_async(self, target: type) -> bool:
        """Whether resolving `target` requires `tap_async`.

        Types that are neither async by definition nor in flight are built
        synchronously (and cached) so their provider flag can be inspected.
        """
        definition = registry.get(target)
        if definition is not None and definition.forwards_from(self) and target not in self._instances:
            return definition.singleton.is_async(target)  # type: ignore[union-attr]

        if target in self._pending or (definition is not None and definition.is_async):
            return True

        if target in self._instances:
            instance = self._instances[target]
        else:
            try:
                instance = self._instantiate(target, definition, None)
            except AsyncDependencyError:
                return True

        info = provider_info(instance, target)
        return info.is_async if info is not None else False

    # sync path

    def _resolve(self, target: type, dependent: type | None) -> Any:
        if target in self._instances:
            return self._unwrap(self._instances[target], target, dependent)

        definition = registry.get(target)
        if definition is not None and definition.forwards_from(self):
            logger.debug("Forwarding %s to its singleton circuit", target.__qualname__)
            return definition.singleton._resolve(target, dependent)  # type: ignore[union-attr] # noqa: SLF001

        instance = self._instantiate(target, definition, dependent)
        try:
            return self._unwrap(instance, target, dependent)
        except AsyncDependencyError:
            raise
        except Exception:
            self._discard(target, instance)
            raise

    def _instantiate(self, target: type, definition: Definition | None, dependent: type | None) -> object:
        if target in self._pending:
            raise AsyncDependencyError(target, initializing=True)

        if definition is None:
            raise UnwiredError(target)

        if definition.is_async:
            raise AsyncDependencyError(target, initializing=False)

        dependencies = tuple(self._resolve(dependency, target) for dependency in definition.get_dependencies())

        instance = self._construct(target, definition, dependencies, Context(self, target, dependent))
        provider_info(instance, target)
        self._commit(target, instance)
        return instance

    def _unwrap(self, instance: object, target: type, dependent: type | None) -> Any:
        info = provider_info(instance, target)
        if info is None:
            return instance

        if info.is_async:
            raise AsyncDependencyError(target, initializing=False)

        return info.get_value(Context(self, target, dependent))

    # async path

    async def _resolve_async(self, target: type, dependent: type | None) -> Any:
        if target in self._instances:
            return await self._unwrap_async(self._instances[target], target, dependent)

        definition = registry.get(target)
        if definition is not None and definition.forwards_from(self):
            logger.debug("Forwarding %s to its singleton circuit", target.__qualname__)
            return await definition.singleton._resolve_async(target, dependent)  # type: ignore[union-attr] # noqa: SLF001

        pending = self._pending.get(target)
        started = pending is None
        if pending is not None:
            building = _building.get()
            if (self, target) in building:
                raise CircularDependencyError(target, [ancestor for _, ancestor in building])
            logger.debug("Joining in-flight construction of %s", target.__qualname__)
        elif definition is None:
            raise UnwiredError(target)
        else:
            # must be registered before the first suspension point
            pending = asyncio.ensure_future(self._build_async(target, definition, dependent))
            self._pending[target] = pending

        instance = await asyncio.shield(pending)
        try:
            return await self._unwrap_async(instance, target, dependent)
        except Exception:
            if started:
                self._discard(target, instance)
            raise

    async def _build_async(self, target: type, definition: Definition, dependent: type | None) -> object:
        # each build task holds its own copy of the chain
        _building.set((*_building.get(), (self, target)))
        try:
            instance = await self._instantiate_async(target, definition, dependent)
        finally:
            self._pending.pop(target, None)

        self._commit(target, instance)
        return instance

    async def _instantiate_async(self, target: type, definition: Definition, dependent: type | None) -> object:
        dependencies, _ = await asyncio.gather(
            self._resolve_all(definition.get_dependencies(), target),
            self._resolve_all(definition.get_preloads(), target),
        )
        context = Context(self, target, dependent)

        if definition.preconstruct_async is not None:
            logger.debug("Constructing %s asynchronously", target.__qualname__)
            factory = await definition.preconstruct_async(dependencies, context)
            with activate(context):
                instance = factory()
        else:
            instance = self._construct(target, definition, dependencies, context)

        if definition.setup is not None:
            await _run_setup(definition.setup, instance)

        provider_info(instance, target)
        return instance

    async def _resolve_all(self, targets: Sequence[type], dependent: type) -> tuple[Any, ...]:
        return tuple(await asyncio.gather(*(self._resolve_async(target, dependent) for target in targets)))

    async def _unwrap_async(self, instance: object, target: type, dependent: type | None) -> Any:
        info = provider_info(instance, target)
        if info is None:
            return instance

        value = info.get_value(Context(self, target, dependent))
        if info.is_async and inspect.isawaitable(value):
            value = await value
        return value

    # shared

    def _construct(
        self, target: type, definition: Definition, dependencies: tuple[Any, ...], context: Context
    ) -> object:
        logger.debug("Constructing %s", target.__qualname__)
        with activate(context):
            if definition.preconstruct is not None:
                instance = definition.preconstruct(dependencies, context)
            else:
                instance = target(*dependencies)

        if inspect.iscoroutine(instance):
            instance.close()
            logger.warning("Sync preconstruct of %s returned a coroutine", target.__qualname__)
            msg = f"Preconstruct of {target.__qualname__} returned a coroutine; register it with set_preconstruct_async"
            raise TypeError(msg)

        return instance

    def _commit(self, target: type, instance: object) -> None:
        with self._lock:
            if target in self._instances:
                raise AlreadyInitializedError(target)
            self._instances[target] = instance
        logger.debug("Cached %s", target.__qualname__)

    def _discard(self, target: type, instance: object) -> None:
        with self._lock:
            if self._instances.get(target) is instance:
                del self._instances[target]
        logger.debug("Discarded %s after a failed first resolution", target.__qualname__)


async def _run_setup(hook: Any, instance: object) -> None:
    result = hook(instance)
    if callable(result) and not inspect.isawaitable(result):
        result = result(instance)
    if inspect.isawaitable(result):
        await result


def tap(target: type[T], circuit: Circuit | None = None) -> Any:
    return (circuit if circuit is not None else Circuit.get_default()).tap(target)


async def tap_async(target: type[T], circuit: Circuit | None = None) -> Any:
    return await (circuit if circuit is not None else Circuit.get_default()).tap_async(target)


def link(target: type[T]) -> Any:
    """Resolve `target` on the circuit currently constructing a type.

    Only valid for the synchronous duration of a constructor or preconstruct call.
    """
    context = current_context()
    if context is None:
        raise NoContextError(target)

    return context.circuit._resolve(target, context.target)  # noqa: SLF001
