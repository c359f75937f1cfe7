from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


def _name(target: object) -> str:
    return getattr(target, "__qualname__", repr(target))


class ResolutionError(RuntimeError):
    """Base class for every error raised while resolving a type.

    `target` holds the offending type (or `None` when no type is known).
    """

    def __init__(self, target: type | None, msg: str) -> None:
        super().__init__(msg)
        self.target = target


class UnwiredError(ResolutionError):
    def __init__(self, target: type) -> None:
        super().__init__(target, f"Class({_name(target)}) is not set up for wiring.")


class AlreadyInitializedError(ResolutionError):
    def __init__(self, target: type) -> None:
        super().__init__(target, f"Class({_name(target)}) is already initialized.")


class AsyncDependencyError(ResolutionError):
    """Raised when a type that needs the async path is requested synchronously."""

    def __init__(self, target: type, *, initializing: bool) -> None:
        state = "currently initializing" if initializing else "not initialized yet"
        super().__init__(target, f'Class({_name(target)}) is async and {state}. Use "tap_async" instead.')
        self.initializing = initializing


class CircularDependencyError(ResolutionError, RecursionError):
    """Raised when an async build would wait for one of its own dependents."""

    def __init__(self, target: type, chain: Sequence[type]) -> None:
        path = " -> ".join(_name(t) for t in (*chain, target))
        super().__init__(target, f"Class({_name(target)}) depends on itself: {path}")
        self.chain = tuple(chain)


class InvalidProvidableError(ResolutionError):
    def __init__(self, target: type) -> None:
        super().__init__(target, f"Class({_name(target)}) is not a valid Providable.")


class NoContextError(ResolutionError):
    def __init__(self, target: type | None = None) -> None:
        if target is None:
            msg = "No construction context is active. Context is only available inside a sync constructor."
        else:
            msg = (
                f"Class({_name(target)}) cannot be resolved because the circuit cannot be determined. "
                'Make sure "link" is called inside a sync constructor of a wired class.'
            )
        super().__init__(target, msg)
