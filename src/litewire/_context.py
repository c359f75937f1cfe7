from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._errors import NoContextError


if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._circuit import Circuit


@dataclass(frozen=True)
class Context:
    """State handed to preconstructors and providers.

    - `circuit`: the circuit resolving `target`
    - `target`: the type currently being built or unwrapped
    - `dependent`: the type that asked for `target`, `None` for a direct `tap`
    """

    circuit: Circuit
    target: type
    dependent: type | None = None


# Set only for the synchronous duration of one construction call.
_active: ContextVar[Context | None] = ContextVar("litewire_context", default=None)


@contextmanager
def activate(context: Context) -> Iterator[Context]:
    token = _active.set(context)
    try:
        yield context
    finally:
        _active.reset(token)


def current_context() -> Context | None:
    return _active.get()


def get_context() -> Context:
    """Return the context of the construction call in progress.

    Raises `NoContextError` outside of a construction call.
    """
    context = _active.get()
    if context is None:
        raise NoContextError
    return context


def get_circuit() -> Circuit:
    return get_context().circuit
