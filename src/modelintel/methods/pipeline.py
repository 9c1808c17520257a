"""Ordered chain of method-resolution strategies."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import reduce
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from modelintel.methods.passable import Passable

Next = Callable[["Passable"], "Passable"]


class Pipe(Protocol):
    """One resolution strategy: claim the method or hand the passable to ``next_``."""

    name: str

    def handle(self, passable: Passable, next_: Next) -> Passable:
        """Resolve on ``passable`` or call ``next_(passable)``."""
        ...


class Pipeline:
    """
    Send a passable through pipes in order.

    Each pipe decides whether to call the next one; a pipe that claims the
    method returns without doing so, and the destination is skipped. The
    pipeline holds no per-request state, so pipes may re-enter it for
    delegation targets.
    """

    def __init__(self, pipes: Sequence[Pipe]) -> None:
        self.pipes = tuple(pipes)

    def send(self, passable: Passable) -> Dispatch:
        """
        Start dispatching ``passable``.

        Returns
        -------
        Dispatch
            Pending dispatch; call :meth:`Dispatch.then` to run it.
        """
        return Dispatch(self.pipes, passable)


class Dispatch:
    """A passable bound to a pipe sequence, run by :meth:`then`."""

    def __init__(self, pipes: Sequence[Pipe], passable: Passable) -> None:
        self._pipes = pipes
        self._passable = passable

    def then(self, destination: Next) -> Passable:
        """
        Run every pipe, finishing with ``destination`` if no pipe short-circuits.

        Returns
        -------
        Passable
            The passable returned by the outermost pipe.
        """

        def stage(next_: Next, pipe: Pipe) -> Next:
            return lambda passable: pipe.handle(passable, next_)

        chain = reduce(stage, reversed(self._pipes), destination)
        return chain(self._passable)
