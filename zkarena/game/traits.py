"""
Capability contracts for pluggable games and agents.

A game is not a class hierarchy: it is a bundle of functions (``GameRules``)
and any agent is a plain callable ``decide(public_state, context) -> int``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence, Tuple, runtime_checkable


@runtime_checkable
class PublicState(Protocol):
    """What the pipeline needs from a game's public state."""

    moves: Sequence[int]

    def is_terminal(self) -> bool:
        ...


# decide(public_state, context) -> move byte
Agent = Callable[[Any, Any], int]

# apply(public_state, private_state, move, context) -> None, mutating in place
Reducer = Callable[[Any, Any, int, Any], None]


@dataclass(frozen=True)
class GameRules:
    """
    name: stable identifier, baked into the game program's identity
    initial_state: () -> (public_state, private_state)
    apply: the reducer
    encode_public_state / decode_public_state: canonical bytes of a public state
    """

    name: str
    initial_state: Callable[[], Tuple[Any, Any]]
    apply: Reducer
    encode_public_state: Callable[[Any], bytes]
    decode_public_state: Callable[[bytes], Any]


def current_mover(public_state):
    """Whose turn the state itself reports (0/1), or None if it does not say."""
    mover = getattr(public_state, "mover", None)
    if mover is None:
        return None
    return mover() if callable(mover) else mover
