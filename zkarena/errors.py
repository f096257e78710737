"""
Arbitration pipeline errors.

Every failure in the pipeline is fatal for the submission it belongs to.
Callers can catch `ArenaError` for all of them, or the concrete subclasses to
tell caller-fixable input problems apart from external-capability failures.
"""

from __future__ import annotations

from typing import Optional


class ArenaError(Exception):
    """Base class for all arbitration pipeline errors."""
    pass


class CommitmentError(ArenaError):
    """The secure randomness source could not produce a scalar."""
    pass


class InputAssemblyError(ArenaError, ValueError):
    """Malformed metadata or move content. Always fixable by the caller."""
    pass


class SimulationError(ArenaError):
    """The reference game run could not reach a terminal state."""
    pass


class VerificationMismatch(ArenaError):
    """
    A program's declared output disagrees with the reference game record.

    Attributes:
        program: "game", "agent0" or "agent1".
        check: "move-list", "terminal" or "final-state".
        expected / actual: short human-readable renderings of both sides.
    """

    def __init__(self, program: str, check: str, expected=None, actual=None):
        self.program = program
        self.check = check
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{program}: {check} mismatch (expected={expected!r}, actual={actual!r})"
        )


class SetupError(ArenaError):
    """Key pair derivation failed. Never cached; safe to retry from scratch."""

    def __init__(self, program_id: str, reason: str):
        self.program_id = program_id
        super().__init__(f"setup failed for program {program_id[:16]}: {reason}")


class ProvingBackendError(ArenaError):
    """
    The verifiable-execution backend failed while executing or proving.

    The backend's own exception is kept as ``__cause__``.
    """

    def __init__(self, operation: str, program: str, detail: str):
        self.operation = operation
        self.program = program
        self.detail = detail
        super().__init__(f"{operation} failed for {program}: {detail}")


class SettlementError(ArenaError):
    """The ledger call failed or was rejected. Message is the ledger's, verbatim."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        # MatchResult proved before the ledger call failed, kept for resubmission
        self.result = None
        super().__init__(message)


class GuestPanic(ArenaError):
    """Raised by a guest program when its input violates what it can replay."""
    pass


class UnverifiedInputError(ArenaError, TypeError):
    """Proof generation was requested for an execution that never passed verification."""
    pass
