"""
Verifiable-execution backend capability.

The pipeline never reimplements a proving system; it talks to a backend
through four blocking calls. Every call is made inside :func:`scoped_call`,
which logs the call, times it and turns any backend failure into a
:class:`~zkarena.errors.ProvingBackendError` with the original exception
chained as ``__cause__``.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Protocol

from zkarena.errors import ProvingBackendError
from zkarena.zkvm.types import ExecutionReceipt, KeyPair, Program, Proof, VerificationKey

logger = logging.getLogger(__name__)


class ProverBackend(Protocol):
    def setup(self, program: Program) -> KeyPair:
        """Derive the one-time key pair for ``program``. Slow."""
        ...

    def execute(self, program: Program, stdin: bytes) -> ExecutionReceipt:
        """Run ``program`` on ``stdin`` without producing evidence."""
        ...

    def prove(self, program: Program, key_pair: KeyPair, stdin: bytes) -> Proof:
        """Run and prove. Slow; may block for minutes on real backends."""
        ...

    def verify(self, proof: Proof, verification_key: VerificationKey) -> bool:
        ...


@contextmanager
def scoped_call(operation: str, program_name: str):
    """
    Bracket one blocking backend call.

    There is no cancellation: once entered, the call runs to completion or
    failure.
    """
    logger.debug("%s %s: start", operation, program_name)
    started = time.monotonic()
    try:
        yield
    except ProvingBackendError:
        raise
    except Exception as exc:
        logger.error("%s %s failed: %s", operation, program_name, exc)
        raise ProvingBackendError(operation, program_name, f"{type(exc).__name__}: {exc}") from exc
    finally:
        logger.debug("%s %s: %.3fs", operation, program_name, time.monotonic() - started)
