"""
Value types exchanged with a verifiable-execution backend.

Everything here is immutable. Key material and proofs are opaque bytes so
that any backend (local or remote) can fill them in.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass(frozen=True)
class Program:
    """
    A verifiable program. Identity is the content of ``elf`` and nothing else;
    ``entrypoint`` is only used by backends that run guests in-process.
    """

    name: str
    elf: bytes
    entrypoint: Optional[Callable] = field(default=None, compare=False, repr=False)

    @property
    def program_id(self) -> str:
        return hashlib.sha256(self.elf).hexdigest()


@dataclass(frozen=True)
class ProvingKey:
    program_id: str
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class VerificationKey:
    program_id: str
    data: bytes

    @property
    def vk_hash(self) -> bytes:
        """32-byte identifier of this key, as registered on the ledger."""
        return hashlib.sha256(self.program_id.encode() + self.data).digest()


@dataclass(frozen=True)
class KeyPair:
    proving_key: ProvingKey
    verification_key: VerificationKey

    @property
    def program_id(self) -> str:
        return self.verification_key.program_id


@dataclass(frozen=True)
class ExecutionReport:
    cycles: int
    elapsed_s: float


@dataclass(frozen=True)
class ExecutionReceipt:
    public_values: bytes
    report: ExecutionReport


@dataclass(frozen=True)
class Proof:
    """Opaque evidence bound to one verification key and one public output."""

    program_id: str
    vk_hash: bytes
    public_values: bytes
    proof_bytes: bytes
