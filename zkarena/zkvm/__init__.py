from zkarena.zkvm.backend import ProverBackend, scoped_call
from zkarena.zkvm.digest import code_digest
from zkarena.zkvm.guest import GuestEnv, agent_program, game_program
from zkarena.zkvm.local import LocalBackend
from zkarena.zkvm.types import (
    ExecutionReceipt,
    ExecutionReport,
    KeyPair,
    Program,
    Proof,
    ProvingKey,
    VerificationKey,
)

__all__ = [
    "ExecutionReceipt",
    "ExecutionReport",
    "GuestEnv",
    "KeyPair",
    "LocalBackend",
    "Program",
    "Proof",
    "ProverBackend",
    "ProvingKey",
    "VerificationKey",
    "agent_program",
    "code_digest",
    "game_program",
    "scoped_call",
]
