"""
Arena configuration.

Dataclass-based config with validation and loading from environment variables
(prefix configurable, ``ZKARENA_`` by default). The private key for ledger
submission is never stored on the config itself; only the *name* of the
environment variable that holds it.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

DEFAULT_PREFIX = "ZKARENA_"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class ArenaConfig:
    """
    db_path: TinyDB file for match records; ":memory:" keeps everything in RAM
    max_turns: upper bound on simulated turns before a run is declared runaway
    log_level: root level for zkarena loggers
    minimax_depth: search depth of the bundled minimax agent
    rpc_url / contract_address: ledger endpoint; submission is disabled when
        contract_address is unset
    private_key_env: environment variable holding the submitter's key
    """

    db_path: str = "arena_db.json"
    max_turns: int = 128
    log_level: str = "INFO"
    minimax_depth: int = 4
    rpc_url: str = "http://127.0.0.1:8545"
    contract_address: Optional[str] = None
    private_key_env: str = "ZKARENA_PRIVATE_KEY"

    def validate(self) -> None:
        if self.max_turns <= 0:
            raise ValueError("max_turns must be > 0")
        if self.minimax_depth <= 0:
            raise ValueError("minimax_depth must be > 0")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {self.log_level}")
        if self.contract_address is not None and not self.contract_address.startswith("0x"):
            raise ValueError("contract_address must be a 0x-prefixed hex address")

    @property
    def settlement_enabled(self) -> bool:
        return self.contract_address is not None

    def private_key(self) -> Optional[str]:
        return os.environ.get(self.private_key_env)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_PREFIX, env: Optional[Dict[str, str]] = None) -> "ArenaConfig":
        src = os.environ if env is None else env
        cfg = cls()

        def _get(name: str) -> Optional[str]:
            val = src.get(prefix + name)
            return val if val not in (None, "") else None

        if (v := _get("DB_PATH")) is not None:
            cfg.db_path = v
        if (v := _get("MAX_TURNS")) is not None:
            cfg.max_turns = int(v)
        if (v := _get("LOG_LEVEL")) is not None:
            cfg.log_level = v.upper()
        if (v := _get("MINIMAX_DEPTH")) is not None:
            cfg.minimax_depth = int(v)
        if (v := _get("RPC_URL")) is not None:
            cfg.rpc_url = v
        if (v := _get("CONTRACT_ADDRESS")) is not None:
            cfg.contract_address = v
        if (v := _get("PRIVATE_KEY_ENV")) is not None:
            cfg.private_key_env = v

        cfg.validate()
        return cfg
