"""
Settlement: bundle the three proofs with the final public state and hand them
to the ledger contract.

The ledger call is made exactly once. Network errors and on-chain rejections
are surfaced as :class:`SettlementError` with the ledger's own message; proofs
are never regenerated here, so a caller can resubmit the same bundle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from eth_account import Account
from web3 import HTTPProvider, Web3

from zkarena.errors import SettlementError
from zkarena.log import short_hex

logger = logging.getLogger(__name__)

SUBMIT_GAME_ABI = [
    {
        "type": "function",
        "name": "submitGame",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "agent0VkHash", "type": "bytes32"},
            {"name": "agent1VkHash", "type": "bytes32"},
            {"name": "agent0Proof", "type": "bytes"},
            {"name": "agent1Proof", "type": "bytes"},
            {"name": "gameProof", "type": "bytes"},
            {"name": "publicValues", "type": "bytes"},
        ],
        "outputs": [],
    }
]


@dataclass(frozen=True)
class ProofBundle:
    """Everything the ledger needs for one game."""

    game: object
    agent0: object
    agent1: object
    public_state: bytes

    @property
    def agent0_vk_hash(self) -> bytes:
        return self.agent0.vk_hash

    @property
    def agent1_vk_hash(self) -> bytes:
        return self.agent1.vk_hash

    @classmethod
    def from_proofs(cls, proofs) -> "ProofBundle":
        return cls(
            game=proofs.game,
            agent0=proofs.agent0,
            agent1=proofs.agent1,
            public_state=proofs.game.public_values,
        )


class LedgerClient(Protocol):
    def submit_game(
        self,
        agent0_vk: bytes,
        agent1_vk: bytes,
        agent0_proof: bytes,
        agent1_proof: bytes,
        game_proof: bytes,
        public_values: bytes,
    ) -> str:
        """Submit and return the transaction hash (hex). Raise on failure."""
        ...


def explain_web3_error(exc: Exception) -> str:
    """Pull the node's message out of a web3 error, falling back to str(exc)."""
    if exc.args and isinstance(exc.args[0], dict):
        err = exc.args[0]
        return err.get("message", "") or str(exc)
    return str(exc)


class Web3LedgerClient:
    """
    Ledger client over web3.py: build, sign, send, wait for the receipt.

    A receipt with status 0 is a rejection.
    """

    def __init__(self, rpc_url: str, contract_address: str, private_key: str, timeout_s: int = 120):
        self.w3 = Web3(HTTPProvider(rpc_url))
        self.account = Account.from_key(private_key)
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address), abi=SUBMIT_GAME_ABI
        )
        self.timeout_s = timeout_s

    def submit_game(self, agent0_vk, agent1_vk, agent0_proof, agent1_proof, game_proof, public_values):
        fn_call = self.contract.functions.submitGame(
            agent0_vk, agent1_vk, agent0_proof, agent1_proof, game_proof, public_values
        )
        tx = fn_call.build_transaction(
            {
                "from": self.account.address,
                "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
                "chainId": self.w3.eth.chain_id,
            }
        )
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout_s)
        tx_hex = Web3.to_hex(tx_hash)
        if receipt["status"] != 1:
            raise SettlementError(f"transaction reverted: {tx_hex}", tx_hash=tx_hex)
        return tx_hex


def encode_proof(proof) -> bytes:
    """On-chain proof payload: the backend's proof bytes."""
    return proof.proof_bytes


class SettlementSubmitter:
    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger

    def submit(self, bundle: ProofBundle) -> str:
        """
        Submit once. Returns the transaction hash.

        Raises:
            SettlementError: with the ledger's message verbatim.
        """
        logger.info(
            "submitting game: agent0 vk %s, agent1 vk %s",
            short_hex(bundle.agent0_vk_hash, 6), short_hex(bundle.agent1_vk_hash, 6),
        )
        try:
            tx_hash = self.ledger.submit_game(
                bundle.agent0_vk_hash,
                bundle.agent1_vk_hash,
                encode_proof(bundle.agent0),
                encode_proof(bundle.agent1),
                encode_proof(bundle.game),
                bundle.public_state,
            )
        except SettlementError:
            raise
        except Exception as exc:
            message = explain_web3_error(exc)
            logger.error("ledger submission failed: %s", message)
            raise SettlementError(message) from exc

        logger.info("settled in tx %s", tx_hash)
        return tx_hash


def build_ledger(config) -> Optional[Web3LedgerClient]:
    """Web3 client from config, or None when settlement is not configured."""
    if not config.settlement_enabled:
        return None
    key = config.private_key()
    if not key:
        raise SettlementError(f"private key env {config.private_key_env} is not set")
    return Web3LedgerClient(config.rpc_url, config.contract_address, key)
