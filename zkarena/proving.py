"""
증명 생성기
============

검증을 통과한 실행(VerifiedExecution)에 대해서만 증명을 만든다.

  - 키 쌍은 KeyPairCache에서 얻는다 (프로그램당 한 번만 유도).
  - 증명 생성은 한 번만 시도하며 재시도하지 않는다. 오래 걸릴 수 있다.
  - 백엔드 실패는 ProvingBackendError로, 세 증명 중 하나라도 실패하면
    전체가 실패한다 (부분 증명 집합은 반환하지 않는다).
"""

import logging
from dataclasses import dataclass

from zkarena.errors import ProvingBackendError, UnverifiedInputError
from zkarena.verifier import VerifiedExecution
from zkarena.zkvm.backend import scoped_call

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofSet:
    """세 프로그램의 증명과 그 키 쌍."""
    game: object
    agent0: object
    agent1: object
    key_pairs: dict

    def __iter__(self):
        return iter((self.game, self.agent0, self.agent1))


class ProofGenerator:
    def __init__(self, backend, cache):
        self.backend = backend
        self.cache = cache

    def prove(self, verified):
        """VerifiedExecution 하나에 대한 증명.

        Raises:
            UnverifiedInputError: verified가 ExecutionVerifier의 토큰이 아닐 때
            SetupError: 키 쌍 유도 실패
            ProvingBackendError: 증명 생성 실패
        """
        if not isinstance(verified, VerifiedExecution):
            raise UnverifiedInputError(
                f"refusing to prove {type(verified).__name__}: input has not passed execution verification"
            )

        program = verified.program
        key_pair = self.cache.get_or_create(program)
        logger.info("proving %s (%s)", verified.target.value, program.name)

        with scoped_call("prove", program.name):
            proof = self.backend.prove(program, key_pair, verified.execution_input.data)

        if proof.public_values != verified.receipt.public_values:
            raise ProvingBackendError(
                "prove", program.name, "proved public values differ from the verified execution"
            )
        return proof, key_pair

    def prove_all(self, verified_set):
        proofs = {}
        key_pairs = {}
        for verified in verified_set:
            proof, key_pair = self.prove(verified)
            proofs[verified.target.value] = proof
            key_pairs[verified.target.value] = key_pair
        return ProofSet(key_pairs=key_pairs, **proofs)

    def verify_proof(self, proof, key_pair):
        """증명을 오프라인으로 확인한다."""
        with scoped_call("verify", proof.program_id[:12]):
            return self.backend.verify(proof, key_pair.verification_key)
