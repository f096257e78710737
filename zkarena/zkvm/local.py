"""
로컬 검증 가능 실행 백엔드
===========================

게스트 프로그램을 같은 프로세스 안에서 실행하고, 실행 결과에 대해
bn128 G1 위의 Schnorr 지식 증명을 만든다.

**설정 (setup)**:
  프로그램마다 비밀 스칼라 sk ("toxic waste")를 한 번 뽑는다.
      proving key      = sk
      verification key = sk·G1
  sk를 아는 사람만 해당 프로그램 이름으로 증명을 만들 수 있다.

**증명 (prove)**:
  1. 게스트를 실행하여 공개 출력 out을 얻는다.
  2. k ← 난수,  R = k·G1
  3. c = H(program_id, vk, out, R)    (Fiat-Shamir)
  4. s = k + c·sk
  증명 = R (64바이트) || s (32바이트)

**검증 (verify)**:
      s·G1 == R + c·VK

주의:
  이 백엔드는 "키를 가진 실행자가 이 출력을 이 프로그램에 대해 보증한다"는
  증명이며 영지식 실행 증명은 아니다. 실제 zkVM 백엔드는 같은
  ProverBackend 인터페이스를 구현하여 교체한다.
"""

import logging
import secrets
import time

from zkarena.field import CURVE_ORDER, FR, G1, decode_g1, ec_add, ec_mul, encode_g1
from zkarena.transcript import Transcript
from zkarena.zkvm.guest import GuestEnv
from zkarena.zkvm.types import (
    ExecutionReceipt,
    ExecutionReport,
    KeyPair,
    Proof,
    ProvingKey,
    VerificationKey,
)

logger = logging.getLogger(__name__)

PROOF_SIZE = 64 + 32


def _challenge(program_id, vk_data, public_values, R):
    t = Transcript(b"zkarena-local-proof")
    t.append_bytes(b"program_id", program_id.encode())
    t.append_bytes(b"vk", vk_data)
    t.append_bytes(b"public_values", public_values)
    t.append_point(b"R", R)
    return t.challenge_scalar(b"c")


class LocalBackend:
    """ProverBackend 구현: 게스트를 프로세스 안에서 실행한다.

    Args:
        seed: 주어지면 setup의 sk를 결정론적으로 만든다 (테스트용).
              실제 사용에서는 None (안전한 난수).
    """

    def __init__(self, seed=None):
        self.seed = seed

    def _setup_scalar(self, program):
        if self.seed is not None:
            t = Transcript(b"zkarena-local-setup")
            t.append_bytes(b"seed", str(self.seed).encode())
            t.append_bytes(b"program_id", program.program_id.encode())
            sk = int(t.challenge_scalar(b"sk"))
            return sk or 1
        return secrets.randbelow(CURVE_ORDER - 1) + 1

    def setup(self, program):
        sk = self._setup_scalar(program)
        vk = ec_mul(G1, sk)
        logger.info("setup %s (%s)", program.name, program.program_id[:12])
        return KeyPair(
            proving_key=ProvingKey(program.program_id, sk.to_bytes(32, "big")),
            verification_key=VerificationKey(program.program_id, encode_g1(vk)),
        )

    def execute(self, program, stdin):
        if program.entrypoint is None:
            raise ValueError(f"program {program.name} has no local entrypoint")
        env = GuestEnv(stdin)
        started = time.monotonic()
        program.entrypoint(env)
        report = ExecutionReport(cycles=env.cycles, elapsed_s=time.monotonic() - started)
        return ExecutionReceipt(public_values=bytes(env.committed), report=report)

    def prove(self, program, key_pair, stdin):
        if key_pair.program_id != program.program_id:
            raise ValueError(
                f"key pair for {key_pair.program_id[:12]} used with program {program.program_id[:12]}"
            )
        public_values = self.execute(program, stdin).public_values

        sk = FR(int.from_bytes(key_pair.proving_key.data, "big"))
        vk_data = key_pair.verification_key.data
        k = FR(secrets.randbelow(CURVE_ORDER - 1) + 1)
        R = ec_mul(G1, k)
        c = _challenge(program.program_id, vk_data, public_values, R)
        s = k + c * sk

        return Proof(
            program_id=program.program_id,
            vk_hash=key_pair.verification_key.vk_hash,
            public_values=public_values,
            proof_bytes=encode_g1(R) + int(s).to_bytes(32, "big"),
        )

    def verify(self, proof, verification_key):
        if proof.program_id != verification_key.program_id:
            return False
        if proof.vk_hash != verification_key.vk_hash:
            return False
        if len(proof.proof_bytes) != PROOF_SIZE:
            return False
        try:
            R = decode_g1(proof.proof_bytes[:64])
            vk = decode_g1(verification_key.data)
        except ValueError:
            return False
        if R is None or vk is None:
            return False
        s = int.from_bytes(proof.proof_bytes[64:], "big")
        if s >= CURVE_ORDER:
            return False

        c = _challenge(proof.program_id, verification_key.data, proof.public_values, R)
        return ec_mul(G1, s) == ec_add(R, ec_mul(vk, c))
