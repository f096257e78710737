"""
중재 파이프라인
================

    1. 커밋먼트 생성          commitment.generate_commitments
    3. 기준 시뮬레이션        simulator.GameSimulator
    4. 실행 입력 조립         inputs.assemble_inputs
    5. 실행 검증 (관문)       verifier.ExecutionVerifier
    2+6. 키 쌍 + 증명 생성    setup_cache.KeyPairCache + proving.ProofGenerator
    7. 정산 제출              settlement.SettlementSubmitter

각 단계는 블로킹이며 순서대로 실행된다. 어느 단계든 실패하면 남은 단계는
실행되지 않고 아무것도 제출되지 않는다. 세 프로그램의 검증이 모두 끝나기 전에는
키 쌍 요청도 증명 생성도 시작하지 않는다. 재시도는 호출자의 몫이다.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from zkarena.commitment import generate_commitments
from zkarena.errors import SettlementError
from zkarena.inputs import assemble_inputs
from zkarena.proving import ProofGenerator
from zkarena.settlement import ProofBundle, SettlementSubmitter
from zkarena.setup_cache import KeyPairCache
from zkarena.simulator import GameSimulator
from zkarena.verifier import ExecutionVerifier, ProgramSet
from zkarena.zkvm.guest import agent_program, game_program

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    match_id: str
    metadata: object
    record: object
    proofs: object
    bundle: ProofBundle
    tx_hash: Optional[str] = None

    @property
    def settled(self):
        return self.tx_hash is not None


def new_match_id():
    return uuid.uuid4().hex[:16]


class ArbitrationPipeline:
    """Args:
        rules: GameRules
        backend: ProverBackend
        cache: KeyPairCache (여러 파이프라인이 공유할 수 있다). 없으면 새로 만든다.
        ledger: LedgerClient 또는 None (None이면 정산을 건너뛴다)
        max_turns: 시뮬레이션 상한
    """

    def __init__(self, rules, backend, cache=None, ledger=None, max_turns=128):
        self.rules = rules
        self.backend = backend
        self.cache = cache if cache is not None else KeyPairCache(backend)
        self.verifier = ExecutionVerifier(backend, rules)
        self.prover = ProofGenerator(backend, self.cache)
        self.submitter = SettlementSubmitter(ledger) if ledger is not None else None
        self.max_turns = max_turns
        self._game_program = game_program(rules)

    def programs_for(self, agent0, agent1, names=(None, None)):
        return ProgramSet(
            game=self._game_program,
            agent0=agent_program(self.rules, agent0, names[0]),
            agent1=agent_program(self.rules, agent1, names[1]),
        )

    def simulate(self, agent0, agent1, metadata):
        return GameSimulator(self.rules, (agent0, agent1), self.max_turns).run(metadata)

    def prove_record(self, programs, metadata, record, inputs=None, match_id=None):
        """단계 4-6: 입력 조립, 검증 관문, 증명.

        inputs를 주면 조립을 건너뛰고 그 입력을 그대로 검증한다.

        Returns:
            ProofSet
        """
        match_id = match_id or "-"
        if inputs is None:
            inputs = assemble_inputs(metadata, record)
            logger.info("[%s] assembled inputs: %d/%d/%d bytes", match_id, *map(len, inputs))

        verified = self.verifier.verify_all(programs, inputs, record)
        logger.info("[%s] all three executions verified", match_id)

        proofs = self.prover.prove_all(verified)
        logger.info("[%s] proofs generated", match_id)
        return proofs

    def submit(self, bundle):
        """번들을 한 번 제출한다. 재제출에도 같은 번들을 그대로 쓴다."""
        if self.submitter is None:
            raise RuntimeError("no ledger configured")
        return self.submitter.submit(bundle)

    def run(self, agent0, agent1, names=(None, None), submit=True, match_id=None):
        """전체 파이프라인 1 → 7.

        Returns:
            MatchResult

        Raises:
            ArenaError의 하위 클래스 (단계별 오류), 실패 시 아무것도 제출되지 않는다.
        """
        match_id = match_id or new_match_id()
        _, metadata = generate_commitments()
        logger.info("[%s] match started", match_id)

        record = self.simulate(agent0, agent1, metadata)
        programs = self.programs_for(agent0, agent1, names)
        proofs = self.prove_record(programs, metadata, record, match_id=match_id)
        bundle = ProofBundle.from_proofs(proofs)

        result = MatchResult(match_id, metadata, record, proofs, bundle)
        if submit and self.submitter is not None:
            try:
                result.tx_hash = self.submit(bundle)
            except SettlementError as exc:
                # 증명은 그대로 두고 호출자가 같은 번들을 재제출할 수 있게 한다
                exc.result = result
                raise
        logger.info("[%s] match complete (settled=%s)", match_id, result.settled)
        return result
