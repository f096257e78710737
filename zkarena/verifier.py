"""
실행 검증기 (증명 전 관문)
===========================

세 (프로그램, 입력) 쌍을 검증 가능 실행 환경에서 실행만 하고 (증명 없음),
선언된 공개 출력을 기준 GameRecord와 대조한다.
증명 생성은 실행보다 훨씬 비싸므로, 잘못된 입력으로 증명을 시도하지 않도록
여기서 먼저 막는다.

**검사 순서** (하나라도 실패하면 즉시 VerificationMismatch):

  게임 프로그램
    1. move-list    출력을 공개 상태로 디코딩했을 때 moves == record.moves
    2. terminal     디코딩한 상태가 터미널
    3. final-state  출력 바이트 == encode(record.final_state)
  에이전트 프로그램 (agent0, agent1)
    4. move-list    출력 == bytes(record.moves)

  실행 중 게스트가 panic 하면 (mover 태그 순서 위반, 에이전트 결정 불일치 등)
  그 프로그램의 move-list 불일치로 취급한다.

통과하면 VerifiedExecution 토큰을 발급한다. 이 토큰은 이 모듈만 만들 수 있으며,
ProofGenerator는 이 토큰만 받는다 (검증 전 증명은 구조적으로 불가능).
"""

import logging
from dataclasses import dataclass

from zkarena.errors import GuestPanic, ProvingBackendError, VerificationMismatch
from zkarena.inputs import Target
from zkarena.zkvm.backend import scoped_call

logger = logging.getLogger(__name__)

# VerifiedExecution 생성 권한 표식
_MINT = object()


class VerifiedExecution:
    """검증을 통과한 (프로그램, 입력, 영수증). ExecutionVerifier만 만들 수 있다."""

    __slots__ = ("target", "program", "execution_input", "receipt")

    def __init__(self, target, program, execution_input, receipt, _token=None):
        if _token is not _MINT:
            raise TypeError("VerifiedExecution can only be created by ExecutionVerifier")
        self.target = target
        self.program = program
        self.execution_input = execution_input
        self.receipt = receipt

    def __repr__(self):
        return f"VerifiedExecution({self.target.value}, {self.program.name})"


@dataclass(frozen=True)
class ProgramSet:
    """게임 프로그램 1개 + 에이전트 프로그램 2개."""
    game: object
    agent0: object
    agent1: object

    def for_target(self, target):
        return getattr(self, target.value)


@dataclass(frozen=True)
class VerifiedSet:
    game: VerifiedExecution
    agent0: VerifiedExecution
    agent1: VerifiedExecution

    def __iter__(self):
        return iter((self.game, self.agent0, self.agent1))


def _preview(moves, limit=12):
    moves = list(moves)
    if len(moves) <= limit:
        return moves
    return moves[:limit] + ["..."]


class ExecutionVerifier:
    """Args:
        backend: ProverBackend
        rules: GameRules (게임 출력 디코딩/기대 인코딩용)
    """

    def __init__(self, backend, rules):
        self.backend = backend
        self.rules = rules

    def execute(self, target, program, execution_input):
        """증명 없이 실행만 한다. 게스트 panic은 그 프로그램의 move-list 불일치가 된다."""
        try:
            with scoped_call("execute", program.name):
                receipt = self.backend.execute(program, execution_input.data)
        except ProvingBackendError as exc:
            panic = exc.__cause__
            if not isinstance(panic, GuestPanic):
                raise
            raise VerificationMismatch(
                target.value, "move-list", "replayable history", str(panic)
            ) from panic
        logger.debug(
            "executed %s: %d bytes out, %d cycles",
            program.name, len(receipt.public_values), receipt.report.cycles,
        )
        return receipt

    def check_game(self, receipt, record):
        """게임 프로그램 출력에 대한 검사 1-3."""
        expected_moves = list(record.moves)
        try:
            state = self.rules.decode_public_state(receipt.public_values)
        except Exception as exc:
            raise VerificationMismatch(
                Target.GAME.value, "final-state", "decodable public state", f"{type(exc).__name__}: {exc}"
            ) from exc

        if list(state.moves) != expected_moves:
            raise VerificationMismatch(
                Target.GAME.value, "move-list", _preview(expected_moves), _preview(state.moves)
            )
        if not state.is_terminal():
            raise VerificationMismatch(Target.GAME.value, "terminal", True, False)

        expected = self.rules.encode_public_state(record.final_state)
        if receipt.public_values != expected:
            raise VerificationMismatch(
                Target.GAME.value, "final-state", expected.hex()[:32], receipt.public_values.hex()[:32]
            )

    def check_agent(self, target, receipt, record):
        """에이전트 프로그램 출력에 대한 검사 4."""
        expected = bytes(record.moves)
        if receipt.public_values != expected:
            raise VerificationMismatch(
                target.value, "move-list", _preview(expected), _preview(receipt.public_values)
            )

    def verify_all(self, programs, inputs, record):
        """세 프로그램을 모두 실행하고 검사한다.

        Returns:
            VerifiedSet

        Raises:
            VerificationMismatch: 어느 검사든 실패했을 때
            ProvingBackendError: 실행 자체가 실패했을 때
        """
        verified = {}
        for target in (Target.GAME, Target.AGENT0, Target.AGENT1):
            program = programs.for_target(target)
            execution_input = inputs.for_target(target)
            receipt = self.execute(target, program, execution_input)
            if target is Target.GAME:
                self.check_game(receipt, record)
            else:
                self.check_agent(target, receipt, record)
            verified[target.value] = VerifiedExecution(
                target, program, execution_input, receipt, _token=_MINT
            )
            logger.info("verified %s (%s)", target.value, program.name)

        return VerifiedSet(**verified)
