"""
기준 게임 시뮬레이터
=====================

리듀서와 두 에이전트로 게임을 끝까지 진행하여 권위 있는 공개 기록
(GameRecord: 최종 공개 상태 + 적용된 수 목록)을 만든다.

**명시적 상태 기계**:

    AWAITING_PLAYER0 ──move──▶ AWAITING_PLAYER1 ──move──▶ AWAITING_PLAYER0 ...
            │                          │
            └──── is_terminal() ───────┴──▶ TERMINAL

  - 차례는 리듀서 내부와 무관하게 0, 1, 0, 1, ... 로 엄격히 번갈아 간다.
  - 리듀서가 거부한 수(적용된 수의 개수가 늘지 않음)는 기록되지 않고
    실행을 STALLED로 끝낸다. 같은 상태에서 같은 수가 반복될 뿐이기 때문이다.
  - max_turns를 넘기면 SimulationError.

시뮬레이터는 게임 규칙의 적법성을 검사하지 않는다. 그것은 리듀서의 일이다.
"""

import enum
import logging
from dataclasses import dataclass

from zkarena.context import contexts_for
from zkarena.errors import InputAssemblyError, SimulationError

logger = logging.getLogger(__name__)


class TurnState(enum.Enum):
    AWAITING_PLAYER0 = 0
    AWAITING_PLAYER1 = 1
    TERMINAL = 2

    @property
    def mover(self):
        if self is TurnState.TERMINAL:
            return None
        return self.value


class Outcome(enum.Enum):
    FINISHED = "finished"
    STALLED = "stalled"


@dataclass(frozen=True)
class GameRecord:
    """완료된 게임의 권위 있는 기록. 생성 후 읽기 전용.

    속성:
        final_state: 리듀서의 최종 공개 상태
        moves: 리듀서가 받아들인 수, 적용 순서대로
        movers: 각 수를 둔 플레이어 인덱스 (0, 1, 0, 1, ...)
        outcome: FINISHED (터미널 도달) 또는 STALLED (거부된 수로 중단)
        turns: 에이전트가 호출된 총 횟수 (거부된 수 포함)
    """
    final_state: object
    moves: tuple
    movers: tuple
    outcome: Outcome
    turns: int

    @property
    def is_terminal(self):
        return self.final_state.is_terminal()


def _check_move(move, mover):
    if isinstance(move, bool) or not isinstance(move, int) or not 0 <= move <= 0xFF:
        raise InputAssemblyError(f"agent{mover}가 바이트 범위 밖의 수를 냈습니다: {move!r}")
    return move


class GameSimulator:
    """리듀서 + 두 에이전트를 상태 기계로 실행한다.

    Args:
        rules: GameRules
        agents: (agent0, agent1)
        max_turns: 에이전트 호출 횟수 상한
    """

    def __init__(self, rules, agents, max_turns=128):
        if len(agents) != 2:
            raise ValueError(f"에이전트는 정확히 2개여야 합니다: {len(agents)}")
        self.rules = rules
        self.agents = tuple(agents)
        self.max_turns = max_turns

    def run(self, metadata):
        """메타데이터의 커밋먼트로 컨텍스트를 만들고 게임을 끝까지 진행한다.

        Returns:
            GameRecord

        Raises:
            InputAssemblyError: 에이전트가 바이트가 아닌 수를 낼 때
            SimulationError: max_turns 안에 끝나지 않을 때
        """
        public_state, private_state = self.rules.initial_state()
        contexts = contexts_for(metadata)

        state = TurnState.TERMINAL if public_state.is_terminal() else TurnState.AWAITING_PLAYER0
        outcome = Outcome.FINISHED
        movers = []
        turns = 0

        while state is not TurnState.TERMINAL:
            if turns >= self.max_turns:
                raise SimulationError(
                    f"game did not terminate within {self.max_turns} turns"
                )
            mover = state.mover
            context = contexts[mover]
            move = _check_move(self.agents[mover](public_state, context), mover)
            turns += 1

            applied_before = len(public_state.moves)
            self.rules.apply(public_state, private_state, move, context)

            if len(public_state.moves) == applied_before:
                logger.info("agent%d move %d rejected at turn %d; run stalled", mover, move, turns)
                outcome = Outcome.STALLED
                state = TurnState.TERMINAL
                continue

            movers.append(mover)
            if public_state.is_terminal():
                state = TurnState.TERMINAL
            elif state is TurnState.AWAITING_PLAYER0:
                state = TurnState.AWAITING_PLAYER1
            else:
                state = TurnState.AWAITING_PLAYER0

        record = GameRecord(
            final_state=public_state,
            moves=tuple(public_state.moves),
            movers=tuple(movers),
            outcome=outcome,
            turns=turns,
        )
        logger.info(
            "simulation %s after %d turns, %d moves", outcome.value, turns, len(record.moves)
        )
        return record
