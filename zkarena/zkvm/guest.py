"""
게스트 프로그램
================

검증 가능 실행 환경 안에서 돌아가는 두 종류의 프로그램.

**게임 프로그램** (game_program):
  입력: 서버 커밋먼트, 플레이어 커밋먼트들, (mover, move) 쌍 목록
  동작: 리듀서로 수를 처음부터 재생한다. mover 태그는 0, 1, 0, 1 순서여야 한다.
  출력: 최종 공개 상태의 인코딩 (리듀서가 받아들인 수 목록 포함)

**에이전트 프로그램** (agent_program):
  입력: 서버 커밋먼트, 플레이어 커밋먼트들, 평평한 수 목록, 역할 바이트
  동작: 리듀서로 재생하면서 자기 차례(mover == role)마다 에이전트를 다시 호출하고,
        기록된 수와 다르면 panic 한다.
  출력: 수 목록 그대로

  역할 바이트가 권위 있는 값이다. 위치로부터 유추한 차례(i % 2)와
  공개 상태가 보고하는 차례가 다르면 일관성 위반으로 panic 한다.

panic은 GuestPanic 예외로 표현된다.

프로그램 식별자는 이름이 아니라 규칙 함수와 에이전트의 코드 내용(code_digest)으로 정해진다.
"""

from zkarena.context import ActionContext
from zkarena.errors import GuestPanic
from zkarena.game.traits import current_mover
from zkarena.inputs import InputReader
from zkarena.zkvm.digest import code_digest
from zkarena.zkvm.types import Program


class GuestEnv:
    """게스트 한 번 실행분의 입출력.

    속성:
        reader: 입력 스트림 리더
        committed: 커밋된 공개 출력
        cycles: 에이전트/리듀서 호출 수 (자원 사용량 보고용)
    """

    def __init__(self, stdin):
        self.reader = InputReader(stdin)
        self.committed = bytearray()
        self.cycles = 0

    def commit(self, data):
        self.committed.extend(data)


def _read_contexts(reader):
    server = reader.read_commitment()
    players = reader.read_commitments()
    if len(players) != 2:
        raise GuestPanic(f"expected 2 players, got {len(players)}")
    return [ActionContext(server, commitment, i) for i, commitment in enumerate(players)]


def game_program(rules):
    """게임 규칙 `rules`를 재생하는 게임 프로그램."""

    def entrypoint(env):
        reader = env.reader
        contexts = _read_contexts(reader)
        tagged = reader.read_tagged_moves()
        reader.finish()

        public_state, private_state = rules.initial_state()
        for i, (mover, move) in enumerate(tagged):
            if mover != i % 2:
                raise GuestPanic(f"move {i}: mover tag {mover} breaks turn order")
            rules.apply(public_state, private_state, move, contexts[mover])
            env.cycles += 1

        env.commit(rules.encode_public_state(public_state))

    elf = f"zkarena-guest/game/{rules.name}/".encode() + code_digest(
        rules.initial_state, rules.apply, rules.encode_public_state, rules.decode_public_state
    )
    return Program(name="game", elf=elf, entrypoint=entrypoint)


def agent_program(rules, agent, name=None):
    """에이전트 `agent`의 결정을 재확인하는 에이전트 프로그램.

    Args:
        rules: GameRules
        agent: decide(public_state, context) -> int
        name: 로그와 프로그램 이름에 쓰일 에이전트 이름 (기본값: agent.__name__). 식별자와는 무관하다.
    """
    agent_name = name or agent.__name__

    def entrypoint(env):
        reader = env.reader
        contexts = _read_contexts(reader)
        moves = reader.read_moves()
        role = reader.read_u8()
        reader.finish()

        if role not in (0, 1):
            raise GuestPanic(f"invalid player id {role}")

        public_state, private_state = rules.initial_state()
        for i, move in enumerate(moves):
            mover = i % 2
            reported = current_mover(public_state)
            if reported is not None and reported != mover:
                raise GuestPanic(f"move {i}: state reports mover {reported}, sequence says {mover}")

            context = contexts[mover]
            if mover == role:
                decided = agent(public_state, context)
                env.cycles += 1
                if decided != move:
                    raise GuestPanic(f"move {i}: agent decided {decided}, history says {move}")

            rules.apply(public_state, private_state, move, context)
            env.cycles += 1

        env.commit(bytes(moves))

    elf = f"zkarena-guest/agent/{rules.name}/".encode() + code_digest(agent)
    return Program(name=f"agent:{agent_name}", elf=elf, entrypoint=entrypoint)
