"""
실행 입력 조립기
=================

하나의 메타데이터 집합과 하나의 GameRecord로부터 세 개의 독립된
바이트 스트림(게임 프로그램용 1개, 에이전트 프로그램용 2개)을 만든다.

**바이트 레이아웃** (모든 정수는 빅엔디안):

    ┌───────────────────────────────────────────────┐
    │ server commitment            64 bytes         │  ┐
    │ player count                 u32 (= 2)        │  │ 공유 접두부
    │ player0 commitment           64 bytes         │  │ (세 입력 모두 동일)
    │ player1 commitment           64 bytes         │  ┘
    │ move count                   u32              │
    ├───────────────────────────────────────────────┤
    │ game:   (mover u8, move u8) × count           │
    │ agent:  move u8 × count, role u8              │
    └───────────────────────────────────────────────┘

  - 게임 입력의 mover는 0, 1, 0, 1, ... 로 0부터 시작해 순환한다.
  - 에이전트 입력의 마지막 바이트(role)가 자기 인덱스의 권위 있는 값이다.
  - 논리적으로 같은 내용은 항상 바이트 단위로 같은 스트림이 된다.

게스트 프로그램은 InputReader로 이 필드들을 정확히 이 순서대로 읽는다.
"""

import enum
from dataclasses import dataclass

from zkarena.commitment import validate_metadata
from zkarena.errors import GuestPanic, InputAssemblyError
from zkarena.field import POINT_SIZE

U32_MAX = 0xFFFFFFFF


class Target(enum.Enum):
    GAME = "game"
    AGENT0 = "agent0"
    AGENT1 = "agent1"

    @classmethod
    def agent(cls, index):
        return (cls.AGENT0, cls.AGENT1)[index]


@dataclass(frozen=True)
class ExecutionInput:
    target: Target
    data: bytes

    def __len__(self):
        return len(self.data)


@dataclass(frozen=True)
class ExecutionInputs:
    game: ExecutionInput
    agent0: ExecutionInput
    agent1: ExecutionInput

    def __iter__(self):
        return iter((self.game, self.agent0, self.agent1))

    def for_target(self, target):
        return getattr(self, target.value)


def _u32(value):
    return value.to_bytes(4, "big")


def _check_moves(moves):
    if len(moves) > U32_MAX:
        raise InputAssemblyError(f"수의 개수가 너무 많습니다: {len(moves)}")
    for i, move in enumerate(moves):
        if isinstance(move, bool) or not isinstance(move, int) or not 0 <= move <= 0xFF:
            raise InputAssemblyError(f"{i}번째 수가 바이트 범위 밖입니다: {move!r}")


def encode_prefix(metadata):
    """공유 접두부: 서버 커밋먼트 + 플레이어 수 + 플레이어 커밋먼트들."""
    validate_metadata(metadata)
    out = bytearray(metadata.server.commitment)
    out += _u32(len(metadata.players))
    for player in metadata.players:
        out += player.commitment
    return bytes(out)


def encode_game_history(moves):
    """(mover, move) 쌍 목록. mover는 0부터 시작해 번갈아 간다."""
    _check_moves(moves)
    out = bytearray(_u32(len(moves)))
    for i, move in enumerate(moves):
        out.append(i % 2)
        out.append(move)
    return bytes(out)


def encode_agent_history(moves, role):
    """평평한 수 목록 + 역할 바이트."""
    _check_moves(moves)
    if role not in (0, 1):
        raise InputAssemblyError(f"에이전트 역할은 0 또는 1이어야 합니다: {role!r}")
    return _u32(len(moves)) + bytes(moves) + bytes([role])


def assemble_inputs(metadata, record):
    """세 개의 ExecutionInput을 만든다.

    Args:
        metadata: MatchMetadata
        record: GameRecord (또는 moves 속성을 가진 객체)

    Returns:
        ExecutionInputs

    Raises:
        InputAssemblyError: 커밋먼트나 수가 형식에 맞지 않을 때
    """
    moves = list(record.moves)
    prefix = encode_prefix(metadata)
    return ExecutionInputs(
        game=ExecutionInput(Target.GAME, prefix + encode_game_history(moves)),
        agent0=ExecutionInput(Target.AGENT0, prefix + encode_agent_history(moves, 0)),
        agent1=ExecutionInput(Target.AGENT1, prefix + encode_agent_history(moves, 1)),
    )


def history_offset(data):
    """입력 스트림에서 수 목록 섹션(move count 다음)이 시작하는 위치."""
    reader = InputReader(data)
    reader.read_commitment()
    reader.read_commitments()
    reader.read_u32()
    return reader.offset


class InputReader:
    """게스트 프로그램용 순차 리더. 필드는 레이아웃 순서대로만 읽을 수 있다.

    형식 위반은 GuestPanic (게스트 프로그램 안에서의 panic에 해당).
    """

    def __init__(self, data):
        self.data = bytes(data)
        self.offset = 0

    def _take(self, n):
        if self.offset + n > len(self.data):
            raise GuestPanic(
                f"input exhausted: need {n} bytes at offset {self.offset}, have {len(self.data) - self.offset}"
            )
        chunk = self.data[self.offset:self.offset + n]
        self.offset += n
        return chunk

    def read_u8(self):
        return self._take(1)[0]

    def read_u32(self):
        return int.from_bytes(self._take(4), "big")

    def read_commitment(self):
        return self._take(POINT_SIZE)

    def read_commitments(self):
        count = self.read_u32()
        return [self.read_commitment() for _ in range(count)]

    def read_tagged_moves(self):
        count = self.read_u32()
        return [(self.read_u8(), self.read_u8()) for _ in range(count)]

    def read_moves(self):
        count = self.read_u32()
        return list(self._take(count))

    def finish(self):
        """남은 바이트가 있으면 GuestPanic."""
        if self.offset != len(self.data):
            raise GuestPanic(f"{len(self.data) - self.offset} trailing input bytes")
