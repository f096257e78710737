"""
참가자 난수 커밋먼트 생성기
============================

서버와 두 플레이어 각각에 대해 (비밀 스칼라, 공개 커밋먼트) 쌍을 만든다.

**커밋먼트 스킴**:
  비밀 스칼라 r ∈ [1, p) 를 안전한 난수원에서 뽑고,
  공개 커밋먼트는 C = r·G1 (bn128 G1 점) 이다.

  - 은닉성: C로부터 r을 구하는 것은 이산로그 문제이다.
  - 검증 가능성: 나중에 r이 공개되면 r·G1 == C 로 확인할 수 있다.

공개 커밋먼트(ParticipantMetadata)만 실행 입력과 저장소로 흘러간다.
비밀 스칼라(ParticipantSecret)는 생성 시점에만 존재하며 어디에도 영속화하지 않는다.

사용 예시:
    >>> secrets_, metadata = generate_commitments()
    >>> open_commitment(metadata.server, secrets_[0].scalar)  # True
"""

import enum
import logging
import secrets
from dataclasses import dataclass

from zkarena.errors import CommitmentError, InputAssemblyError
from zkarena.field import CURVE_ORDER, G1, POINT_SIZE, decode_g1, ec_mul, encode_g1
from zkarena.log import short_hex

logger = logging.getLogger(__name__)


class Role(enum.Enum):
    SERVER = "server"
    PLAYER0 = "player0"
    PLAYER1 = "player1"


PLAYER_ROLES = (Role.PLAYER0, Role.PLAYER1)


@dataclass(frozen=True)
class ParticipantMetadata:
    """한 참가자의 공개 정보: 역할과 64바이트 커밋먼트."""
    role: Role
    commitment: bytes

    def __post_init__(self):
        if len(self.commitment) != POINT_SIZE:
            raise InputAssemblyError(
                f"{self.role.value} 커밋먼트는 {POINT_SIZE}바이트여야 합니다: {len(self.commitment)}"
            )


@dataclass(frozen=True)
class ParticipantSecret:
    """참가자의 비밀 스칼라. repr에 값이 드러나지 않는다."""
    role: Role
    scalar: int

    def __repr__(self):
        return f"ParticipantSecret(role={self.role.value}, scalar=<hidden>)"


@dataclass(frozen=True)
class MatchMetadata:
    """한 번의 실행에 쓰이는 서버 + 두 플레이어의 공개 메타데이터."""
    server: ParticipantMetadata
    players: tuple

    def __post_init__(self):
        if self.server.role is not Role.SERVER:
            raise InputAssemblyError(f"서버 메타데이터의 역할이 잘못되었습니다: {self.server.role.value}")
        if len(self.players) != 2:
            raise InputAssemblyError(f"플레이어는 정확히 2명이어야 합니다: {len(self.players)}")
        for expected, player in zip(PLAYER_ROLES, self.players):
            if player.role is not expected:
                raise InputAssemblyError(
                    f"플레이어 순서가 잘못되었습니다: {expected.value} 자리에 {player.role.value}"
                )

    def player(self, index):
        return self.players[index]


def _random_scalar():
    try:
        return secrets.randbelow(CURVE_ORDER - 1) + 1
    except OSError as exc:
        raise CommitmentError(f"secure randomness source unavailable: {exc}") from exc


def commit(scalar):
    """스칼라 r에 대한 커밋먼트 r·G1 (64바이트)."""
    return encode_g1(ec_mul(G1, scalar))


def generate_commitments():
    """서버, player0, player1 에 대한 새 커밋먼트를 생성한다.

    Returns:
        (tuple[ParticipantSecret, ...], MatchMetadata)
        비밀 값은 (server, player0, player1) 순서.

    Raises:
        CommitmentError: 난수원을 사용할 수 없을 때 (치명적)
    """
    roles = (Role.SERVER,) + PLAYER_ROLES
    secret_values = []
    public_values = []
    for role in roles:
        scalar = _random_scalar()
        secret_values.append(ParticipantSecret(role, scalar))
        public_values.append(ParticipantMetadata(role, commit(scalar)))

    metadata = MatchMetadata(server=public_values[0], players=tuple(public_values[1:]))
    logger.debug("generated commitments server=%s", short_hex(metadata.server.commitment))
    return tuple(secret_values), metadata


def open_commitment(metadata, scalar):
    """공개된 스칼라가 커밋먼트와 일치하는지 확인한다."""
    if not 0 < scalar < CURVE_ORDER:
        return False
    return commit(scalar) == metadata.commitment


def validate_metadata(metadata):
    """모든 커밋먼트가 곡선 위의 (무한원점이 아닌) 점인지 확인한다.

    Raises:
        InputAssemblyError: 형식이 잘못된 커밋먼트가 있을 때
    """
    for participant in (metadata.server,) + tuple(metadata.players):
        try:
            point = decode_g1(participant.commitment)
        except ValueError as exc:
            raise InputAssemblyError(f"{participant.role.value} 커밋먼트: {exc}") from exc
        if point is None:
            raise InputAssemblyError(f"{participant.role.value} 커밋먼트가 무한원점입니다")
