"""
에이전트/리듀서 실행 컨텍스트
==============================

에이전트와 리듀서가 난수를 뽑을 때 쓰는 컨텍스트.

난수 스트림은 공개 값(서버 커밋먼트, 해당 플레이어 커밋먼트, 플레이어 인덱스)과
호출 카운터만으로 결정된다:

    block_i = SHA-256(b"zkarena-ctx" || server || player || index || i)

따라서 기준 시뮬레이터에서 뽑은 값과 게스트 프로그램 안에서 재생할 때
뽑는 값이 항상 같다.
"""

import hashlib


class ActionContext:
    """한 플레이어의 결정론적 난수 스트림.

    속성:
        player_index: 0 또는 1
        draws: 지금까지 소비한 32비트 값의 수
    """

    def __init__(self, server_commitment, player_commitment, player_index):
        self._seed = (
            b"zkarena-ctx"
            + server_commitment
            + player_commitment
            + bytes([player_index])
        )
        self.player_index = player_index
        self.draws = 0
        self._counter = 0
        self._buffer = b""

    @classmethod
    def for_player(cls, metadata, index):
        return cls(metadata.server.commitment, metadata.player(index).commitment, index)

    def _refill(self):
        block = hashlib.sha256(self._seed + self._counter.to_bytes(8, "big")).digest()
        self._counter += 1
        self._buffer += block

    def rand_u32(self):
        """다음 32비트 부호 없는 정수."""
        if len(self._buffer) < 4:
            self._refill()
        value = int.from_bytes(self._buffer[:4], "big")
        self._buffer = self._buffer[4:]
        self.draws += 1
        return value

    def rand_below(self, n):
        """[0, n) 범위의 정수. n은 양수여야 한다."""
        if n <= 0:
            raise ValueError(f"n은 양수여야 합니다: {n}")
        return self.rand_u32() % n


def contexts_for(metadata):
    """두 플레이어의 새 컨텍스트 [player0, player1]."""
    return [ActionContext.for_player(metadata, i) for i in range(2)]
