"""
zkarena 기반 모듈: 스칼라 필드 및 bn128 G1 연산
================================================

커밋먼트 생성기와 로컬 증명 백엔드가 공유하는 대수적 도구를 정의한다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드. 참가자 비밀 스칼라, Schnorr 응답값 등
  모든 스칼라 연산의 기본 단위이다.

**G1 점 직렬화**:
  실행 입력(ExecutionInput)과 원장(ledger) 제출에 들어가는 G1 점은
  항상 64바이트 고정 길이로 직렬화한다:

      x (32바이트 빅엔디안) || y (32바이트 빅엔디안)

  무한원점(None)은 64바이트의 0으로 표현한다. 커밋먼트로는 허용되지 않는다.

사용 예시:
    >>> from zkarena.field import G1, ec_mul, encode_g1, decode_g1
    >>> P = ec_mul(G1, 5)
    >>> decode_g1(encode_g1(P)) == P  # True
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    예시:
        >>> FR(3) * FR(7)   # FR(21)
        >>> FR(1) / FR(3)   # 3의 모듈러 역원
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# G1 그룹 생성자
G1 = bn128.G1

# 직렬화된 G1 점의 길이
POINT_SIZE = 64


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point."""
    if isinstance(scalar, FR):
        scalar = int(scalar)
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2."""
    return bn128.add(p1, p2)


def is_on_curve(point):
    """G1 점이 곡선 위에 있는지 확인한다. 무한원점은 False."""
    if point is None:
        return False
    return bn128.is_on_curve(point, bn128.b)


def encode_g1(point):
    """G1 점 → 64바이트.

    Args:
        point: (FQ, FQ) 튜플 또는 None (무한원점)

    Returns:
        bytes: x || y, 각 32바이트 빅엔디안
    """
    if point is None:
        return b"\x00" * POINT_SIZE
    x, y = point
    return int(x).to_bytes(32, "big") + int(y).to_bytes(32, "big")


def decode_g1(data):
    """64바이트 → G1 점.

    Args:
        data: encode_g1로 만든 바이트열

    Returns:
        (FQ, FQ) 튜플, 또는 64바이트의 0이면 None

    Raises:
        ValueError: 길이가 64가 아니거나 점이 곡선 위에 있지 않을 때
    """
    if len(data) != POINT_SIZE:
        raise ValueError(f"G1 점은 {POINT_SIZE}바이트여야 합니다: {len(data)}")
    if data == b"\x00" * POINT_SIZE:
        return None
    x = int.from_bytes(data[:32], "big")
    y = int.from_bytes(data[32:], "big")
    if x >= bn128.field_modulus or y >= bn128.field_modulus:
        raise ValueError("G1 좌표가 기저 필드 범위를 벗어났습니다")
    point = (FQ(x), FQ(y))
    if not is_on_curve(point):
        raise ValueError("G1 점이 곡선 위에 있지 않습니다")
    return point
