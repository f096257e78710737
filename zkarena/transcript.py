"""
Fiat-Shamir 트랜스크립트
=========================

로컬 증명 백엔드의 Schnorr 증명을 비대화식으로 만들기 위한 SHA-256 해싱.

Prover와 Verifier가 같은 순서로 같은 데이터를 추가하면 같은 챌린지를 얻는다.
증명이 특정 검증 키와 공개 출력에 묶이도록, 챌린지를 뽑기 전에
프로그램 식별자 / 검증 키 / 공개 출력 / 커밋 점 R을 모두 추가한다.

사용 예시:
    >>> t = Transcript(b"zkarena-proof")
    >>> t.append_bytes(b"public_values", public_values)
    >>> t.append_point(b"R", R)
    >>> c = t.challenge_scalar(b"c")
"""

import hashlib

from zkarena.field import FR, CURVE_ORDER, encode_g1


class Transcript:
    """SHA-256 기반 Fiat-Shamir 트랜스크립트.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열

    보안 주의:
        - 모든 데이터는 레이블과 함께 추가하여 도메인 분리를 보장한다
        - 가변 길이 바이트열은 길이 접두사를 붙여 경계 모호성을 없앤다
    """

    def __init__(self, label=b"zkarena"):
        self.state = bytearray()
        self.state.extend(label)

    def append_bytes(self, label, data):
        """가변 길이 바이트열을 길이 접두사(8바이트)와 함께 추가한다."""
        self.state.extend(label)
        self.state.extend(len(data).to_bytes(8, "big"))
        self.state.extend(data)

    def append_scalar(self, label, scalar):
        """FR 스칼라 값을 32바이트 빅엔디안으로 추가한다."""
        self.state.extend(label)
        val = int(scalar) % CURVE_ORDER
        self.state.extend(val.to_bytes(32, "big"))

    def append_point(self, label, point):
        """G1 점을 64바이트로 추가한다. 무한원점은 64바이트의 0."""
        self.state.extend(label)
        self.state.extend(encode_g1(point))

    def challenge_scalar(self, label):
        """현재 상태로부터 챌린지 스칼라를 만든다.

        생성된 해시는 상태에 다시 추가되므로 (체이닝) 연속 호출은
        서로 다른 챌린지를 낸다.
        """
        self.state.extend(label)
        h = hashlib.sha256(bytes(self.state)).digest()
        challenge = FR(int.from_bytes(h, "big") % CURVE_ORDER)
        self.state.extend(h)
        return challenge
