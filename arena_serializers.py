"""
매치 데이터 직렬화/역직렬화 헬퍼
==================================

TinyDB에 저장하고 JSON으로 응답할 수 있는 형태로 파이프라인 객체를 변환한다.
커밋먼트, 게임 기록, 증명, 증명 번들, 캐시 통계 등.
바이트열은 모두 hex 문자열로 저장한다.
"""

from zkarena.commitment import MatchMetadata, ParticipantMetadata, Role
from zkarena.settlement import ProofBundle
from zkarena.zkvm.types import Proof


# ─── bytes ───

def serialize_bytes(data):
    """bytes → hex str"""
    return data.hex()


def deserialize_bytes(s):
    """hex str → bytes"""
    return bytes.fromhex(s)


# ─── 메타데이터 ───

def serialize_metadata(metadata):
    """MatchMetadata → {"server": hex, "players": [hex, hex]}"""
    return {
        "server": serialize_bytes(metadata.server.commitment),
        "players": [serialize_bytes(p.commitment) for p in metadata.players],
    }


def deserialize_metadata(data):
    """dict → MatchMetadata"""
    players = tuple(
        ParticipantMetadata(role, deserialize_bytes(h))
        for role, h in zip((Role.PLAYER0, Role.PLAYER1), data["players"])
    )
    return MatchMetadata(
        server=ParticipantMetadata(Role.SERVER, deserialize_bytes(data["server"])),
        players=players,
    )


# ─── GameRecord ───

def serialize_record(record, rules):
    """GameRecord → dict (최종 상태는 게임 인코딩의 hex)"""
    return {
        "moves": list(record.moves),
        "movers": list(record.movers),
        "outcome": record.outcome.value,
        "turns": record.turns,
        "terminal": record.is_terminal,
        "final_state": serialize_bytes(rules.encode_public_state(record.final_state)),
    }


# ─── Proof ───

def serialize_proof(proof):
    """Proof → dict"""
    return {
        "program_id": proof.program_id,
        "vk_hash": serialize_bytes(proof.vk_hash),
        "public_values": serialize_bytes(proof.public_values),
        "proof_bytes": serialize_bytes(proof.proof_bytes),
    }


def deserialize_proof(data):
    """dict → Proof"""
    return Proof(
        program_id=data["program_id"],
        vk_hash=deserialize_bytes(data["vk_hash"]),
        public_values=deserialize_bytes(data["public_values"]),
        proof_bytes=deserialize_bytes(data["proof_bytes"]),
    )


# ─── ProofBundle ───

def serialize_bundle(bundle):
    """ProofBundle → dict"""
    return {
        "game": serialize_proof(bundle.game),
        "agent0": serialize_proof(bundle.agent0),
        "agent1": serialize_proof(bundle.agent1),
        "public_state": serialize_bytes(bundle.public_state),
    }


def deserialize_bundle(data):
    """dict → ProofBundle"""
    return ProofBundle(
        game=deserialize_proof(data["game"]),
        agent0=deserialize_proof(data["agent0"]),
        agent1=deserialize_proof(data["agent1"]),
        public_state=deserialize_bytes(data["public_state"]),
    )


# ─── MatchResult ───

def serialize_match(result, rules, names):
    """MatchResult → 저장용 문서"""
    return {
        "agents": list(names),
        "metadata": serialize_metadata(result.metadata),
        "record": serialize_record(result.record, rules),
        "bundle": serialize_bundle(result.bundle),
        "status": "settled" if result.settled else "proved",
        "tx_hash": result.tx_hash,
        "error": None,
    }


def serialize_error(exc):
    """예외 → {"type", "message", ...} (VerificationMismatch는 program/check 포함)"""
    out = {"type": type(exc).__name__, "message": str(exc)}
    for attr in ("program", "check", "operation"):
        if hasattr(exc, attr):
            out[attr] = getattr(exc, attr)
    return out
