"""
Arena Flask Blueprint: 매치 실행/조회/재제출 엔드포인트
=========================================================

  GET  /arena/matches                 저장된 매치 목록
  POST /arena/matches                 {agent0, agent1, submit?} 로 파이프라인 실행
  GET  /arena/matches/<id>            매치 하나
  POST /arena/matches/<id>/submit     저장된 증명 번들을 (오프라인 검증 후) 원장에 재제출
  GET  /arena/programs                키 쌍 캐시 통계

오류 응답: InputAssemblyError 400, VerificationMismatch/SimulationError 422,
그 밖의 ArenaError 502.
"""

import logging

from flask import Blueprint, jsonify, request

from zkarena.errors import (
    ArenaError,
    InputAssemblyError,
    SettlementError,
    SimulationError,
    VerificationMismatch,
)
from zkarena.game.agents import build_agent
from zkarena.pipeline import new_match_id

from arena_serializers import (
    deserialize_bundle,
    serialize_error,
    serialize_match,
)

arena_bp = Blueprint('arena', __name__, url_prefix='/arena')

logger = logging.getLogger("zkarena.http")

# app.py에서 주입
STORE = None
PIPELINE = None
CONFIG = None


def init_arena_bp(store, pipeline, config):
    """app.py에서 저장소, 파이프라인, 설정을 주입받는다."""
    global STORE, PIPELINE, CONFIG
    STORE = store
    PIPELINE = pipeline
    CONFIG = config


def error_status(exc):
    if isinstance(exc, InputAssemblyError):
        return 400
    if isinstance(exc, (VerificationMismatch, SimulationError)):
        return 422
    return 502


def _bad_request(message):
    return jsonify({"error": {"type": "BadRequest", "message": message}}), 400


# ──────────────────────────────────────────────────────────────
# Matches
# ──────────────────────────────────────────────────────────────

@arena_bp.route("/matches", methods=["GET"])
def list_matches():
    return jsonify(STORE.all())


@arena_bp.route("/matches", methods=["POST"])
def create_match():
    """두 에이전트로 게임을 실행하고 증명을 만든다 (설정 시 정산까지)."""
    body = request.get_json(silent=True) or {}
    names = (body.get("agent0"), body.get("agent1"))
    if not all(names):
        return _bad_request("agent0 and agent1 are required")
    try:
        agents = [build_agent(name, CONFIG) for name in names]
    except KeyError as exc:
        return _bad_request(f"unknown agent {exc.args[0]!r}")

    match_id = new_match_id()
    try:
        result = PIPELINE.run(
            agents[0], agents[1], names=names,
            submit=bool(body.get("submit", True)), match_id=match_id,
        )
    except ArenaError as exc:
        logger.warning("match %s failed: %s", match_id, exc)
        result = getattr(exc, "result", None)
        if result is not None:
            # 증명까지는 끝났으므로 번들을 보관해 재제출할 수 있게 한다
            doc = serialize_match(result, PIPELINE.rules, names)
            doc["error"] = serialize_error(exc)
        else:
            doc = {
                "agents": list(names),
                "status": "failed",
                "tx_hash": None,
                "error": serialize_error(exc),
            }
        doc = STORE.put(match_id, doc)
        return jsonify(doc), error_status(exc)

    doc = STORE.put(match_id, serialize_match(result, PIPELINE.rules, names))
    return jsonify(doc), 201


@arena_bp.route("/matches/<match_id>", methods=["GET"])
def get_match(match_id):
    doc = STORE.get(match_id)
    if doc is None:
        return jsonify({"error": {"type": "NotFound", "message": match_id}}), 404
    return jsonify(doc)


@arena_bp.route("/matches/<match_id>/submit", methods=["POST"])
def resubmit_match(match_id):
    """저장된 번들을 그대로 다시 제출한다. 증명은 다시 만들지 않는다."""
    doc = STORE.get(match_id)
    if doc is None:
        return jsonify({"error": {"type": "NotFound", "message": match_id}}), 404
    if doc.get("bundle") is None:
        return jsonify({"error": {"type": "Conflict", "message": "match has no proof bundle"}}), 409
    if doc.get("status") == "settled":
        return jsonify({"error": {"type": "Conflict", "message": "match already settled"}}), 409
    if PIPELINE.submitter is None:
        return jsonify({"error": {"type": "Unavailable", "message": "no ledger configured"}}), 503

    bundle = deserialize_bundle(doc["bundle"])
    for proof in (bundle.game, bundle.agent0, bundle.agent1):
        # 이 프로세스가 유도한 키 쌍이 있을 때만 오프라인 검증이 가능하다
        key_pair = PIPELINE.cache.get(proof.program_id)
        if key_pair is not None and not PIPELINE.prover.verify_proof(proof, key_pair):
            return jsonify({"error": {"type": "Conflict", "message": "stored proof does not verify"}}), 409

    try:
        tx_hash = PIPELINE.submit(bundle)
    except SettlementError as exc:
        doc = STORE.update(match_id, error=serialize_error(exc))
        return jsonify(doc), error_status(exc)

    doc = STORE.update(match_id, status="settled", tx_hash=tx_hash, error=None)
    return jsonify(doc)


# ──────────────────────────────────────────────────────────────
# Programs
# ──────────────────────────────────────────────────────────────

@arena_bp.route("/programs", methods=["GET"])
def program_stats():
    return jsonify(PIPELINE.cache.stats())
