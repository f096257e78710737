"""
HTTP service tests (Flask test client, in-memory TinyDB)
"""

from zkarena.config import ArenaConfig
from zkarena.errors import VerificationMismatch
from zkarena.game import connect4
from zkarena.zkvm import LocalBackend

import arena_routes
from app import create_app
from arena_serializers import (
    deserialize_bundle,
    deserialize_metadata,
    serialize_bundle,
    serialize_error,
    serialize_metadata,
)

def make_client(ledger=None):
    config = ArenaConfig(db_path=":memory:", minimax_depth=2, log_level="WARNING")
    app = create_app(config, backend=LocalBackend(seed=5), ledger=ledger)
    app.config["TESTING"] = True
    return app.test_client()

def column_match(client, **extra):
    return client.post("/arena/matches", json=dict({"agent0": "column0", "agent1": "column1"}, **extra))

class TestIndex:
    def test_index(self):
        body = make_client().get("/").get_json()
        assert body["game"] == connect4.RULES.name
        assert body["settlement"] is False
        assert body["matches"] == 0

class TestMatches:
    def test_create_and_fetch(self, make_ledger):
        client = make_client(make_ledger(tx_hash="0xabc"))
        resp = column_match(client)
        assert resp.status_code == 201
        doc = resp.get_json()
        assert doc["status"] == "settled"
        assert doc["tx_hash"] == "0xabc"
        assert doc["record"]["moves"] == [0, 1, 0, 1, 0, 1, 0]
        assert doc["record"]["outcome"] == "finished"

        fetched = client.get(f"/arena/matches/{doc['match_id']}")
        assert fetched.status_code == 200
        assert fetched.get_json()["bundle"] == doc["bundle"]
        assert len(client.get("/arena/matches").get_json()) == 1

    def test_without_ledger_match_is_proved(self):
        resp = column_match(make_client())
        assert resp.status_code == 201
        assert resp.get_json()["status"] == "proved"

    def test_missing_agent(self):
        resp = make_client().post("/arena/matches", json={"agent0": "random"})
        assert resp.status_code == 400

    def test_unknown_agent(self):
        resp = make_client().post("/arena/matches", json={"agent0": "random", "agent1": "oracle"})
        assert resp.status_code == 400
        assert "oracle" in resp.get_json()["error"]["message"]

    def test_stalled_match_is_unprocessable(self):
        client = make_client()
        resp = client.post("/arena/matches", json={"agent0": "column0", "agent1": "column0"})
        assert resp.status_code == 422
        doc = resp.get_json()
        assert doc["status"] == "failed"
        assert doc["error"]["type"] == "VerificationMismatch"
        assert doc["error"]["check"] == "terminal"
        assert client.get(f"/arena/matches/{doc['match_id']}").status_code == 200

    def test_not_found(self):
        assert make_client().get("/arena/matches/nope").status_code == 404

class TestResubmit:
    def test_failed_settlement_then_resubmit(self, make_ledger):
        ledger = make_ledger(fail_times=1, message="nonce too low", tx_hash="0x99")
        client = make_client(ledger)

        resp = column_match(client)
        assert resp.status_code == 502
        doc = resp.get_json()
        assert doc["status"] == "proved"
        assert doc["error"] == {"type": "SettlementError", "message": "nonce too low"}

        resp = client.post(f"/arena/matches/{doc['match_id']}/submit")
        assert resp.status_code == 200
        settled = resp.get_json()
        assert settled["status"] == "settled"
        assert settled["tx_hash"] == "0x99"
        assert settled["error"] is None
        assert ledger.calls[0] == ledger.calls[1]

    def test_already_settled(self, make_ledger):
        client = make_client(make_ledger())
        match_id = column_match(client).get_json()["match_id"]
        assert client.post(f"/arena/matches/{match_id}/submit").status_code == 409

    def test_tampered_bundle_not_resubmitted(self, make_ledger):
        ledger = make_ledger(fail_times=1)
        client = make_client(ledger)
        doc = column_match(client).get_json()
        bundle = dict(doc["bundle"])
        bundle["game"] = dict(bundle["game"], public_values=bundle["agent0"]["public_values"])
        arena_routes.STORE.update(doc["match_id"], bundle=bundle)

        resp = client.post(f"/arena/matches/{doc['match_id']}/submit")
        assert resp.status_code == 409
        assert len(ledger.calls) == 1

    def test_no_ledger(self):
        client = make_client()
        match_id = column_match(client).get_json()["match_id"]
        assert client.post(f"/arena/matches/{match_id}/submit").status_code == 503

    def test_failed_match_has_no_bundle(self):
        client = make_client()
        resp = client.post("/arena/matches", json={"agent0": "column0", "agent1": "column0"})
        match_id = resp.get_json()["match_id"]
        assert client.post(f"/arena/matches/{match_id}/submit").status_code == 409

    def test_resubmit_failure_recorded(self, make_ledger):
        ledger = make_ledger(fail_times=2, message="execution reverted")
        client = make_client(ledger)
        match_id = column_match(client).get_json()["match_id"]
        resp = client.post(f"/arena/matches/{match_id}/submit")
        assert resp.status_code == 502
        assert resp.get_json()["error"]["message"] == "execution reverted"
        assert resp.get_json()["status"] == "proved"

class TestPrograms:
    def test_cache_stats(self):
        client = make_client()
        column_match(client)
        column_match(client)
        stats = client.get("/arena/programs").get_json()
        assert len(stats) == 3
        assert all(entry["derivations"] == 1 for entry in stats.values())
        assert all(entry["hits"] == 1 for entry in stats.values())

class TestSerializers:
    def test_metadata(self, metadata):
        assert deserialize_metadata(serialize_metadata(metadata)) == metadata

    def test_bundle(self):
        client = make_client()
        doc = column_match(client).get_json()
        assert serialize_bundle(deserialize_bundle(doc["bundle"])) == doc["bundle"]

    def test_error_fields(self):
        out = serialize_error(VerificationMismatch("agent1", "move-list", [1], [2]))
        assert out["program"] == "agent1"
        assert out["check"] == "move-list"
