"""
Config, logging and store tests
"""
import io
import logging

import pytest

from zkarena import log
from zkarena.config import ArenaConfig
from zkarena.store import MatchStore, open_db


class TestArenaConfig:
    def test_defaults(self):
        cfg = ArenaConfig.from_env(env={})
        assert cfg == ArenaConfig()
        assert not cfg.settlement_enabled

    def test_from_env(self):
        cfg = ArenaConfig.from_env(env={
            "ZKARENA_DB_PATH": ":memory:",
            "ZKARENA_MAX_TURNS": "64",
            "ZKARENA_LOG_LEVEL": "debug",
            "ZKARENA_CONTRACT_ADDRESS": "0x" + "ab" * 20,
        })
        assert cfg.db_path == ":memory:"
        assert cfg.max_turns == 64
        assert cfg.log_level == "DEBUG"
        assert cfg.settlement_enabled

    def test_custom_prefix(self):
        cfg = ArenaConfig.from_env(prefix="ARENA_", env={"ARENA_MINIMAX_DEPTH": "2"})
        assert cfg.minimax_depth == 2

    def test_empty_values_ignored(self):
        assert ArenaConfig.from_env(env={"ZKARENA_MAX_TURNS": ""}).max_turns == 128

    @pytest.mark.parametrize("env", [
        {"ZKARENA_MAX_TURNS": "0"},
        {"ZKARENA_MINIMAX_DEPTH": "-1"},
        {"ZKARENA_LOG_LEVEL": "LOUD"},
        {"ZKARENA_CONTRACT_ADDRESS": "abcd"},
    ])
    def test_invalid(self, env):
        with pytest.raises(ValueError):
            ArenaConfig.from_env(env=env)

    def test_private_key_not_serialized(self, monkeypatch):
        monkeypatch.setenv("ZKARENA_PRIVATE_KEY", "0xsecret")
        cfg = ArenaConfig()
        assert cfg.private_key() == "0xsecret"
        assert "0xsecret" not in str(cfg.to_dict())


class TestLogging:
    def test_configure_is_idempotent(self):
        stream = io.StringIO()
        logger = log.configure("DEBUG", stream=stream)
        log.configure("DEBUG", stream=stream)
        named = [h for h in logger.handlers if h.get_name() == "zkarena"]
        assert len(named) == 1

    def test_child_loggers_reach_handler(self):
        stream = io.StringIO()
        logger = log.configure("INFO")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        log.configure("INFO", stream=stream)
        logging.getLogger("zkarena.pipeline").info("match complete")
        assert "zkarena.pipeline: match complete" in stream.getvalue()

    def test_short_hex(self):
        assert log.short_hex(bytes(range(16)), 2) == "0001"
        assert log.short_hex(None) == "-"


class TestMatchStore:
    @pytest.fixture
    def store(self):
        return MatchStore(open_db(":memory:"))

    def test_put_get(self, store):
        store.put("m1", {"status": "proved"})
        assert store.get("m1") == {"status": "proved", "match_id": "m1"}
        assert store.get("missing") is None

    def test_put_is_upsert(self, store):
        store.put("m1", {"status": "proved"})
        store.put("m1", {"status": "settled"})
        assert len(store.all()) == 1
        assert store.get("m1")["status"] == "settled"

    def test_update(self, store):
        store.put("m1", {"status": "proved", "tx_hash": None})
        doc = store.update("m1", status="settled", tx_hash="0x1")
        assert doc["tx_hash"] == "0x1"

    def test_remove(self, store):
        store.put("m1", {})
        store.remove("m1")
        assert store.all() == []

    def test_file_db(self, tmp_path):
        path = str(tmp_path / "arena.json")
        MatchStore(open_db(path)).put("m1", {"status": "proved"})
        assert MatchStore(open_db(path)).get("m1")["status"] == "proved"
