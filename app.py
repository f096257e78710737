from flask import Flask, jsonify

from zkarena import log
from zkarena.config import ArenaConfig
from zkarena.game import connect4
from zkarena.pipeline import ArbitrationPipeline
from zkarena.settlement import build_ledger
from zkarena.setup_cache import KeyPairCache
from zkarena.store import MatchStore, open_db
from zkarena.zkvm import LocalBackend

from arena_routes import arena_bp, init_arena_bp


def create_app(config=None, backend=None, ledger=None):
    """Arena 서비스 앱을 만든다.

    config가 없으면 환경 변수(ZKARENA_*)에서 읽는다. backend/ledger는 테스트에서
    주입할 수 있고, 없으면 로컬 백엔드와 설정의 web3 원장을 쓴다.
    """
    config = config or ArenaConfig.from_env()
    log.configure(config.log_level)

    backend = backend or LocalBackend()
    if ledger is None:
        ledger = build_ledger(config)

    DB = open_db(config.db_path)
    store = MatchStore(DB)
    cache = KeyPairCache(backend)
    pipeline = ArbitrationPipeline(
        connect4.RULES, backend, cache=cache, ledger=ledger, max_turns=config.max_turns
    )

    app = Flask(__name__)
    app.config["ARENA"] = config.to_dict()
    init_arena_bp(store, pipeline, config)
    app.register_blueprint(arena_bp)

    @app.route("/")
    def main():
        return jsonify({
            "service": "zkarena",
            "game": connect4.RULES.name,
            "settlement": config.settlement_enabled,
            "matches": len(store.all()),
        })

    return app


if __name__ == "__main__":
    create_app().run()
