import sys
import os
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkarena.commitment import generate_commitments
from zkarena.game import connect4
from zkarena.game.agents import make_column_agent
from zkarena.pipeline import ArbitrationPipeline
from zkarena.setup_cache import KeyPairCache
from zkarena.simulator import GameSimulator
from zkarena.zkvm import LocalBackend


# ── 테스트 상수 ──
BACKEND_SEED = 7


class FakeLedger:
    """submit_game 호출을 기록하고 정해진 tx hash를 돌려주는 원장."""

    def __init__(self, tx_hash="0xfeed", fail_times=0, message="execution reverted: invalid proof"):
        self.tx_hash = tx_hash
        self.fail_times = fail_times
        self.message = message
        self.calls = []

    def submit_game(self, agent0_vk, agent1_vk, agent0_proof, agent1_proof, game_proof, public_values):
        self.calls.append({
            "agent0_vk": agent0_vk,
            "agent1_vk": agent1_vk,
            "agent0_proof": agent0_proof,
            "agent1_proof": agent1_proof,
            "game_proof": game_proof,
            "public_values": public_values,
        })
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError(self.message)
        return self.tx_hash


@pytest.fixture(scope="session")
def backend():
    return LocalBackend(seed=BACKEND_SEED)


@pytest.fixture(scope="session")
def metadata():
    """세션 전체가 공유하는 커밋먼트 (비밀 값은 버린다)."""
    _, md = generate_commitments()
    return md


@pytest.fixture(scope="session")
def column_agents():
    return make_column_agent(0), make_column_agent(1)


@pytest.fixture(scope="session")
def column_record(metadata, column_agents):
    """column0 vs column1 게임의 기준 기록."""
    return GameSimulator(connect4.RULES, column_agents).run(metadata)


@pytest.fixture
def cache(backend):
    return KeyPairCache(backend)


@pytest.fixture
def pipeline(backend, cache):
    return ArbitrationPipeline(connect4.RULES, backend, cache=cache)


@pytest.fixture
def column_programs(pipeline, column_agents):
    return pipeline.programs_for(*column_agents)


@pytest.fixture
def make_ledger():
    """FakeLedger 팩토리."""
    return FakeLedger
