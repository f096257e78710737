"""
Connect-4 reducer and agent tests
"""
import pytest

from zkarena.context import ActionContext
from zkarena.game import connect4, current_mover
from zkarena.game.agents import (
    AGENTS,
    build_agent,
    make_column_agent,
    make_minimax_agent,
    random_agent,
)
from zkarena.game.connect4 import COLS, DRAW, ROWS, PublicState
from zkarena.config import ArenaConfig


def play(columns):
    public, private = connect4.initial_state()
    for col in columns:
        connect4.apply(public, private, col, None)
    return public, private


# =====================================================================
# Reducer
# =====================================================================

class TestReducer:
    def test_initial_state(self):
        public, private = connect4.initial_state()
        assert public.current_player == 1
        assert public.winner == 0
        assert public.moves == []
        assert not public.is_terminal()
        assert private.moves == 0

    def test_piece_falls_to_bottom(self):
        public, _ = play([3])
        assert public.board[ROWS - 1][3] == 1
        assert public.current_player == 2
        assert public.moves == [3]

    def test_players_alternate(self):
        public, _ = play([3, 3])
        assert public.board[ROWS - 1][3] == 1
        assert public.board[ROWS - 2][3] == 2
        assert current_mover(public) == 0

    def test_vertical_win(self):
        public, _ = play([0, 1, 0, 1, 0, 1, 0])
        assert public.winner == 1
        assert public.is_terminal()
        assert public.current_player == 1

    def test_horizontal_win(self):
        public, _ = play([0, 0, 1, 1, 2, 2, 3])
        assert public.winner == 1

    def test_diagonal_win(self):
        # X: 0, 1, 2, 3 대각선 / O는 받침만 쌓는다
        public, _ = play([0, 1, 1, 2, 2, 3, 2, 3, 3, 6, 3])
        assert public.winner == 1

    def test_out_of_range_move_ignored(self):
        public, private = play([COLS, 200])
        assert public.moves == []
        assert public.current_player == 1
        assert private.moves == 0

    def test_full_column_ignored(self):
        public, _ = play([0] * ROWS)
        before = [row[:] for row in public.board]
        connect4.apply(public, connect4.PrivateState(), 0, None)
        assert public.board == before
        assert len(public.moves) == ROWS

    def test_moves_after_win_ignored(self):
        public, _ = play([0, 1, 0, 1, 0, 1, 0, 5])
        assert public.moves == [0, 1, 0, 1, 0, 1, 0]

    def test_last_cell_without_line_is_draw(self):
        board = [[2] * COLS for _ in range(ROWS)]
        board[0][6] = 0
        public = PublicState(board=board, current_player=1)
        connect4.apply(public, connect4.PrivateState(), 6, None)
        assert public.board[0][6] == 1
        assert public.winner == DRAW
        assert public.is_terminal()


class TestEncoding:
    def test_decode_inverts_encode(self):
        public, _ = play([3, 2, 3, 4])
        decoded = connect4.decode_public_state(connect4.encode_public_state(public))
        assert decoded == public

    def test_encoding_is_canonical(self):
        a, _ = play([3, 2, 3])
        b, _ = play([3, 2, 3])
        assert connect4.encode_public_state(a) == connect4.encode_public_state(b)

    def test_encoding_distinguishes_move_order(self):
        a, _ = play([0, 1])
        b, _ = play([1, 0])
        assert connect4.encode_public_state(a) != connect4.encode_public_state(b)

    def test_format_board(self):
        public, _ = play([0, 1, 0, 1, 0, 1, 0])
        text = connect4.format_board(public)
        assert text.splitlines()[-1] == "Winner: X"
        assert len(text.splitlines()) == ROWS + 1


# =====================================================================
# Agents
# =====================================================================

class TestAgents:
    def test_column_agent(self):
        agent = make_column_agent(4)
        assert agent(PublicState(), None) == 4
        assert agent.__name__ == "column_agent_4"

    def test_random_agent_is_deterministic(self, metadata):
        public, _ = play([3, 3, 3])
        a = random_agent(public, ActionContext.for_player(metadata, 0))
        b = random_agent(public, ActionContext.for_player(metadata, 0))
        assert a == b

    def test_random_agent_picks_open_column(self, metadata):
        public, _ = play([0] * ROWS + [1] * ROWS)
        ctx = ActionContext.for_player(metadata, 0)
        for _ in range(30):
            assert random_agent(public, ctx) in public.valid_columns()

    def test_random_agent_does_not_mutate_state(self, metadata):
        public, _ = play([2, 4])
        snapshot = connect4.encode_public_state(public)
        random_agent(public, ActionContext.for_player(metadata, 0))
        assert connect4.encode_public_state(public) == snapshot

    def test_minimax_takes_winning_move(self):
        public, _ = play([0, 1, 0, 1, 0, 1])
        assert make_minimax_agent(2)(public, None) == 0

    def test_minimax_blocks(self):
        # O 차례, X가 0번 열 3개
        public, _ = play([0, 1, 0, 1, 0])
        assert make_minimax_agent(2)(public, None) == 0

    def test_build_agent(self):
        cfg = ArenaConfig(minimax_depth=2)
        assert build_agent("minimax", cfg).__name__ == "minimax_agent_d2"
        assert build_agent("column6", cfg)(PublicState(), None) == 6
        assert set(AGENTS) >= {"random", "minimax", "column0"}

    def test_unknown_agent(self):
        with pytest.raises(KeyError):
            build_agent("nope", ArenaConfig())
