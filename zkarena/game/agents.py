"""
Connect-4 에이전트
===================

모든 에이전트는 ``decide(public_state, context) -> int`` 시그니처를 따른다.
같은 공개 상태와 같은 컨텍스트 난수 스트림이 주어지면 항상 같은 수를 내야
게스트 프로그램 안에서 재생할 수 있다. 공개 상태를 변경해서도 안 된다.

- random_agent: 비어 있는 열 중 하나를 컨텍스트 난수로 고른다.
- make_minimax_agent(depth): 알파-베타 가지치기 미니맥스.
- make_column_agent(col): 항상 같은 열을 둔다 (테스트용).
"""

from zkarena.game.connect4 import COLS, ROWS, EMPTY

WIN_SCORE = 1_000_000


def random_agent(state, context):
    if state.winner != 0:
        return 0
    empty_columns = state.valid_columns()
    return empty_columns[context.rand_below(len(empty_columns))]


def make_column_agent(column):
    def column_agent(state, context):
        return column
    column_agent.__name__ = f"column_agent_{column}"
    return column_agent


# ─────────────────────────────────────────────────────────────────────
# 미니맥스
# ─────────────────────────────────────────────────────────────────────

def _valid_moves(board):
    return [c for c in range(COLS) if board[0][c] == EMPTY]


def _drop(board, col, piece):
    if board[0][col] != EMPTY:
        return None
    nxt = [row[:] for row in board]
    for r in range(ROWS - 1, -1, -1):
        if nxt[r][col] == EMPTY:
            nxt[r][col] = piece
            return nxt
    return None


def _windows(board):
    """모든 방향의 4칸 창."""
    for r in range(ROWS):
        for c in range(COLS - 3):
            yield [board[r][c + i] for i in range(4)]
    for c in range(COLS):
        for r in range(ROWS - 3):
            yield [board[r + i][c] for i in range(4)]
    for r in range(ROWS - 3):
        for c in range(COLS - 3):
            yield [board[r + i][c + i] for i in range(4)]
    for r in range(3, ROWS):
        for c in range(COLS - 3):
            yield [board[r - i][c + i] for i in range(4)]


def _is_win(board, piece):
    return any(all(cell == piece for cell in w) for w in _windows(board))


def _score_window(window, piece):
    mine = window.count(piece)
    empty = window.count(EMPTY)
    if mine == 4:
        return 1_000
    if mine == 3 and empty == 1:
        return 5
    if mine == 2 and empty == 2:
        return 2
    return 0


def _evaluate(board, me, opp):
    center = COLS // 2
    score = 6 * sum(1 for r in range(ROWS) if board[r][center] == me)
    for w in _windows(board):
        score += _score_window(w, me)
        score -= _score_window(w, opp)
    return score


def _minimax(board, depth, alpha, beta, maximizing, me, opp):
    moves = _valid_moves(board)
    my_win = _is_win(board, me)
    opp_win = _is_win(board, opp)
    if my_win or opp_win or not moves:
        if my_win:
            return WIN_SCORE, None
        if opp_win:
            return -WIN_SCORE, None
        return 0, None
    if depth == 0:
        return _evaluate(board, me, opp), None

    best_col = None
    if maximizing:
        value = -float("inf")
        for col in moves:
            score, _ = _minimax(_drop(board, col, me), depth - 1, alpha, beta, False, me, opp)
            if score > value:
                value, best_col = score, col
            alpha = max(alpha, value)
            if alpha >= beta:
                break
    else:
        value = float("inf")
        for col in moves:
            score, _ = _minimax(_drop(board, col, opp), depth - 1, alpha, beta, True, me, opp)
            if score < value:
                value, best_col = score, col
            beta = min(beta, value)
            if alpha >= beta:
                break
    return value, best_col


def make_minimax_agent(depth=4):
    """깊이 제한 미니맥스 에이전트를 만든다. 컨텍스트 난수는 쓰지 않는다."""

    def minimax_agent(state, context):
        me = state.current_player
        opp = 2 if me == 1 else 1
        _, col = _minimax(state.board, depth, -float("inf"), float("inf"), True, me, opp)
        if col is None:
            moves = _valid_moves(state.board)
            col = moves[0] if moves else 0
        return col

    minimax_agent.__name__ = f"minimax_agent_d{depth}"
    return minimax_agent


AGENTS = {
    "random": lambda cfg: random_agent,
    "minimax": lambda cfg: make_minimax_agent(cfg.minimax_depth),
}
AGENTS.update({f"column{c}": (lambda cfg, c=c: make_column_agent(c)) for c in range(COLS)})


def build_agent(name, config):
    """이름으로 에이전트를 만든다 (HTTP 레이어용).

    Raises:
        KeyError: 알 수 없는 에이전트 이름
    """
    return AGENTS[name](config)
