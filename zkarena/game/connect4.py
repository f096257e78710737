"""
Connect-4 리듀서 (6행 × 7열)
=============================

파이프라인에 꽂아 쓰는 기본 게임 규칙.

**공개 상태 (PublicState)**:
  board[row][col]: 0 = 빈칸, 1 = 플레이어 1, 2 = 플레이어 2
                   row 0이 맨 위, row 5가 맨 아래
  current_player:  1 또는 2
  winner:          0 = 진행 중, 1/2 = 승자, 3 = 무승부
  moves:           리듀서가 실제로 받아들인 수(열 번호)의 목록

**규칙**:
  - 이미 끝난 게임, 범위 밖 열(≥ 7), 꽉 찬 열에 대한 수는 무시된다
    (상태 변화 없음, moves에도 추가되지 않음).
  - 말을 놓은 뒤 4목이면 승리, 판이 꽉 차면 무승부,
    그 외에는 차례가 넘어간다.

**인코딩**:
  게임 프로그램이 공개 출력으로 커밋하고 원장에 제출되는 값은
  eth-abi 인코딩 (uint32[7][6] board, uint32 current_player,
  uint32 winner, uint8[] moves) 이다.
"""

from dataclasses import dataclass, field

from eth_abi import decode, encode

from zkarena.game.traits import GameRules

ROWS = 6
COLS = 7

EMPTY = 0
DRAW = 3

STATE_ABI_TYPES = ["uint32[7][6]", "uint32", "uint32", "uint8[]"]


def _empty_board():
    return [[EMPTY] * COLS for _ in range(ROWS)]


@dataclass
class PublicState:
    board: list = field(default_factory=_empty_board)
    current_player: int = 1
    winner: int = 0
    moves: list = field(default_factory=list)

    def is_terminal(self):
        return self.winner != 0

    def mover(self):
        """현재 차례인 플레이어의 인덱스 (0 또는 1)."""
        return self.current_player - 1

    def valid_columns(self):
        return [c for c in range(COLS) if self.board[0][c] == EMPTY]


@dataclass
class PrivateState:
    moves: int = 0


def initial_state():
    return PublicState(), PrivateState()


def _count_direction(board, row, col, d_row, d_col, player):
    count = 0
    r, c = row + d_row, col + d_col
    while 0 <= r < ROWS and 0 <= c < COLS and board[r][c] == player:
        count += 1
        r += d_row
        c += d_col
    return count


def check_winner(board, row, col, player):
    """(row, col)에 놓인 player의 말이 4목을 만드는지 확인한다."""
    for d_row, d_col in ((0, 1), (1, 0), (1, 1), (1, -1)):
        line = (
            1
            + _count_direction(board, row, col, d_row, d_col, player)
            + _count_direction(board, row, col, -d_row, -d_col, player)
        )
        if line >= 4:
            return True
    return False


def is_board_full(board):
    return all(board[0][c] != EMPTY for c in range(COLS))


def apply(public_state, private_state, move, context):
    """리듀서: 열 `move`에 현재 플레이어의 말을 떨어뜨린다.

    규칙에 맞지 않는 수는 조용히 무시한다. 이 게임은 context의 난수를 쓰지 않는다.
    """
    if public_state.winner != 0:
        return
    if not 0 <= move < COLS:
        return

    board = public_state.board
    row = ROWS - 1
    while row > 0 and board[row][move] != EMPTY:
        row -= 1
    if board[row][move] != EMPTY:
        return

    player = public_state.current_player
    board[row][move] = player
    private_state.moves += 1

    if check_winner(board, row, move, player):
        public_state.winner = player
    elif is_board_full(board):
        public_state.winner = DRAW
    else:
        public_state.current_player = 2 if player == 1 else 1

    public_state.moves.append(move)


def encode_public_state(state):
    return encode(
        STATE_ABI_TYPES,
        [
            [list(row) for row in state.board],
            state.current_player,
            state.winner,
            list(state.moves),
        ],
    )


def decode_public_state(data):
    board, current_player, winner, moves = decode(STATE_ABI_TYPES, data)
    return PublicState(
        board=[list(row) for row in board],
        current_player=current_player,
        winner=winner,
        moves=list(moves),
    )


def format_board(state):
    """터미널 출력용 문자열. X = 플레이어 1, O = 플레이어 2."""
    symbols = {EMPTY: "-", 1: "X", 2: "O"}
    lines = [" ".join(symbols[cell] for cell in row) for row in state.board]
    if state.winner in (1, 2):
        lines.append(f"Winner: {symbols[state.winner]}")
    elif state.winner == DRAW:
        lines.append("Winner: Draw")
    else:
        lines.append(f"Current player: {symbols[state.current_player]}")
    return "\n".join(lines)


RULES = GameRules(
    name="connect4-6x7-v1",
    initial_state=initial_state,
    apply=apply,
    encode_public_state=encode_public_state,
    decode_public_state=decode_public_state,
)
