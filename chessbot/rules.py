"""
Rules provider: the thin layer between the search and python-chess.

The search treats boards as immutable values. python-chess boards are mutable
(push/pop), so every function here either only reads the board it receives or
works on a copy. Nothing in the engine re-derives chess legality itself; all
of it is delegated to python-chess.
"""

import enum

import chess


class GameStatus(enum.Enum):
    """Terminal classification of a position."""

    ONGOING = "ongoing"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    OTHER_DRAW = "other_draw"


def game_status(board: chess.Board, moves: list[chess.Move] | None = None) -> GameStatus:
    """
    Classify a position as ongoing, checkmate, stalemate or another draw.

    Only draws python-chess declares automatically count (insufficient
    material, the 75-move rule, fivefold repetition); claimable draws do not
    end the search.

    Args:
        board: The position to classify. Not modified.
        moves: The legal moves of ``board`` when the caller has already
               generated them, so the search enumerates each node only once.
    """
    has_moves = bool(moves) if moves is not None else any(board.generate_legal_moves())
    if not has_moves:
        return GameStatus.CHECKMATE if board.is_check() else GameStatus.STALEMATE
    if (
        board.is_insufficient_material()
        or board.is_seventyfive_moves()
        or board.is_fivefold_repetition()
    ):
        return GameStatus.OTHER_DRAW
    return GameStatus.ONGOING


def legal_moves(board: chess.Board) -> list[chess.Move]:
    """Legal moves for the side to move, in python-chess enumeration order."""
    return list(board.legal_moves)


def is_capture(board: chess.Board, move: chess.Move) -> bool:
    # En passant counts even though its destination square is empty.
    return board.is_capture(move)


def is_promotion(move: chess.Move) -> bool:
    return move.promotion is not None


def gives_check(board: chess.Board, move: chess.Move) -> bool:
    """True if the position after ``move`` has the opponent king attacked."""
    return board.gives_check(move)


def apply_move(board: chess.Board, move: chess.Move) -> chess.Board:
    """
    Return the position after ``move``, leaving ``board`` untouched.

    The copy drops the move stack: the search never needs to undo a move,
    and copying a long game history at every node would dominate the cost.
    """
    child = board.copy(stack=False)
    child.push(move)
    return child


def legal_move_count(board: chess.Board, color: chess.Color) -> int:
    """
    Number of legal moves ``color`` would have in this position.

    When ``color`` is not to move, a null move hands it the turn on a copy.
    A side in check cannot pass, so in that case the idle side's count is 0.
    """
    if board.turn == color:
        return board.legal_moves.count()
    if board.is_check():
        return 0
    probe = board.copy(stack=False)
    probe.push(chess.Move.null())
    return probe.legal_moves.count()
