"""
Static evaluation: material, mobility and center control, plus a stand-pat
variant that adds development and king-safety terms.

evaluate() always scores from White's point of view: positive means White is
better. The search multiplies by the perspective sign (+1 for White, -1 for
Black) to get a score for the side it is currently maximizing. stand_pat()
applies that sign itself, because the quiescence search only ever asks it
"how good is this for the side I am searching for?".

Every term is antisymmetric by construction, so a position and its
color-flipped mirror image always evaluate to opposite scores.

Terminal positions (checkmate, stalemate) must be detected by the caller
before evaluating; the evaluator has no notion of game over.
"""

import chess

from chessbot.constants import (
    CASTLED_KING_BONUS,
    CASTLED_KING_FILES,
    CENTER_BONUS,
    CENTER_SQUARES,
    EVAL_BAR_LIMIT,
    MINOR_DEVELOPED_BONUS,
    MOBILITY_WEIGHT,
    PIECE_VALUES,
    ROOK_DEVELOPED_BONUS,
)
from chessbot.rules import legal_move_count


def material_balance(board: chess.Board) -> int:
    """
    Material difference in centipawns, White minus Black.

    Args:
        board: The position to count. Not modified.

    Returns:
        Sum over piece kinds of (white count - black count) * piece value.
    """
    score = 0
    for piece_type, value in PIECE_VALUES.items():
        white = len(board.pieces(piece_type, chess.WHITE))
        black = len(board.pieces(piece_type, chess.BLACK))
        score += (white - black) * value
    return score


def mobility(board: chess.Board, mover_moves: int | None = None) -> int:
    """
    Mobility term: weighted difference in legal move counts, White minus Black.

    ``mover_moves`` is the side to move's legal move count when the caller
    already has it; only the idle side then needs a null-move probe.
    """
    if mover_moves is None:
        mover_moves = legal_move_count(board, board.turn)
    idle_moves = legal_move_count(board, not board.turn)
    if board.turn == chess.WHITE:
        white_moves, black_moves = mover_moves, idle_moves
    else:
        white_moves, black_moves = idle_moves, mover_moves
    return MOBILITY_WEIGHT * (white_moves - black_moves)


def center_control(board: chess.Board) -> int:
    score = 0
    for sq in CENTER_SQUARES:
        piece = board.piece_at(sq)
        if piece is None:
            continue
        bonus = CENTER_BONUS[piece.piece_type]
        score += bonus if piece.color == chess.WHITE else -bonus
    return score


def development(board: chess.Board) -> int:
    """
    Development and king-safety bonus, White minus Black.

    Knights and bishops off their back rank, rooks off their back rank, and a
    king standing on the g- or c-file (where castling puts it) each earn a
    small bonus for their owner.
    """
    score = 0
    for sq, piece in board.piece_map().items():
        # Rank measured from the owner's side: 0 is its back rank.
        rank = chess.square_rank(sq) if piece.color == chess.WHITE else 7 - chess.square_rank(sq)
        bonus = 0
        if piece.piece_type in (chess.KNIGHT, chess.BISHOP):
            if rank > 0:
                bonus = MINOR_DEVELOPED_BONUS
        elif piece.piece_type == chess.ROOK:
            if rank > 0:
                bonus = ROOK_DEVELOPED_BONUS
        elif piece.piece_type == chess.KING:
            if chess.square_file(sq) in CASTLED_KING_FILES:
                bonus = CASTLED_KING_BONUS
        score += bonus if piece.color == chess.WHITE else -bonus
    return score


def evaluate(board: chess.Board, mover_moves: int | None = None) -> int:
    """
    Centipawn evaluation from White's perspective.

    Adds up material, mobility (the idle side's moves are counted through a
    null-move probe) and center occupation. Deterministic and side-effect
    free.

    Args:
        board:       A non-terminal position. Not modified.
        mover_moves: Legal move count of the side to move, if already known.

    Returns:
        Score in centipawns; positive favours White.

    Example:
        >>> import chess
        >>> evaluate(chess.Board())
        0
    """
    return material_balance(board) + mobility(board, mover_moves) + center_control(board)


def stand_pat(board: chess.Board, sign: int, mover_moves: int | None = None) -> int:
    """
    Static score used as the quiescence baseline, for the side given by ``sign``.

    Args:
        board:       The position to score. Not modified.
        sign:        +1 to score for White, -1 to score for Black.
        mover_moves: Legal move count of the side to move, if already known.

    Returns:
        sign * (evaluate(board) + development(board)).
    """
    return sign * (evaluate(board, mover_moves) + development(board))


def eval_bar(score: int) -> float:
    """Map a White-positive score onto [-1.0, 1.0] for an evaluation gauge."""
    clamped = max(-EVAL_BAR_LIMIT, min(score, EVAL_BAR_LIMIT))
    return clamped / EVAL_BAR_LIMIT
