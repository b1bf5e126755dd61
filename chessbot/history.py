"""Move-history helpers: the anti-repetition banned move and captured pieces."""

from typing import Sequence

import chess


def banned_move(history: Sequence[chess.Move]) -> chess.Move | None:
    """
    The exact reverse of the last move played, or None for an empty history.

    Destination and source swap; the promotion piece is kept, so a reversed
    promotion is a move no board will ever list as legal.
    """
    if not history:
        return None
    last = history[-1]
    return chess.Move(last.to_square, last.from_square, promotion=last.promotion)


def captured_pieces(
    moves: Sequence[chess.Move],
    start: chess.Board | None = None,
) -> tuple[list[chess.Piece], list[chess.Piece]]:
    """
    Replay ``moves`` and collect every piece taken, in capture order.

    Args:
        moves: Moves in the order they were played, oldest first.
        start: Position the moves start from; the standard initial position
               when omitted. Not modified.

    Returns:
        (white_lost, black_lost): White pieces captured by Black and Black
        pieces captured by White.

    Raises:
        ValueError: if a move is not legal when it is reached.
    """
    board = start.copy(stack=False) if start is not None else chess.Board()
    white_lost: list[chess.Piece] = []
    black_lost: list[chess.Piece] = []

    for move in moves:
        if move not in board.legal_moves:
            raise ValueError(f"illegal move {move.uci()} in position {board.fen()}")
        if board.is_en_passant(move):
            captured = chess.Piece(chess.PAWN, not board.turn)
        else:
            captured = board.piece_at(move.to_square)
        if captured is not None:
            if captured.color == chess.WHITE:
                white_lost.append(captured)
            else:
                black_lost.append(captured)
        board.push(move)

    return white_lost, black_lost
