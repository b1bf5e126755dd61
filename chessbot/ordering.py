"""
Move ordering for alpha-beta pruning.

Alpha-beta visits fewer nodes when the best move at a node is searched first,
because a strong early score raises alpha and prunes the remaining siblings.
Captures, promotions and checks are cheap-to-spot proxies for tactically
important moves, so they go to the front. Ordering never changes the value a
search returns, only how many nodes it visits.
"""

from typing import Iterable

import chess

from chessbot.constants import CAPTURE_PRIORITY, CHECK_PRIORITY, PROMOTION_PRIORITY
from chessbot.rules import gives_check, is_capture, is_promotion


def move_priority(board: chess.Board, move: chess.Move) -> int:
    """
    Sort key for a move: lower is searched earlier.

    The bonuses add up, so a capture that also promotes with check sorts
    ahead of a plain capture. Quiet moves score 0.
    """
    priority = 0
    if is_capture(board, move):
        priority += CAPTURE_PRIORITY
    if is_promotion(move):
        priority += PROMOTION_PRIORITY
    if gives_check(board, move):
        priority += CHECK_PRIORITY
    return priority


def prioritized_moves(
    board: chess.Board,
    moves: Iterable[chess.Move],
) -> list[tuple[chess.Move, int]]:
    """
    Pair each move with its priority and sort best-first.

    The priority is computed once per move. The search reuses it: any
    non-zero priority marks a capture, promotion or check, which is exactly
    the set of moves that earns an extension.
    """
    keyed = [(move, move_priority(board, move)) for move in moves]
    # list.sort is stable: equal priorities keep their enumeration order.
    keyed.sort(key=lambda entry: entry[1])
    return keyed


def order_moves(board: chess.Board, moves: Iterable[chess.Move]) -> list[chess.Move]:
    """
    Return ``moves`` sorted best-first for searching.

    Python's sort is stable, so moves with equal priority (in particular all
    quiet moves) keep the order they were enumerated in.

    Args:
        board: The position the moves are played from. Not modified.
        moves: Legal moves in that position.

    Returns:
        A new list, captures first, then promotions, then checks, then the rest.
    """
    return [move for move, _ in prioritized_moves(board, moves)]


def is_noisy(board: chess.Board, move: chess.Move) -> bool:
    """Captures and promotions: the only moves quiescence search explores."""
    return is_capture(board, move) or is_promotion(move)
