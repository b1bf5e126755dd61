"""
Negamax search with alpha-beta pruning, search extensions and an optional
quiescence stage.

Negamax exploits the zero-sum property of chess: a position worth +x to the
side to move is worth -x to its opponent. Every call returns a score from the
perspective of the side to move at that node, and the parent negates it. The
perspective sign (+1 when White is to move, -1 when Black is) converts the
White-positive evaluator into that convention at the leaves.

Two stages are optional and orthogonal, both selected through SearchState:

1. Quiescence: at the horizon, keep searching captures and promotions until
   the position is quiet instead of evaluating mid-exchange. Without it,
   leaves are scored with the static evaluator.

2. Time limit: an absolute monotonic deadline, polled at the entry of every
   call. Once it has passed, each node returns its horizon score at once, so
   a search in progress unwinds quickly with a well-defined value. The check
   is advisory; nothing preempts a call that is already running.

Boards are never mutated: each child position is a fresh copy produced by
chessbot.rules.apply_move, so a node's state is exactly its arguments. There
is no transposition table; repeated positions are searched again.
"""

import time
from dataclasses import dataclass

import chess

from chessbot.constants import (
    DRAW_SCORE,
    INF_SCORE,
    MATE_SCORE,
    MAX_DEPTH,
    MAX_EXTENSIONS,
)
from chessbot.evaluate import evaluate, stand_pat
from chessbot.ordering import is_noisy, order_moves, prioritized_moves
from chessbot.rules import GameStatus, apply_move, game_status, legal_moves


@dataclass
class SearchState:
    """
    Per-selection search settings and counters.

    One instance is created for each root move selection and threaded through
    every recursive call. It holds no positions, only limits and statistics.

    Attributes:
        deadline:   time.monotonic() timestamp after which nodes stop
                    expanding, or None for an unlimited search.
        quiescence: Resolve captures and promotions at the horizon instead of
                    returning the static evaluation.
        max_ply:    Extension ceiling. A tactical move only earns its extra
                    ply while ``ply + depth`` at the parent stays below this,
                    so no line grows beyond it.
        node_count: Number of positions visited so far (search and
                    quiescence nodes alike).
    """

    deadline: float | None = None
    quiescence: bool = True
    max_ply: int = MAX_DEPTH + MAX_EXTENSIONS
    node_count: int = 0

    @classmethod
    def for_selection(
        cls,
        depth: int,
        time_budget_ms: int | None,
        quiescence: bool = True,
    ) -> "SearchState":
        """Build the state for a root search of ``depth`` plies starting now."""
        deadline = None
        if time_budget_ms is not None:
            deadline = time.monotonic() + max(time_budget_ms, 1) / 1000.0
        return cls(
            deadline=deadline,
            quiescence=quiescence,
            max_ply=depth + MAX_EXTENSIONS,
        )

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline


def next_depth(tactical: bool, depth: int, ply: int, state: SearchState) -> int:
    """
    Remaining depth for a child of a node searched at ``depth``.

    Normally depth - 1. Captures, promotions and checking moves (``tactical``,
    i.e. any move with a non-zero ordering priority) get one ply back so
    forced sequences resolve past the nominal horizon, as long as the line is
    still under the extension ceiling.
    """
    if tactical and ply + depth < state.max_ply:
        return depth
    return depth - 1


def _terminal_score(status: GameStatus, ply: int) -> int:
    if status is GameStatus.CHECKMATE:
        # The side to move is mated. Subtracting the ply makes a nearer mate
        # worse for the loser, so the winner prefers the shortest one.
        return -(MATE_SCORE - ply)
    return DRAW_SCORE


def quiescence(
    board: chess.Board,
    alpha: int,
    beta: int,
    sign: int,
    state: SearchState,
    ply: int = 0,
) -> int:
    """
    Resolve captures and promotions so leaves are not scored mid-exchange.

    Stand-pat: the side to move may decline every capture, so the static
    score is a lower bound. If it already reaches beta the opponent would
    never allow this position and we fail high at once; otherwise it raises
    alpha and only noisy moves are tried on top of it.

    Args:
        board: Current position. Not modified.
        alpha: Lower bound of the search window.
        beta:  Upper bound of the search window.
        sign:  Perspective of the side to move (+1 White, -1 Black).
        state: Limits and node counter for this selection.
        ply:   Distance from the root, for mate scoring.

    Returns:
        Score from the perspective of the side to move, within [alpha, beta].
    """
    moves = legal_moves(board)
    status = game_status(board, moves)
    if status is not GameStatus.ONGOING:
        return _terminal_score(status, ply)

    standing = stand_pat(board, sign, len(moves))
    if standing >= beta:
        return beta
    if standing > alpha:
        alpha = standing

    if state.expired():
        return alpha

    noisy = [move for move in moves if is_noisy(board, move)]
    for move in order_moves(board, noisy):
        state.node_count += 1
        score = -quiescence(apply_move(board, move), -beta, -alpha, -sign, state, ply + 1)
        if score >= beta:
            return beta
        if score > alpha:
            alpha = score

    return alpha


def search(
    board: chess.Board,
    depth: int,
    alpha: int,
    beta: int,
    sign: int,
    state: SearchState,
    ply: int = 0,
) -> int:
    """
    Negamax value of ``board`` for the side to move, with alpha-beta pruning.

    Args:
        board: Current position. Not modified.
        depth: Remaining depth in plies. At 0 (or once the deadline has
               passed) the node is scored at the horizon: quiescence when
               enabled, otherwise sign * evaluate(board).
        alpha: Best score the side to move is already guaranteed elsewhere.
        beta:  Best score the opponent will allow; reaching it cuts off the
               remaining siblings.
        sign:  Perspective of the side to move (+1 White, -1 Black). Flips
               every ply.
        state: Limits and node counter for this selection.
        ply:   Distance from the root.

    Returns:
        Score from the perspective of the side to move. A checkmated side
        scores -(MATE_SCORE - ply); stalemate and every other draw score 0.

    With the full window (-INF_SCORE, INF_SCORE) the value is exactly the
    minimax value of the same tree; pruning and ordering only change how many
    nodes are visited.

    Legal moves are generated once per node and reused for the terminal
    check, the mobility term and the move loop.
    """
    state.node_count += 1

    at_horizon = depth <= 0 or state.expired()
    if at_horizon and state.quiescence:
        # Quiescence runs the same terminal check on its own move list.
        return quiescence(board, alpha, beta, sign, state, ply)

    moves = legal_moves(board)
    status = game_status(board, moves)
    if status is not GameStatus.ONGOING:
        return _terminal_score(status, ply)

    if at_horizon:
        return sign * evaluate(board, len(moves))

    best_score = -INF_SCORE
    for move, priority in prioritized_moves(board, moves):
        child = apply_move(board, move)
        child_depth = next_depth(priority != 0, depth, ply, state)
        score = -search(child, child_depth, -beta, -alpha, -sign, state, ply + 1)

        if score > best_score:
            best_score = score
        if best_score > alpha:
            alpha = best_score

        # Beta cutoff: the opponent already has a better line elsewhere.
        if alpha >= beta:
            break

    return best_score
