"""
Root move selection: difficulty and time policy on top of the negamax search.

This module defines the stable public interface the front ends depend on.
select_move() returns a SelectionResult with statistics for UCI "info" lines
and the web API; choose_best_move() is the plain contract that returns only
the move.

Policy, per difficulty:
    EASY    Depth EASY_DEPTH. With probability EASY_RANDOM_PROBABILITY the
            search is skipped and a uniformly random candidate is played.
    MEDIUM  base_depth plies.
    HARD    base_depth + HARD_DEPTH_BONUS plies.

With ``scale_decisive`` enabled, MEDIUM and HARD search one extra ply when
the material balance exceeds DECISIVE_MATERIAL_THRESHOLD, where deeper
search converts a won position faster.

The reverse of the last move in the history is dropped from the root
candidates to discourage trivial back-and-forth shuffling. It is a soft
filter: if it is the only legal move, it is still played.

The root search deepens iteratively: depth 1, 2, ... up to the resolved
depth, with the previous iteration's best move searched first. The time
budget is checked after every root move and inside the search. When it runs
out mid-iteration, the last complete iteration's move is played, so a short
budget costs depth rather than move quality. A root move is adopted only
once its subtree has returned a value, so the result is always a searched
legal move, even with a tiny budget.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Sequence

import chess

from chessbot.config import Difficulty, EngineConfig
from chessbot.constants import (
    DECISIVE_DEPTH_BONUS,
    DECISIVE_MATERIAL_THRESHOLD,
    EASY_DEPTH,
    EASY_RANDOM_PROBABILITY,
    HARD_DEPTH_BONUS,
    INF_SCORE,
    MAX_EXTENSIONS,
    TIME_BUDGET_MS,
)
from chessbot.evaluate import material_balance
from chessbot.history import banned_move
from chessbot.ordering import prioritized_moves
from chessbot.rules import apply_move, legal_moves
from chessbot.search import SearchState, next_depth, search

_log = logging.getLogger(__name__)

DepthHook = Callable[[chess.Board, int], int]


@dataclass(frozen=True)
class SearchParams:
    """Concrete search parameters resolved from an EngineConfig."""

    depth: int
    random_probability: float
    time_budget_ms: int


@dataclass(frozen=True)
class SelectionResult:
    """
    Outcome of one root move selection.

    Attributes:
        move:       Chosen move, or None when there was nothing to play.
        score:      Score of the move from the mover's perspective (0 when the
                    move was picked at random).
        depth:      Deepest root iteration that completed, or 1 when even
                    the first was cut short by the deadline.
        nodes:      Positions visited by the search.
        elapsed_ms: Wall-clock time spent.
        randomized: True when the EASY random short-circuit fired.
    """

    move: chess.Move | None
    score: int
    depth: int
    nodes: int
    elapsed_ms: int
    randomized: bool = False


def deepen_when_decisive(board: chess.Board, depth: int) -> int:
    """Depth hook: one more ply when either side is clearly ahead in material."""
    if abs(material_balance(board)) > DECISIVE_MATERIAL_THRESHOLD:
        return depth + DECISIVE_DEPTH_BONUS
    return depth


def resolve_params(
    config: EngineConfig,
    board: chess.Board | None = None,
    depth_hook: DepthHook | None = None,
) -> SearchParams:
    """
    Convert a difficulty setting into depth, randomness and time budget.

    Args:
        config:     The engine options.
        board:      Position being searched; required only by the depth hook.
        depth_hook: Optional adjustment applied to MEDIUM and HARD depths.
                    Defaults to deepen_when_decisive when the config enables
                    ``scale_decisive``.

    Returns:
        The SearchParams to use for this selection.
    """
    if config.difficulty is Difficulty.EASY:
        return SearchParams(EASY_DEPTH, EASY_RANDOM_PROBABILITY, config.time_budget_ms)

    depth = config.base_depth
    if config.difficulty is Difficulty.HARD:
        depth += HARD_DEPTH_BONUS

    if depth_hook is None and config.scale_decisive:
        depth_hook = deepen_when_decisive
    if depth_hook is not None and board is not None:
        depth = depth_hook(board, depth)

    return SearchParams(depth, 0.0, config.time_budget_ms)


def root_candidates(board: chess.Board, history: Sequence[chess.Move]) -> list[chess.Move]:
    """Legal moves minus the banned reversal of the last move, if that leaves any."""
    moves = legal_moves(board)
    banned = banned_move(history)
    if banned is None:
        return moves
    filtered = [move for move in moves if move != banned]
    return filtered or moves


def select_move(
    board: chess.Board,
    history: Sequence[chess.Move] = (),
    config: EngineConfig | None = None,
    rng: random.Random | None = None,
    depth_hook: DepthHook | None = None,
) -> SelectionResult:
    """
    Pick a move for the side to move in ``board``.

    Args:
        board:      The current position. Not modified.
        history:    Moves played so far, oldest first.
        config:     Engine options; defaults to EngineConfig().
        rng:        Random source for the EASY short-circuit; the module
                    level generator when omitted.
        depth_hook: Optional depth adjustment, see resolve_params().

    Returns:
        SelectionResult. Its move is None only when the position has no
        legal moves, which callers should have ruled out beforehand.
    """
    config = config or EngineConfig()
    rng = rng or random.Random()
    start = time.monotonic()

    candidates = root_candidates(board, history)
    params = resolve_params(config, board, depth_hook)
    if not candidates:
        return SelectionResult(None, 0, 0, 0, 0)

    if params.random_probability > 0 and rng.random() < params.random_probability:
        move = rng.choice(candidates)
        _log.debug("random move %s (difficulty=%s)", move.uci(), config.difficulty.value)
        return SelectionResult(move, 0, 0, 0, _elapsed_ms(start), randomized=True)

    state = SearchState.for_selection(params.depth, params.time_budget_ms, config.quiescence)
    sign = 1 if board.turn == chess.WHITE else -1
    entries = prioritized_moves(board, candidates)

    best_move: chess.Move | None = None
    best_score = -INF_SCORE
    searched_depth = 0
    for depth in range(1, params.depth + 1):
        state.max_ply = depth + MAX_EXTENSIONS
        move, score, complete = _search_root(board, entries, depth, sign, state)

        if not complete:
            # An interrupted iteration only counts when no shallower one
            # finished; otherwise the last complete result stands.
            if best_move is None:
                best_move, best_score, searched_depth = move, score, depth
            break

        best_move, best_score, searched_depth = move, score, depth
        _log.debug("depth %d: best %s score=%d nodes=%d", depth, move.uci(), score, state.node_count)
        # Search the current best first at the next depth. The sort is
        # stable, so the other moves keep their tactical order.
        entries.sort(key=lambda entry: entry[0] != best_move)

    elapsed_ms = _elapsed_ms(start)
    _log.debug(
        "selected %s score=%d depth=%d nodes=%d elapsed=%dms",
        best_move.uci() if best_move else None,
        best_score,
        searched_depth,
        state.node_count,
        elapsed_ms,
    )
    return SelectionResult(best_move, best_score, searched_depth, state.node_count, elapsed_ms)


def _search_root(
    board: chess.Board,
    entries: list[tuple[chess.Move, int]],
    depth: int,
    sign: int,
    state: SearchState,
) -> tuple[chess.Move, int, bool]:
    """
    Search every root move to ``depth`` with a full window.

    Returns the best move, its score and whether the pass finished before
    the deadline. The deadline is checked after each root move, and a move
    is adopted only once its subtree has returned a value.
    """
    best_move, _ = entries[0]
    best_score = -INF_SCORE
    for index, (move, priority) in enumerate(entries):
        child = apply_move(board, move)
        child_depth = next_depth(priority != 0, depth, 0, state)
        score = -search(child, child_depth, -INF_SCORE + 1, INF_SCORE, -sign, state, ply=1)

        # Strictly greater: the first of several equal moves is kept.
        if index == 0 or score > best_score:
            best_move = move
            best_score = score

        if state.expired():
            return best_move, best_score, False

    return best_move, best_score, True


def choose_best_move(
    board: chess.Board,
    history: Sequence[chess.Move],
    base_depth: int,
    difficulty: Difficulty | str,
    time_budget_ms: int = TIME_BUDGET_MS,
    rng: random.Random | None = None,
) -> chess.Move | None:
    """Return the move to play, or None if ``board`` has no legal moves."""
    config = EngineConfig(
        difficulty=Difficulty.parse(difficulty),
        base_depth=base_depth,
        time_budget_ms=time_budget_ms,
    )
    return select_move(board, history, config, rng).move


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
