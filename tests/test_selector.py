import random
import time

import chess
import pytest

import chessbot.selector as selector_module
from chessbot.config import Difficulty, EngineConfig
from chessbot.selector import (
    SearchParams,
    choose_best_move,
    deepen_when_decisive,
    resolve_params,
    root_candidates,
    select_move,
)

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
# Black to move; the white queen on d4 is undefended.
HANGING_QUEEN = "3rk3/8/8/8/3Q4/8/8/4K3 b - - 0 1"
KNIGHT_ON_F3 = "4k3/8/8/8/8/5N2/8/4K3 w - - 0 1"
# White's only legal move is Kxb2.
ONLY_MOVE = "7k/8/8/8/8/8/1q6/K7 w - - 0 1"
# Bxf7+ is the first move in tactical order but loses the bishop for a pawn.
ITALIAN = "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"


class _FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def test_starting_position_medium_depth_three_returns_legal_move():
    board = chess.Board()
    move = choose_best_move(board, [], 3, Difficulty.MEDIUM)
    assert move is not None
    assert move in board.legal_moves
    assert board.fen() == chess.STARTING_FEN


def test_black_captures_undefended_queen():
    board = chess.Board(HANGING_QUEEN)
    move = choose_best_move(board, [], 2, "medium", time_budget_ms=60_000)
    assert move == chess.Move.from_uci("d8d4")


def test_no_legal_moves_returns_none():
    board = chess.Board(FOOLS_MATE)
    assert choose_best_move(board, [], 3, Difficulty.HARD) is None
    result = select_move(board)
    assert result.move is None
    assert result.nodes == 0


def test_banned_reverse_move_is_not_a_candidate():
    board = chess.Board(KNIGHT_ON_F3)
    history = [chess.Move.from_uci("g1f3")]
    reverse = chess.Move.from_uci("f3g1")

    assert reverse in board.legal_moves
    candidates = root_candidates(board, history)
    assert reverse not in candidates
    assert len(candidates) == board.legal_moves.count() - 1


def test_banned_move_keeps_promotion_field():
    board = chess.Board(KNIGHT_ON_F3)
    # Reverse of a promotion carries the promotion piece, so f3g1 stays allowed.
    history = [chess.Move.from_uci("g1f3q")]
    assert chess.Move.from_uci("f3g1") in root_candidates(board, history)


@pytest.mark.parametrize("seed", range(20))
def test_random_easy_moves_never_play_banned_move(seed):
    board = chess.Board(KNIGHT_ON_F3)
    history = [chess.Move.from_uci("g1f3")]
    config = EngineConfig(difficulty=Difficulty.EASY)

    result = select_move(board, history, config, rng=random.Random(seed))
    assert result.move != chess.Move.from_uci("f3g1")
    assert result.move in board.legal_moves


def test_banned_move_is_played_when_it_is_the_only_move():
    board = chess.Board(ONLY_MOVE)
    history = [chess.Move.from_uci("b2a1")]
    assert root_candidates(board, history) == [chess.Move.from_uci("a1b2")]
    assert choose_best_move(board, history, 2, "medium") == chess.Move.from_uci("a1b2")


def test_easy_short_circuits_to_random_move():
    board = chess.Board()
    config = EngineConfig(difficulty=Difficulty.EASY)
    result = select_move(board, (), config, rng=_FixedRandom(0.0))

    assert result.randomized
    assert result.move in board.legal_moves
    assert result.nodes == 0


def test_easy_searches_shallow_when_not_randomized():
    board = chess.Board(HANGING_QUEEN)
    config = EngineConfig(difficulty=Difficulty.EASY, time_budget_ms=60_000)
    result = select_move(board, (), config, rng=_FixedRandom(0.99))

    assert not result.randomized
    assert result.depth == 2
    assert result.move == chess.Move.from_uci("d8d4")


@pytest.mark.parametrize(
    "difficulty, expected",
    [
        (Difficulty.EASY, SearchParams(2, 0.7, 500)),
        (Difficulty.MEDIUM, SearchParams(4, 0.0, 500)),
        (Difficulty.HARD, SearchParams(6, 0.0, 500)),
    ],
)
def test_resolve_params_per_difficulty(difficulty, expected):
    config = EngineConfig(difficulty=difficulty, base_depth=4)
    assert resolve_params(config) == expected


def test_decisive_positions_search_deeper_when_enabled():
    lopsided = chess.Board(HANGING_QUEEN)
    balanced = chess.Board()
    config = EngineConfig(base_depth=3, scale_decisive=True)

    assert resolve_params(config, lopsided).depth == 4
    assert resolve_params(config, balanced).depth == 3
    assert resolve_params(EngineConfig(base_depth=3), lopsided).depth == 3


def test_custom_depth_hook():
    config = EngineConfig(difficulty=Difficulty.HARD, base_depth=2)
    params = resolve_params(config, chess.Board(), depth_hook=lambda board, depth: depth * 2)
    assert params.depth == 8


def test_deepen_when_decisive():
    assert deepen_when_decisive(chess.Board(HANGING_QUEEN), 3) == 4
    assert deepen_when_decisive(chess.Board(), 3) == 3


def test_tiny_time_budget_still_returns_legal_move():
    board = chess.Board()
    start = time.monotonic()
    move = choose_best_move(board, [], 8, Difficulty.HARD, time_budget_ms=1)
    elapsed = time.monotonic() - start

    assert move is not None
    assert move in board.legal_moves
    assert elapsed < 0.5


def test_selection_result_reports_statistics():
    board = chess.Board(HANGING_QUEEN)
    config = EngineConfig(base_depth=1, time_budget_ms=60_000)
    result = select_move(board, (), config)

    assert result.move == chess.Move.from_uci("d8d4")
    assert result.depth == 1
    assert result.nodes > 0
    assert result.score > 300
    assert not result.randomized


def test_default_budget_does_not_sacrifice_on_f7():
    board = chess.Board(ITALIAN)
    result = select_move(board, (), EngineConfig())

    assert result.move in board.legal_moves
    assert result.move != chess.Move.from_uci("c4f7")
    assert result.depth >= 1


def test_interrupted_iteration_keeps_last_complete_result(monkeypatch):
    board = chess.Board(KNIGHT_ON_F3)
    depths = []

    def fake_search_root(board, entries, depth, sign, state):
        depths.append(depth)
        if depth == 1:
            return entries[0][0], 10, True
        return entries[-1][0], 500, False

    monkeypatch.setattr(selector_module, "_search_root", fake_search_root)
    result = select_move(board, (), EngineConfig(base_depth=3, time_budget_ms=60_000))

    first = selector_module.prioritized_moves(board, board.legal_moves)[0][0]
    assert depths == [1, 2]
    assert result.move == first
    assert result.score == 10
    assert result.depth == 1


def test_interrupted_first_iteration_still_returns_its_move(monkeypatch):
    board = chess.Board(KNIGHT_ON_F3)

    def fake_search_root(board, entries, depth, sign, state):
        return entries[-1][0], -7, False

    monkeypatch.setattr(selector_module, "_search_root", fake_search_root)
    result = select_move(board, (), EngineConfig(time_budget_ms=60_000))

    assert result.move == selector_module.prioritized_moves(board, board.legal_moves)[-1][0]
    assert result.depth == 1
    assert result.score == -7


def test_full_budget_reaches_requested_depth():
    board = chess.Board(HANGING_QUEEN)
    result = select_move(board, (), EngineConfig(base_depth=3, time_budget_ms=60_000))

    assert result.depth == 3
    assert result.move == chess.Move.from_uci("d8d4")
