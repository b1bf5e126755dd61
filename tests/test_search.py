import time

import chess
import pytest

import chessbot.search as search_module
from chessbot.constants import INF_SCORE, MATE_SCORE
from chessbot.evaluate import evaluate, stand_pat
from chessbot.ordering import move_priority, order_moves
from chessbot.rules import GameStatus, apply_move, game_status, legal_moves
from chessbot.search import SearchState, next_depth, quiescence, search

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
SCHOLARS_MATE = "r1bqkb1r/pppp1Qpp/2n2n2/4p3/2B1P3/8/PPPP1PPP/RNB1K1NR b KQkq - 0 4"
MATE_IN_ONE = "r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 4 4"
STALEMATE = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
BARE_KINGS = "8/8/8/4k3/8/8/8/4K3 w - - 0 1"
PAWNS = "4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1"
HANGING_QUEEN = "4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1"
QUEEN_VS_ROOK = "4k3/8/3r4/8/3Q4/8/8/4K3 w - - 0 1"


def _sign(board):
    return 1 if board.turn == chess.WHITE else -1


def _tactical(board, move):
    return move_priority(board, move) != 0


def _minimax(board, depth, sign, state, ply=0):
    """Full-width negamax without pruning, same extensions and leaf scoring."""
    status = game_status(board)
    if status is GameStatus.CHECKMATE:
        return -(MATE_SCORE - ply)
    if status is not GameStatus.ONGOING:
        return 0
    if depth <= 0:
        return sign * evaluate(board)
    best = -INF_SCORE
    for move in legal_moves(board):
        child = apply_move(board, move)
        child_depth = next_depth(_tactical(board, move), depth, ply, state)
        best = max(best, -_minimax(child, child_depth, -sign, state, ply + 1))
    return best


@pytest.mark.parametrize("depth", [0, 1, 3])
@pytest.mark.parametrize("fen", [FOOLS_MATE, SCHOLARS_MATE])
def test_checkmate_is_worst_for_side_to_move(fen, depth):
    board = chess.Board(fen)
    score = search(board, depth, -INF_SCORE, INF_SCORE, _sign(board), SearchState())
    assert score == -MATE_SCORE


@pytest.mark.parametrize("depth", [0, 1, 4])
@pytest.mark.parametrize("window", [(-INF_SCORE, INF_SCORE), (-5, 5), (100, 200)])
@pytest.mark.parametrize("fen", [STALEMATE, BARE_KINGS])
def test_draws_score_zero_regardless_of_depth_and_window(fen, window, depth):
    board = chess.Board(fen)
    alpha, beta = window
    assert search(board, depth, alpha, beta, _sign(board), SearchState()) == 0


def test_finds_mate_in_one():
    board = chess.Board(MATE_IN_ONE)
    state = SearchState.for_selection(1, None, quiescence=False)
    score = search(board, 1, -INF_SCORE, INF_SCORE, 1, state)
    assert score == MATE_SCORE - 1


@pytest.mark.parametrize("depth", [1, 2, 3])
def test_alpha_beta_value_matches_minimax(depth):
    board = chess.Board(PAWNS)
    pruned_state = SearchState.for_selection(depth, None, quiescence=False)
    full_state = SearchState.for_selection(depth, None, quiescence=False)

    pruned = search(board, depth, -INF_SCORE, INF_SCORE, 1, pruned_state)
    assert pruned == _minimax(board, depth, 1, full_state)


def test_alpha_beta_value_matches_minimax_without_extensions():
    board = chess.Board(QUEEN_VS_ROOK)
    state = SearchState(quiescence=False, max_ply=2)
    assert search(board, 2, -INF_SCORE, INF_SCORE, 1, state) == _minimax(board, 2, 1, state)


@pytest.mark.parametrize("depth", [1, 2])
def test_alpha_beta_picks_same_root_move_as_minimax(depth):
    board = chess.Board(PAWNS)
    state = SearchState.for_selection(depth, None, quiescence=False)

    def best_root_move(score_child):
        best_move, best_score = None, -INF_SCORE
        for move in order_moves(board, legal_moves(board)):
            child = apply_move(board, move)
            score = -score_child(child, next_depth(_tactical(board, move), depth, 0, state))
            if best_move is None or score > best_score:
                best_move, best_score = move, score
        return best_move

    pruned = best_root_move(
        lambda child, d: search(child, d, -INF_SCORE, INF_SCORE, -1, state, ply=1)
    )
    full = best_root_move(lambda child, d: _minimax(child, d, -1, state, ply=1))
    assert pruned == full


def test_node_count_grows_with_depth():
    board = chess.Board(PAWNS)
    counts = []
    for depth in (1, 2, 3):
        state = SearchState.for_selection(depth, None)
        search(board, depth, -INF_SCORE, INF_SCORE, 1, state)
        counts.append(state.node_count)
    assert counts == sorted(counts)
    assert counts[0] > 1


def test_pruning_visits_fewer_nodes_than_full_width():
    board = chess.Board(QUEEN_VS_ROOK)
    state = SearchState(quiescence=False, max_ply=2)
    search(board, 2, -INF_SCORE, INF_SCORE, 1, state)

    full_width = sum(
        1 + len(legal_moves(apply_move(board, move))) for move in legal_moves(board)
    )
    assert state.node_count < full_width + 1


def test_expired_deadline_returns_static_evaluation():
    board = chess.Board()
    state = SearchState(deadline=time.monotonic() - 1.0, quiescence=False)
    score = search(board, 5, -INF_SCORE, INF_SCORE, 1, state)
    assert score == evaluate(board)
    assert state.node_count == 1


def test_quiescence_takes_hanging_queen():
    board = chess.Board(HANGING_QUEEN)
    baseline = stand_pat(board, 1)
    score = quiescence(board, -INF_SCORE, INF_SCORE, 1, SearchState())
    assert score - baseline > 700


def test_quiescence_never_below_stand_pat():
    board = chess.Board(PAWNS)
    score = quiescence(board, -INF_SCORE, INF_SCORE, 1, SearchState())
    assert score >= stand_pat(board, 1)


def test_quiescence_fails_high_at_beta():
    board = chess.Board(HANGING_QUEEN)
    beta = stand_pat(board, 1) - 1
    assert quiescence(board, beta - 10, beta, 1, SearchState()) == beta


def test_next_depth_extends_tactical_moves_until_ceiling():
    state = SearchState(max_ply=4)

    assert next_depth(True, 2, 0, state) == 2
    assert next_depth(False, 2, 0, state) == 1
    # ply + depth has reached the ceiling: no more extensions on this line.
    assert next_depth(True, 2, 2, state) == 1


def test_each_node_generates_its_moves_once(monkeypatch):
    calls = []

    def counting_legal_moves(board):
        calls.append(board.fen())
        return legal_moves(board)

    monkeypatch.setattr(search_module, "legal_moves", counting_legal_moves)
    board = chess.Board(QUEEN_VS_ROOK)
    state = SearchState(quiescence=False, max_ply=2)
    search(board, 2, -INF_SCORE, INF_SCORE, 1, state)

    assert len(calls) == state.node_count


def test_quiescence_generates_moves_once_per_node(monkeypatch):
    calls = []

    def counting_legal_moves(board):
        calls.append(board.fen())
        return legal_moves(board)

    monkeypatch.setattr(search_module, "legal_moves", counting_legal_moves)
    state = SearchState()
    quiescence(chess.Board(HANGING_QUEEN), -INF_SCORE, INF_SCORE, 1, state)

    # The root call plus one per child the loop counted.
    assert len(calls) == state.node_count + 1
