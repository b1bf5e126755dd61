"""
Chessbot: a move-selection engine for chess.

This package implements a classical engine: negamax search with alpha-beta
pruning, tactical search extensions, optional quiescence search, and a
difficulty/time-budget policy that drives it. Chess rules come from
python-chess.

Modules:
    constants — Piece values, evaluation weights, search and policy parameters
    rules     — Rules provider over python-chess (status, moves, pure move application)
    evaluate  — Static evaluation (material, mobility, center, development)
    ordering  — Capture / promotion / check move ordering
    search    — Negamax, alpha-beta and quiescence search
    config    — Difficulty and EngineConfig options
    history   — Banned reverse move and captured-piece bookkeeping
    selector  — Root move selection: difficulty and time policy
"""

from chessbot.config import Difficulty, EngineConfig
from chessbot.selector import SelectionResult, choose_best_move, select_move

__all__ = [
    "Difficulty",
    "EngineConfig",
    "SelectionResult",
    "choose_best_move",
    "select_move",
]
