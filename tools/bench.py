#!/usr/bin/env python3
"""
Benchmark: nodes, depth and time per move for each difficulty level.

Run before and after a search change (ordering, extensions, quiescence) to
quantify its effect. Fewer nodes at the same depth means better pruning;
higher NPS means a cheaper evaluation.

Usage, from the repository root:
    python -m tools.bench [--budget MS] [--depth N]

Running the file directly (python tools/bench.py) only works once the
project is installed with pip install -e ., since chessbot must be importable.
"""
import argparse

import chess

from chessbot.config import Difficulty, EngineConfig
from chessbot.selector import select_move

# Fixed positions spanning opening, middlegame and endgame. Keep them
# unchanged so results stay comparable between versions.
POSITIONS = [
    ("Start",        chess.STARTING_FEN),
    ("After 1.e4",   "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"),
    ("Italian",      "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R b KQkq - 3 3"),
    ("Mid-open",     "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"),
    ("Complex mid",  "r2q1rk1/ppp2ppp/2np1n2/2b1p1B1/2B1P1b1/2NP1N2/PPP2PPP/R2Q1RK1 w - - 0 8"),
    ("Hanging queen", "rnbqkbnr/ppp1pppp/8/3p4/4P1Q1/8/PPPP1PPP/RNB1KBNR b KQkq - 1 2"),
    ("Rook ending",  "8/5pk1/6p1/7p/7P/6P1/5PK1/8 w - - 0 1"),
    ("Pawn race",    "8/1p4k1/p7/P1K5/8/8/8/8 w - - 0 1"),
]


def run_position(label: str, fen: str, config: EngineConfig) -> dict:
    """Select a move for one position and return its metrics."""
    result = select_move(chess.Board(fen), (), config)
    elapsed_ms = max(1, result.elapsed_ms)
    return {
        "label": label,
        "move": result.move.uci() if result.move else "(none)",
        "depth": result.depth,
        "score": result.score,
        "nodes": result.nodes,
        "nps": result.nodes * 1000 // elapsed_ms,
        "time_ms": result.elapsed_ms,
    }


def main() -> None:
    """Run every position at each searching difficulty and print a table."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--budget", type=int, default=5_000, help="time budget per move (ms)")
    parser.add_argument("--depth", type=int, default=3, help="base search depth")
    args = parser.parse_args()

    for difficulty in (Difficulty.MEDIUM, Difficulty.HARD):
        config = EngineConfig(
            difficulty=difficulty,
            base_depth=args.depth,
            time_budget_ms=args.budget,
        )
        print(f"Difficulty {difficulty.value}: base depth {args.depth}, budget {args.budget} ms")
        print(
            f"{'Position':<14} {'Move':<7} {'Depth':>5} {'Score':>8} "
            f"{'Nodes':>8} {'NPS':>8} {'Time(ms)':>9}"
        )
        print("-" * 70)

        results = []
        for label, fen in POSITIONS:
            r = run_position(label, fen, config)
            results.append(r)
            print(
                f"{r['label']:<14} {r['move']:<7} {r['depth']:>5} {r['score']:>8} "
                f"{r['nodes']:>8,} {r['nps']:>8,} {r['time_ms']:>9,}"
            )

        avg_nodes = sum(r["nodes"] for r in results) // len(results)
        avg_time = sum(r["time_ms"] for r in results) // len(results)
        avg_nps = sum(r["nps"] for r in results) // len(results)
        print("-" * 70)
        print(
            f"{'AVERAGE':<14} {'':<7} {'':<5} {'':<8} "
            f"{avg_nodes:>8,} {avg_nps:>8,} {avg_time:>9,}"
        )
        print()


if __name__ == "__main__":
    main()
