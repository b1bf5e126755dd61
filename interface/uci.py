"""
UCI (Universal Chess Interface) protocol handler.

UCI is the standard text protocol chess GUIs and testing tools (such as
cutechess-cli) use to talk to engines. The engine reads commands from stdin
and writes responses to stdout, flushing every line.

Protocol overview:
    GUI → Engine: uci, isready, ucinewgame, setoption, position, go, stop, quit
    Engine → GUI: id name, id author, option, uciok, readyok, info, bestmove

Engine options (setoption name <Name> value <Value>):
    Difficulty   combo  Easy / Medium / Hard
    Depth        spin   base search depth in plies
    TimeBudget   spin   milliseconds per move when "go" carries no clock
    Quiescence   check  resolve captures at the search horizon

Threading model:
    The UCI loop runs on the main thread and never blocks on the search. "go"
    starts the move selection in a daemon thread. The selection is bounded by
    its own time budget and cannot be interrupted, so "stop" waits for it to
    answer.

Critical rule: NEVER print to stdout except for valid UCI responses.
Diagnostics go to stderr.
"""

import sys
import threading
from dataclasses import replace

import chess

from chessbot.config import EngineConfig
from chessbot.constants import DEFAULT_BASE_DEPTH, TIME_BUDGET_MS
from chessbot.selector import select_move

ENGINE_NAME = "Chessbot"
ENGINE_AUTHOR = "Chessbot developers"

# Longest time the "go" clock parser will allocate to one move.
_MAX_MOVE_TIME_MS = 60_000


def _send(line: str) -> None:
    """
    Write a line to stdout and flush immediately.

    GUIs read line by line; an unflushed buffer leaves them waiting for a
    reply that has already been produced.
    """
    print(line, flush=True)


def _log(message: str) -> None:
    """Write a diagnostic line to stderr (stdout is reserved for the protocol)."""
    print(message, file=sys.stderr, flush=True)


class UciHandler:
    """
    Stateful handler for the UCI protocol.

    Attributes:
        board:         Current position, updated by "position" commands.
        history:       Moves replayed by the last "position" command, oldest
                       first. Feeds the banned-move filter.
        config:        Engine options, updated by "setoption".
        search_thread: The active search thread, or None.
    """

    def __init__(self) -> None:
        self.board: chess.Board = chess.Board()
        self.history: list[chess.Move] = []
        self.config: EngineConfig = EngineConfig()
        self.search_thread: threading.Thread | None = None

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_uci(self) -> None:
        """Identify the engine, advertise its options and finish with uciok."""
        _send(f"id name {ENGINE_NAME}")
        _send(f"id author {ENGINE_AUTHOR}")
        _send(
            "option name Difficulty type combo default Medium "
            "var Easy var Medium var Hard"
        )
        _send(f"option name Depth type spin default {DEFAULT_BASE_DEPTH} min 1 max 12")
        _send(f"option name TimeBudget type spin default {TIME_BUDGET_MS} min 1 max {_MAX_MOVE_TIME_MS}")
        _send("option name Quiescence type check default true")
        _send("uciok")

    def handle_isready(self) -> None:
        _send("readyok")

    def handle_ucinewgame(self) -> None:
        """Wait for any running search, then reset the position and history."""
        self._stop_search()
        self.board = chess.Board()
        self.history = []

    def handle_setoption(self, tokens: list[str]) -> None:
        """
        Apply "setoption name <Name> value <Value>".

        Option names may contain spaces, so everything between "name" and
        "value" is the name. Unknown options and bad values are logged and
        leave the configuration unchanged.

        Args:
            tokens: The command tokens with "setoption" already stripped.
        """
        if not tokens or tokens[0] != "name":
            _log(f"uci: malformed setoption: {' '.join(tokens)}")
            return
        if "value" in tokens:
            value_idx = tokens.index("value")
            name = "".join(tokens[1:value_idx])
            value = " ".join(tokens[value_idx + 1:])
        else:
            name = "".join(tokens[1:])
            value = ""

        try:
            self.config = self.config.with_option(name, value)
        except ValueError as e:
            _log(f"uci: setoption ignored: {e}")

    def handle_position(self, tokens: list[str]) -> None:
        """
        Parse and apply a "position" command.

        Command formats:
            position startpos [moves e2e4 e7e5 ...]
            position fen <FEN> [moves e2e4 e7e5 ...]

        The replayed moves become the history used by the banned-move filter.

        Args:
            tokens: The command tokens with "position" already stripped.
        """
        if not tokens:
            return

        try:
            if tokens[0] == "startpos":
                board = chess.Board()
                move_tokens = tokens[2:] if len(tokens) > 1 and tokens[1] == "moves" else []
            elif tokens[0] == "fen":
                if "moves" in tokens:
                    moves_idx = tokens.index("moves")
                    fen = " ".join(tokens[1:moves_idx])
                    move_tokens = tokens[moves_idx + 1:]
                else:
                    fen = " ".join(tokens[1:])
                    move_tokens = []
                board = chess.Board(fen)
            else:
                _log(f"uci: unknown position type: {tokens[0]}")
                return
        except ValueError as e:
            _log(f"uci: invalid position: {e}")
            return

        history: list[chess.Move] = []
        for uci_move in move_tokens:
            try:
                move = chess.Move.from_uci(uci_move)
            except ValueError:
                _log(f"uci: malformed move in position command: {uci_move}")
                break
            if move not in board.legal_moves:
                _log(f"uci: illegal move in position command: {uci_move}")
                break
            board.push(move)
            history.append(move)

        self.board = board
        self.history = history

    def handle_go(self, tokens: list[str]) -> None:
        """
        Parse a "go" command and run the move selection in a background thread.

        Supported parameters:
            movetime <ms>                     exact time budget
            wtime/btime <ms> [winc/binc <ms>] 1/40 of the clock plus increment
            depth <n>                         base depth for this search only

        Without any of them the configured TimeBudget and Depth apply.

        Args:
            tokens: The command tokens with "go" already stripped.
        """
        self._stop_search()

        params = self._parse_go_params(tokens)
        config = self.config
        time_ms = self._time_budget(params)
        if time_ms is not None:
            config = replace(config, time_budget_ms=time_ms)
        if params.get("depth", 0) >= 1:
            config = replace(config, base_depth=params["depth"])

        # The next "position" command may replace self.board while this
        # search runs; give the thread its own copies.
        board = self.board.copy()
        history = list(self.history)

        def search_and_reply() -> None:
            try:
                result = select_move(board, history, config)
                if result.move is None:
                    _send("bestmove (none)")
                    return
                elapsed_ms = max(1, result.elapsed_ms)
                nps = result.nodes * 1000 // elapsed_ms
                _send(
                    f"info depth {result.depth} score cp {result.score} "
                    f"nodes {result.nodes} nps {nps} time {elapsed_ms}"
                )
                _send(f"bestmove {result.move.uci()}")
            except Exception as e:
                _log(f"search error: {e}")
                _send("bestmove (none)")

        self.search_thread = threading.Thread(target=search_and_reply, daemon=True)
        self.search_thread.start()

    def handle_stop(self) -> None:
        self._stop_search()

    def handle_quit(self) -> None:
        self._stop_search()
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _stop_search(self) -> None:
        """Wait for the running search (bounded by its time budget) to answer."""
        if self.search_thread is not None and self.search_thread.is_alive():
            self.search_thread.join()
        self.search_thread = None

    @staticmethod
    def _parse_go_params(tokens: list[str]) -> dict[str, int]:
        params: dict[str, int] = {}
        i = 0
        while i < len(tokens) - 1:
            try:
                params[tokens[i]] = int(tokens[i + 1])
                i += 2
            except ValueError:
                i += 1
        return params

    def _time_budget(self, params: dict[str, int]) -> int | None:
        """
        Time budget in milliseconds from parsed "go" parameters.

        Returns None when the command carries no clock information, in which
        case the configured TimeBudget is used.
        """
        if "movetime" in params:
            return max(1, params["movetime"])

        time_key = "wtime" if self.board.turn == chess.WHITE else "btime"
        inc_key = "winc" if self.board.turn == chess.WHITE else "binc"
        if time_key in params:
            budget = params[time_key] // 40 + params.get(inc_key, 0)
            return max(1, min(budget, _MAX_MOVE_TIME_MS))

        return None


def run_uci_loop() -> None:
    """
    Main UCI protocol loop.

    Reads stdin until "quit" or end of input and dispatches each command.
    A failing command is logged to stderr and the loop keeps going, so one
    bad line never costs a game.
    """
    handler = UciHandler()

    for raw_line in sys.stdin:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0]
        args = tokens[1:]

        try:
            if command == "uci":
                handler.handle_uci()
            elif command == "isready":
                handler.handle_isready()
            elif command == "ucinewgame":
                handler.handle_ucinewgame()
            elif command == "setoption":
                handler.handle_setoption(args)
            elif command == "position":
                handler.handle_position(args)
            elif command == "go":
                handler.handle_go(args)
            elif command == "stop":
                handler.handle_stop()
            elif command == "quit":
                handler.handle_quit()
            else:
                # Unknown commands are ignored, as the protocol requires.
                _log(f"uci: ignoring unknown command: {command!r}")

        except Exception as e:
            _log(f"uci: unhandled error for command {command!r}: {e}")

    handler.handle_stop()


if __name__ == "__main__":
    run_uci_loop()
