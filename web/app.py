"""
FastAPI web application for the chess engine.

Routes:
    POST /api/move      — best move for a FEN position under a difficulty
    GET  /api/evaluate  — static evaluation and evaluation-bar position
    POST /api/captured  — pieces each side has lost over a move list

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool,
  which is the right pattern for CPU-bound blocking calls like engine search.
- Stateless per request: the client sends the full FEN (and the move history
  it wants the anti-repetition filter to see) each time.
"""

import logging

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator

from chessbot.config import Difficulty, EngineConfig
from chessbot.constants import DEFAULT_BASE_DEPTH, DRAW_SCORE, MATE_SCORE, TIME_BUDGET_MS
from chessbot.evaluate import eval_bar, evaluate
from chessbot.history import captured_pieces
from chessbot.rules import GameStatus, game_status
from chessbot.selector import select_move

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

app = FastAPI(title="Chessbot", version="1.0.0")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class MoveRequest(BaseModel):
    """
    Client request for an engine move.

    Fields:
        fen:           Full FEN of the current position.
        history:       Moves played so far in UCI notation, oldest first.
        difficulty:    "easy", "medium" or "hard".
        depth:         Base search depth in plies (1-8).
        time_limit_ms: Time budget, clamped to [1, 30000] ms.
    """

    fen: str
    history: list[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.MEDIUM
    depth: int = Field(default=DEFAULT_BASE_DEPTH, ge=1, le=8)
    time_limit_ms: int = TIME_BUDGET_MS

    @field_validator("difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, v: object) -> Difficulty:
        """Accept difficulty names in any case."""
        return Difficulty.parse(v)

    @field_validator("time_limit_ms")
    @classmethod
    def clamp_time_limit(cls, v: int) -> int:
        return max(1, min(v, 30_000))


class MoveResponse(BaseModel):
    """
    Engine reply.

    Fields:
        move:       Chosen move in UCI notation.
        fen:        Position after the move.
        score:      Centipawns from the engine's perspective.
        depth:      Nominal depth searched.
        nodes:      Positions visited.
        randomized: True when the easy level played a random move.
    """

    move: str
    fen: str
    score: int
    depth: int
    nodes: int
    randomized: bool


class EvaluationResponse(BaseModel):
    score: int
    bar: float
    status: str


class CapturedRequest(BaseModel):
    moves: list[str] = Field(default_factory=list)
    fen: str | None = None


class CapturedResponse(BaseModel):
    white: list[str]
    black: list[str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_board(fen: str) -> chess.Board:
    try:
        return chess.Board(fen)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {exc}") from exc


def _parse_moves(ucis: list[str]) -> list[chess.Move]:
    try:
        return [chess.Move.from_uci(uci) for uci in ucis]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid move: {exc}") from exc


# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Compute the engine's move for the given position.

    Raises:
        HTTPException 400: Malformed FEN or history, or game already over.
        HTTPException 500: Engine failure or no move returned.
    """
    board = _parse_board(request.fen)
    history = _parse_moves(request.history)

    if game_status(board) is not GameStatus.ONGOING:
        raise HTTPException(
            status_code=400,
            detail=f"Game is already over: {board.result(claim_draw=False)}",
        )

    config = EngineConfig(
        difficulty=request.difficulty,
        base_depth=request.depth,
        time_budget_ms=request.time_limit_ms,
    )

    try:
        result = select_move(board, history, config)
    except Exception as exc:
        _log.exception("Engine search failed for FEN=%s", request.fen)
        raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

    if result.move is None:
        raise HTTPException(status_code=500, detail="Engine returned no move")

    _log.info(
        "Move=%s score=%d depth=%d nodes=%d difficulty=%s fen=%s",
        result.move.uci(),
        result.score,
        result.depth,
        result.nodes,
        config.difficulty.value,
        request.fen[:40],
    )

    board.push(result.move)
    return MoveResponse(
        move=result.move.uci(),
        fen=board.fen(),
        score=result.score,
        depth=result.depth,
        nodes=result.nodes,
        randomized=result.randomized,
    )


@app.get("/api/evaluate", response_model=EvaluationResponse)
def api_evaluate(fen: str) -> EvaluationResponse:
    """Static evaluation from White's perspective, with the evaluation-bar position."""
    board = _parse_board(fen)
    status = game_status(board)
    if status is GameStatus.CHECKMATE:
        # The side to move is mated.
        score = -MATE_SCORE if board.turn == chess.WHITE else MATE_SCORE
    elif status is not GameStatus.ONGOING:
        score = DRAW_SCORE
    else:
        score = evaluate(board)
    return EvaluationResponse(score=score, bar=eval_bar(score), status=status.value)


@app.post("/api/captured", response_model=CapturedResponse)
def api_captured(request: CapturedRequest) -> CapturedResponse:
    """List the pieces lost by each side over a move sequence."""
    start = _parse_board(request.fen) if request.fen else None
    moves = _parse_moves(request.moves)
    try:
        white_lost, black_lost = captured_pieces(moves, start)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CapturedResponse(
        white=[piece.symbol() for piece in white_lost],
        black=[piece.symbol() for piece in black_lost],
    )
