"""
Engine constants: piece values, evaluation weights, search and policy parameters.

Every numeric tunable used by the engine is defined here so the evaluator,
the move orderer, the search and the difficulty policy never introduce magic
numbers of their own. Scores are integer centipawns (1 pawn = 100 cp).
"""

import chess

# ---------------------------------------------------------------------------
# Piece values (centipawns)
# ---------------------------------------------------------------------------
# The king is never counted as material: losing it is a checkmate, which the
# search scores with MATE_SCORE before the evaluator is ever consulted.

PAWN_VALUE: int = 100
KNIGHT_VALUE: int = 320
BISHOP_VALUE: int = 330
ROOK_VALUE: int = 500
QUEEN_VALUE: int = 900

PIECE_VALUES: dict[int, int] = {
    chess.PAWN:   PAWN_VALUE,
    chess.KNIGHT: KNIGHT_VALUE,
    chess.BISHOP: BISHOP_VALUE,
    chess.ROOK:   ROOK_VALUE,
    chess.QUEEN:  QUEEN_VALUE,
    chess.KING:   0,
}

# ---------------------------------------------------------------------------
# Positional terms
# ---------------------------------------------------------------------------
# Mobility: centipawns per legal move of difference between the two sides.
MOBILITY_WEIGHT: int = 5

# Bonus for a piece standing on one of the four central squares.
CENTER_SQUARES: tuple[int, ...] = (chess.D4, chess.D5, chess.E4, chess.E5)
CENTER_BONUS: dict[int, int] = {
    chess.PAWN:   20,
    chess.KNIGHT: 30,
    chess.BISHOP: 30,
    chess.ROOK:   15,
    chess.QUEEN:  10,
    chess.KING:   0,
}

# Development and king safety, used only by the quiescence stand-pat score.
MINOR_DEVELOPED_BONUS: int = 10   # knight or bishop off its back rank
ROOK_DEVELOPED_BONUS: int = 5     # rook off its back rank
CASTLED_KING_BONUS: int = 20      # king on the g- or c-file
CASTLED_KING_FILES: tuple[int, ...] = (chess.square_file(chess.G1), chess.square_file(chess.C1))

# ---------------------------------------------------------------------------
# Special scores
# ---------------------------------------------------------------------------
# MATE_SCORE dwarfs any material sum. INF_SCORE leaves headroom above it so
# that negating a window bound and offsetting it by one never crosses a mate.

MATE_SCORE: int = 1_000_000
DRAW_SCORE: int = 0
INF_SCORE: int = 1_000_000_000

# ---------------------------------------------------------------------------
# Move ordering priorities (lower sorts first; a move may collect several)
# ---------------------------------------------------------------------------
CAPTURE_PRIORITY: int = -10_000
PROMOTION_PRIORITY: int = -8_000
CHECK_PRIORITY: int = -5_000

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------
# Each tactical move (capture, promotion, check) earns one ply of extension,
# but no line is ever extended more than MAX_EXTENSIONS plies beyond its
# nominal depth; otherwise a perpetual check would recurse forever.
MAX_EXTENSIONS: int = 2

# Default extension ceiling when search() is driven without the root policy.
MAX_DEPTH: int = 5

# ---------------------------------------------------------------------------
# Difficulty and time policy
# ---------------------------------------------------------------------------
DEFAULT_BASE_DEPTH: int = 3
TIME_BUDGET_MS: int = 500

EASY_DEPTH: int = 2
EASY_RANDOM_PROBABILITY: float = 0.7
HARD_DEPTH_BONUS: int = 2

# Optional hook: one extra ply when the material balance is this lopsided.
DECISIVE_MATERIAL_THRESHOLD: int = 300
DECISIVE_DEPTH_BONUS: int = 1

# Evaluation bar clamp, in centipawns.
EVAL_BAR_LIMIT: int = 2_000
