"""Piece-square tables, midgame and endgame, from White's point of view.

Tables are written the way a board is printed (rank 8 on the first row) and
converted at import time so that TABLE[square] works with python-chess square
indices (A1 = 0). Black reads them through chess.square_mirror.
"""
from typing import Dict, List, Tuple

import chess


def _from_rank8(rows: List[int]) -> List[int]:
    if len(rows) != 64:
        raise ValueError(f"piece-square table needs 64 entries, got {len(rows)}")
    return [rows[chess.square_mirror(sq)] for sq in chess.SQUARES]


PAWN_MG = _from_rank8([
      0,   0,   0,   0,   0,   0,   0,   0,
     50,  50,  50,  50,  50,  50,  50,  50,
     10,  10,  20,  35,  35,  20,  10,  10,
     10,  15,  30,  70,  70,  30,  15,  10,
      5,  10,  25,  55,  55,  25,  10,   5,
      5,   5,   5,   0,   0,   5,   5,   5,
      0,   0,   0, -30, -30,   0,   0,   0,
      0,   0,   0,   0,   0,   0,   0,   0,
])

KNIGHT_MG = _from_rank8([
    -80, -50, -30, -30, -30, -30, -50, -80,
    -50, -20,   0,   0,   0,   0, -20, -50,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  20,  25,  25,  20,   5, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  15,  15,  15,  15,   5, -30,
    -50, -20,   0,   5,   5,   0, -20, -50,
    -80, -50, -30, -30, -30, -30, -50, -80,
])

BISHOP_MG = _from_rank8([
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,  10,  10,   5,   0, -10,
    -10,   5,   5,  10,  10,   5,   5, -10,
    -10,   0,  10,  10,  10,  10,   0, -10,
    -10,  10,  10,  10,  10,  10,  10, -10,
    -10,  15,   0,   0,   0,   0,  15, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
])

ROOK_MG = _from_rank8([
     40,  40,  40,   0,   0,  40,  40,  40,
      5,  15,  15,  50,  50,  15,  50,   5,
      5,   0,   0,   0,   0,   0,   0,   5,
      5,   0,   0,   0,   0,   0,   0,   5,
      5,   0,   0,   0,   0,   0,   0,   5,
      5,   0,   0,   0,   0,   0,   0,   5,
      5,   0,   0,   0,   0,   0,   0,   5,
      0,  -5,   5,   5,   5,  10,  -5,   0,
])

QUEEN_MG = _from_rank8([
    -20, -10, -10,  -5,  -5, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,   5,   5,   5,   0, -10,
     -5,   0,   5,   5,   5,   5,   0,  -5,
      0,   0,   5,   5,   5,   5,   0,  -5,
    -10,   5,   5,   5,   5,   5,   0, -10,
    -10,   0,   5,  -5,  -5,   0,   0, -10,
    -20, -10, -10,  -2,  -5, -10, -10, -20,
])

KING_MG = _from_rank8([
   -120, -120, -120, -120, -120, -120, -120, -120,
   -100, -100, -100, -100, -100, -100, -100, -100,
    -80,  -80,  -80,  -80,  -80,  -80,  -80,  -80,
    -70,  -70,  -70,  -70,  -70,  -70,  -70,  -70,
    -60,  -60,  -60,  -60,  -60,  -60,  -60,  -60,
    -40,  -40,  -40,  -40,  -40,  -40,  -40,  -40,
      0,    0,  -10,  -30,  -30,  -10,    0,    0,
     20,   50,   10,    0,    0,   10,   50,   20,
])

PAWN_EG = _from_rank8([
      0,   0,   0,   0,   0,   0,   0,   0,
    400, 400, 400, 400, 400, 400, 400, 400,
     50,  55,  50,  50,  50,  50,  55,  50,
     30,  35,  30,  30,  30,  30,  35,  30,
     25,  20,  20,  20,  20,  20,  20,  25,
     15,  10,  10,  10,  10,  10,  10,  15,
     10,  10,  10,  10,  10,  10,  10,  10,
      0,   0,   0,   0,   0,   0,   0,   0,
])

KNIGHT_EG = _from_rank8([
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20,   0,   0,   0,   0, -20, -40,
    -30,   0,  10,  15,  15,  10,   0, -30,
    -30,  10,  15,  20,  20,  15,  10, -30,
    -30,   0,  15,  20,  20,  15,   0, -30,
    -30,   5,  15,  15,  15,  15,   5, -30,
    -40, -20,   0,   5,   5,   0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
])

BISHOP_EG = _from_rank8([
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,  10,  10,   5,   0, -10,
    -10,   5,   5,  10,  10,   5,   5, -10,
    -10,   0,  10,  10,  10,  10,   0, -10,
    -10,  10,  10,  10,  10,  10,  10, -10,
    -10,  10,   0,   0,   0,   0,  10, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
])

ROOK_EG = _from_rank8([
     40,  40,  40,   0,   0,  40,  40,  40,
      5,  10,  10,  10,  10,  10,  10,   5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
     -5,   0,   0,   0,   0,   0,   0,  -5,
      0,   0,  10,   5,   5,  10,   0,   0,
])

QUEEN_EG = _from_rank8([
    -20, -10, -10,  -5,  -5, -10, -10, -20,
    -10,   0,   0,   0,   0,   0,   0, -10,
    -10,   0,   5,   5,   5,   5,   0, -10,
     -5,   0,   5,   5,   5,   5,   0,  -5,
      0,   0,   5,   5,   5,   5,   0,  -5,
    -10,   5,   5,   5,   5,   5,   0, -10,
    -10,   0,   5,   0,   0,   0,   0, -10,
    -20, -10, -10,  -5,  -5, -10, -10, -20,
])

KING_EG = _from_rank8([
    -50, -30, -30, -30, -30, -30, -30, -50,
    -30, -20, -20, -20, -20, -20, -20, -30,
    -30, -10,  -5,   0,   0,  -5, -10, -30,
    -30, -10,   0,  10,  10,   0, -10, -30,
    -30, -10,   0,  10,  10,   0, -10, -30,
    -30, -10,  -5,   0,   0,  -5, -10, -30,
    -30, -20, -20, -20, -20, -20, -20, -30,
    -50, -30, -30, -30, -30, -30, -30, -50,
])

PST_MG: Dict[chess.PieceType, List[int]] = {
    chess.PAWN: PAWN_MG,
    chess.KNIGHT: KNIGHT_MG,
    chess.BISHOP: BISHOP_MG,
    chess.ROOK: ROOK_MG,
    chess.QUEEN: QUEEN_MG,
    chess.KING: KING_MG,
}

PST_EG: Dict[chess.PieceType, List[int]] = {
    chess.PAWN: PAWN_EG,
    chess.KNIGHT: KNIGHT_EG,
    chess.BISHOP: BISHOP_EG,
    chess.ROOK: ROOK_EG,
    chess.QUEEN: QUEEN_EG,
    chess.KING: KING_EG,
}


def signed_tables(tables: Dict[chess.PieceType, List[int]]) -> Dict[Tuple[chess.PieceType, chess.Color], List[int]]:
    """Per-piece tables in White-positive units: Black's are mirrored and negated."""
    out = {}
    for pt, table in tables.items():
        out[(pt, chess.WHITE)] = list(table)
        out[(pt, chess.BLACK)] = [-table[chess.square_mirror(sq)] for sq in chess.SQUARES]
    return out
