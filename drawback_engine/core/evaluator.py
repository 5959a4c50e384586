"""Tapered material + piece-square evaluator."""

from typing import Optional

import chess

from drawback_engine.config import CONFIG, EvalConfig
from drawback_engine.core.pst import PST_EG, PST_MG, signed_tables

PIECE_TYPES = [chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN, chess.KING]


class Evaluator:
    def __init__(self, cfg: Optional[EvalConfig] = None):
        self.cfg = cfg or CONFIG.eval

        # Role-indexed lookups built once from the name-keyed config.
        self.mg_values = {pt: self.cfg.material_mg[chess.piece_name(pt).upper()] for pt in PIECE_TYPES}
        self.eg_values = {pt: self.cfg.material_eg[chess.piece_name(pt).upper()] for pt in PIECE_TYPES}
        self.phase_weights = {pt: self.cfg.phase_weights[chess.piece_name(pt).upper()] for pt in PIECE_TYPES}

        self.pst_mg = signed_tables(PST_MG)
        self.pst_eg = signed_tables(PST_EG)

    def game_phase(self, board: chess.Board) -> float:
        """0.0 = full midgame material, 1.0 = bare endgame."""
        phase = 0
        for pt in PIECE_TYPES:
            weight = self.phase_weights[pt]
            if weight:
                phase += weight * len(board.pieces(pt, chess.WHITE))
                phase += weight * len(board.pieces(pt, chess.BLACK))
        phase = min(phase, self.cfg.max_phase)
        return 1.0 - phase / self.cfg.max_phase

    def evaluate(self, board: chess.Board) -> int:
        """Return static eval in centipawns, positive favors side to move."""
        eg_weight = self.game_phase(board)
        mg_weight = 1.0 - eg_weight

        score = 0
        for sq, piece in board.piece_map().items():
            pt = piece.piece_type
            value = int(self.mg_values[pt] * mg_weight + self.eg_values[pt] * eg_weight)

            # Tables are already mirrored and negated for Black.
            key = (pt, piece.color)
            positional = int(self.pst_mg[key][sq] * mg_weight + self.pst_eg[key][sq] * eg_weight)

            if piece.color == chess.WHITE:
                score += value + positional
            else:
                score += positional - value

        if board.turn == chess.BLACK:
            return -score
        return score

    def material_balance(self, board: chess.Board, color: chess.Color) -> int:
        """Midgame material of color minus that of its opponent, kings excluded."""
        balance = 0
        for pt in PIECE_TYPES[:-1]:
            value = self.mg_values[pt]
            balance += value * len(board.pieces(pt, color))
            balance -= value * len(board.pieces(pt, not color))
        return balance
