"""Authoritative game state: python-chess board plus Drawback chess bookkeeping."""

import logging
import random
from typing import List, Optional

import chess

from drawback_engine.core.handicaps import HandicapId, HandicapRegistry, HandicapRule
from drawback_engine.core.rules import filtered_legal_moves, game_outcome, is_king_capture
from drawback_engine.core.zobrist import AuxState, ZobristKeys, zobrist_hash

logger = logging.getLogger(__name__)


class GameState:
    def __init__(self, registry: HandicapRegistry, keys: ZobristKeys, fen: Optional[str] = None,
                 white_handicap: int = HandicapId.NONE, black_handicap: int = HandicapId.NONE):
        """Initialize from FEN or the standard starting position."""
        self.registry = registry
        self.keys = keys
        self.board = chess.Board(fen) if fen else chess.Board()
        self.white_handicap = white_handicap
        self.black_handicap = black_handicap
        self.rng_outcome: Optional[int] = None
        self.move_history: List[str] = []
        self.result: Optional[chess.Outcome] = None
        self.zobrist_hash = 0
        self.rehash()

    def reset(self):
        """Reset to the initial position, keeping the handicaps."""
        self.board.reset()
        self.move_history.clear()
        self.rng_outcome = None
        self.result = None
        self.rehash()

    def set_fen(self, fen: str):
        """Set board state from a FEN string."""
        self.board.set_fen(fen)
        self.rng_outcome = None
        self.result = None
        self.rehash()

    def get_fen(self) -> str:
        """Return the current FEN."""
        return self.board.fen()

    def handicap_for(self, color: chess.Color) -> int:
        return self.white_handicap if color == chess.WHITE else self.black_handicap

    def current_rule(self) -> HandicapRule:
        return self.registry.resolve(self.handicap_for(self.board.turn))

    def aux_state(self) -> AuxState:
        return AuxState(int(self.handicap_for(self.board.turn)), self.rng_outcome)

    def rehash(self) -> int:
        self.zobrist_hash = zobrist_hash(self.board, self.aux_state(), self.keys)
        return self.zobrist_hash

    def begin_turn(self, rng: Optional[random.Random] = None) -> Optional[int]:
        """Draw the side to move's random outcome if its handicap needs one."""
        rule = self.current_rule()
        if rule.needs_turn_randomness():
            self.rng_outcome = (rng or random).randrange(rule.random_outcome_count())
            logger.info("%s: random outcome %d this turn", rule.name, self.rng_outcome)
        else:
            self.rng_outcome = None
        self.rehash()
        return self.rng_outcome

    def legal_moves(self) -> List[chess.Move]:
        """Legal moves for the side to move after its handicap is applied."""
        return filtered_legal_moves(self.board, self.current_rule(), self.rng_outcome)

    def get_legal_moves(self) -> List[str]:
        """Return filtered legal moves as UCI strings."""
        return [m.uci() for m in self.legal_moves()]

    def make_move(self, move_str: str) -> bool:
        """Push a UCI move (e.g. 'e2e4'). Returns True if legal under the handicap."""
        if self.result is not None:
            return False
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError:
            return False
        if move not in self.legal_moves():
            return False

        king_captured = is_king_capture(self.board, move)
        mover = self.board.turn
        self.board.push(move)
        self.move_history.append(move_str)
        self.rng_outcome = None
        if king_captured:
            self.result = chess.Outcome(chess.Termination.VARIANT_WIN, mover)
            logger.info("Game over: king captured by %s", chess.COLOR_NAMES[mover])
        self.rehash()
        return True

    def outcome(self) -> Optional[chess.Outcome]:
        """Terminal classification for the side to move, None while the game goes on."""
        if self.result is not None:
            return self.result
        return game_outcome(self.board, self.current_rule(), outcome=self.rng_outcome)

    def is_game_over(self) -> bool:
        """Check if the game has ended."""
        return self.outcome() is not None
