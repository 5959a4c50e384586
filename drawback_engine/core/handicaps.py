"""Handicap ("drawback") rules and their registry.

A handicap is a per-side rule that removes moves from the standard legal set
and may declare a loss when it leaves its side with nothing to play. Rules are
stateless: they read the board and the per-turn random outcome, never mutate
either, and are shared read-only through a registry built once at startup.

Usage:

    registry = build_registry()
    rule = registry.resolve(HandicapId.NO_CASTLING)
    moves = rule.filter_moves(board, list(board.legal_moves), None)
"""
from __future__ import annotations

import enum
import logging
from typing import Dict, List, Optional

import chess

logger = logging.getLogger(__name__)


class HandicapId(enum.IntEnum):
    NONE = 0
    NO_CASTLING = 1
    PAWN_PUSH_ONE = 2
    BLOCK_RANDOM_FILE = 3


class HandicapRule:
    """Base rule: identity filter, no randomness, never declares loss."""

    id: HandicapId = HandicapId.NONE
    name: str = "None"
    description: str = "No restriction."

    def needs_turn_randomness(self) -> bool:
        return False

    def random_outcome_count(self) -> int:
        return 1

    def filter_moves(self, board: chess.Board, moves: List[chess.Move],
                     outcome: Optional[int] = None) -> List[chess.Move]:
        return list(moves)

    def declares_loss(self, board: chess.Board, moves: List[chess.Move]) -> bool:
        # The rule starved its side: nothing left although the board had moves.
        if moves:
            return False
        return any(board.generate_legal_moves())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={int(self.id)}>"


class NoHandicap(HandicapRule):
    def declares_loss(self, board: chess.Board, moves: List[chess.Move]) -> bool:
        return False


class NoCastling(HandicapRule):
    id = HandicapId.NO_CASTLING
    name = "No Castling"
    description = "Castling (kingside or queenside) is not allowed."

    def filter_moves(self, board, moves, outcome=None):
        return [m for m in moves if not board.is_castling(m)]


class PawnPushOneOnly(HandicapRule):
    id = HandicapId.PAWN_PUSH_ONE
    name = "Pawns Advance One"
    description = "Pawns may not advance two squares on their first move."

    def filter_moves(self, board, moves, outcome=None):
        kept = []
        for m in moves:
            if board.piece_type_at(m.from_square) == chess.PAWN:
                rank_diff = abs(chess.square_rank(m.to_square) - chess.square_rank(m.from_square))
                if rank_diff == 2:
                    continue
            kept.append(m)
        return kept


class BlockRandomFile(HandicapRule):
    id = HandicapId.BLOCK_RANDOM_FILE
    name = "Random File Blocked"
    description = ("At the start of your turn a random file (A-H) is chosen. "
                   "You cannot move any piece to that file this turn.")

    def needs_turn_randomness(self) -> bool:
        return True

    def random_outcome_count(self) -> int:
        return 8

    def filter_moves(self, board, moves, outcome=None):
        if outcome is None:
            return list(moves)
        if not 0 <= outcome < 8:
            logger.warning("BlockRandomFile: invalid random outcome %r, not filtering", outcome)
            return list(moves)
        return [m for m in moves if chess.square_file(m.to_square) != outcome]


class HandicapRegistry:
    """Read-only id -> rule lookup."""

    def __init__(self, rules: List[HandicapRule]):
        self._rules: Dict[int, HandicapRule] = {int(r.id): r for r in rules}
        self._none = self._rules.get(int(HandicapId.NONE)) or NoHandicap()

    def lookup(self, handicap_id: int) -> Optional[HandicapRule]:
        try:
            return self._rules.get(int(handicap_id))
        except (TypeError, ValueError):
            return None

    def resolve(self, handicap_id: Optional[int]) -> HandicapRule:
        """Like lookup, but unknown ids fall back to the identity rule."""
        if handicap_id is None:
            return self._none
        rule = self.lookup(handicap_id)
        if rule is None:
            logger.warning("Unknown handicap id %r, playing without restriction", handicap_id)
            return self._none
        return rule

    def ids(self) -> List[int]:
        return sorted(self._rules)

    def __contains__(self, handicap_id: int) -> bool:
        return self.lookup(handicap_id) is not None

    def __len__(self) -> int:
        return len(self._rules)


def build_registry() -> HandicapRegistry:
    """Instantiate every known rule. Call once at startup."""
    registry = HandicapRegistry([NoHandicap(), NoCastling(), PawnPushOneOnly(), BlockRandomFile()])
    logger.debug("Handicap registry initialised with %d rules", len(registry))
    return registry


_NAMES = {
    NoHandicap.name: HandicapId.NONE,
    NoCastling.name: HandicapId.NO_CASTLING,
    PawnPushOneOnly.name: HandicapId.PAWN_PUSH_ONE,
    BlockRandomFile.name: HandicapId.BLOCK_RANDOM_FILE,
}


def resolve_handicap_id(name: Optional[str] = None, index: Optional[int] = None) -> HandicapId:
    """Map a configured handicap name or index to an id. The name wins if both are set."""
    if name is not None:
        if name in _NAMES:
            return _NAMES[name]
        logger.warning("Unknown handicap name: %s", name)
        return HandicapId.NONE
    if index is not None:
        try:
            return HandicapId(index)
        except ValueError:
            logger.warning("Unknown handicap index: %s", index)
            return HandicapId.NONE
    return HandicapId.NONE
