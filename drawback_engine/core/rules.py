"""Variant rules layered over python-chess.

python-chess knows standard movement, check and outcome classification. The
helpers here add what Drawback chess changes: per-side move filtering, the
king as a capturable piece and the extra ways a game can end.
"""
from typing import Dict, List, Optional

import chess

from drawback_engine.core.handicaps import HandicapRule


def filtered_legal_moves(board: chess.Board, rule: HandicapRule,
                         outcome: Optional[int] = None) -> List[chess.Move]:
    """Standard legal moves for the side to move, restricted by its handicap."""
    return rule.filter_moves(board, list(board.legal_moves), outcome)


def is_king_capture(board: chess.Board, move: chess.Move) -> bool:
    return board.piece_type_at(move.to_square) == chess.KING


def is_capture(board: chess.Board, move: chess.Move) -> bool:
    if board.piece_at(move.to_square) is not None:
        return True
    # en passant: pawn moving diagonally onto an empty square
    return (board.piece_type_at(move.from_square) == chess.PAWN
            and chess.square_file(move.from_square) != chess.square_file(move.to_square))


def capture_value(board: chess.Board, move: chess.Move, values: Dict[str, int]) -> int:
    """Static value of the piece captured by move, 0 for quiet moves."""
    victim = board.piece_type_at(move.to_square)
    if victim is not None:
        return values[chess.piece_name(victim).upper()]
    if is_capture(board, move):
        return values["PAWN"]
    return 0


def is_quiet(board: chess.Board) -> bool:
    """No check on the board and no capture available to the side to move."""
    if board.is_check():
        return False
    return not any(board.generate_legal_captures())


def game_outcome(board: chess.Board, rule: HandicapRule,
                 moves: Optional[List[chess.Move]] = None,
                 outcome: Optional[int] = None) -> Optional[chess.Outcome]:
    """Classify the position for the side to move, or None if play continues.

    moves is the already filtered move list when the caller has one.
    """
    if board.king(board.turn) is None:
        return chess.Outcome(chess.Termination.VARIANT_LOSS, not board.turn)
    if board.king(not board.turn) is None:
        return chess.Outcome(chess.Termination.VARIANT_WIN, board.turn)

    if moves is None:
        moves = filtered_legal_moves(board, rule, outcome)
    if not moves:
        if rule.declares_loss(board, moves):
            return chess.Outcome(chess.Termination.VARIANT_LOSS, not board.turn)
        if board.is_check():
            return chess.Outcome(chess.Termination.CHECKMATE, not board.turn)
        return chess.Outcome(chess.Termination.STALEMATE, None)

    if board.is_insufficient_material():
        return chess.Outcome(chess.Termination.INSUFFICIENT_MATERIAL, None)
    if board.is_seventyfive_moves():
        return chess.Outcome(chess.Termination.SEVENTYFIVE_MOVES, None)
    if board.is_fivefold_repetition():
        return chess.Outcome(chess.Termination.FIVEFOLD_REPETITION, None)
    return None


def outcome_score(outcome: chess.Outcome, color: chess.Color) -> float:
    """1.0 win, 0.5 draw, 0.0 loss for color."""
    if outcome.winner is None:
        return 0.5
    return 1.0 if outcome.winner == color else 0.0
