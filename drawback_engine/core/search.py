"""Move searchers for Drawback chess.

Every searcher takes a SearchContext and returns one move from the
handicap-filtered legal set, or None when that set is empty. Searches are
bounded by the context's iteration and wall-clock budgets and by a
cooperative stop flag, and always hand back the best candidate found so far
instead of failing.
"""
import logging
import random
import threading
import time
from typing import List, Optional, Tuple

import chess

from drawback_engine.config import CONFIG, HeuristicConfig
from drawback_engine.core.context import SearchContext
from drawback_engine.core.evaluator import Evaluator
from drawback_engine.core.handicaps import HandicapRegistry, HandicapRule, build_registry
from drawback_engine.core.rules import capture_value, filtered_legal_moves, is_king_capture
from drawback_engine.core.utils import format_search_info

logger = logging.getLogger(__name__)

KING_SHIELD_BONUS = {
    chess.PAWN: 15,
    chess.KNIGHT: 10,
    chess.BISHOP: 8,
    chess.ROOK: 12,
    chess.QUEEN: 5,
    chess.KING: 0,
}


class BaseSearch:
    name = "base"

    def __init__(self, registry: Optional[HandicapRegistry] = None,
                 evaluator: Optional[Evaluator] = None):
        self.registry = registry or build_registry()
        self.evaluator = evaluator or Evaluator()
        self.rng = random.Random()
        self.iterations = 0
        self._stop_event = threading.Event()

    def find_best_move(self, ctx: SearchContext) -> Optional[chess.Move]:
        self.clear_stop()
        return self.run(ctx)

    def run(self, ctx: SearchContext) -> Optional[chess.Move]:
        """Search without resetting the stop flag (used by background callers)."""
        raise NotImplementedError

    def stop(self):
        self._stop_event.set()

    def clear_stop(self):
        self._stop_event.clear()

    def _begin(self, ctx: SearchContext) -> Tuple[HandicapRule, HandicapRule, List[chess.Move]]:
        self.rng = random.Random(ctx.seed)
        self.iterations = 0
        if ctx.turn != ctx.board.turn:
            logger.warning("Context turn %s disagrees with board turn %s, using the board",
                           chess.COLOR_NAMES[ctx.turn], chess.COLOR_NAMES[ctx.board.turn])
        player_rule = self.registry.resolve(ctx.player_handicap)
        opponent_rule = self.registry.resolve(ctx.opponent_handicap)
        legal = filtered_legal_moves(ctx.board, player_rule, ctx.rng_outcome)
        return player_rule, opponent_rule, legal

    def _out_of_budget(self, ctx: SearchContext, start: float) -> bool:
        if self._stop_event.is_set():
            return True
        return time.time() - start >= ctx.time_limit_s

    def _validated(self, move: Optional[chess.Move], legal: List[chess.Move]) -> chess.Move:
        if move is None or move not in legal:
            logger.error("%s search picked %s which is not in the legal set, playing a random move instead",
                         self.name, move)
            return self.rng.choice(legal)
        return move


class RandomSearch(BaseSearch):
    """Uniform random legal move. Baseline opponent."""

    name = "random"

    def run(self, ctx: SearchContext) -> Optional[chess.Move]:
        _, _, legal = self._begin(ctx)
        if not legal:
            return None
        self.iterations = 1
        return self.rng.choice(legal)


def king_safety(board: chess.Board, color: chess.Color) -> int:
    """Edge/corner bonus plus a bonus per friendly piece next to the king."""
    king_sq = board.king(color)
    if king_sq is None:
        return 0

    score = 0
    file, rank = chess.square_file(king_sq), chess.square_rank(king_sq)
    on_file_edge = file in (0, 7)
    on_rank_edge = rank in (0, 7)
    if on_file_edge or on_rank_edge:
        score += 20
        if on_file_edge and on_rank_edge:
            score += 15

    for sq in chess.SquareSet(chess.BB_KING_ATTACKS[king_sq]):
        piece = board.piece_at(sq)
        if piece and piece.color == color:
            score += KING_SHIELD_BONUS[piece.piece_type]
    return score


class HeuristicSearch(BaseSearch):
    """Single-ply scorer: tactics first, then the static evaluation."""

    name = "heuristic"

    def __init__(self, registry: Optional[HandicapRegistry] = None,
                 evaluator: Optional[Evaluator] = None,
                 cfg: Optional[HeuristicConfig] = None):
        super().__init__(registry, evaluator)
        self.cfg = cfg or CONFIG.heuristic
        self.best_score: Optional[int] = None

    def run(self, ctx: SearchContext) -> Optional[chess.Move]:
        _, opponent_rule, legal = self._begin(ctx)
        self.best_score = None
        if not legal:
            return None

        board = ctx.board
        in_check = board.is_check()
        start = time.time()
        max_passes = max(1, min(ctx.iteration_limit, self.cfg.max_passes))
        best_pass: List[Tuple[chess.Move, int]] = []

        while self.iterations < max_passes:
            if self.iterations and self._out_of_budget(ctx, start):
                break

            scored = []
            for move in legal:
                # keep at least one scored move so there is something to return
                if (scored or best_pass) and self._out_of_budget(ctx, start):
                    break
                scored.append((move, self.score_move(board, move, opponent_rule, in_check)))
            self.iterations += 1

            scored.sort(key=lambda x: x[1], reverse=True)
            if not best_pass or (scored and scored[0][1] > best_pass[0][1]):
                best_pass = scored

            if best_pass[0][1] > self.cfg.winning_score:
                logger.debug("Winning move found after %d passes", self.iterations)
                break

        self.best_score = best_pass[0][1]
        candidates = [m for m, s in best_pass if s == self.best_score]
        choice = self.rng.choice(candidates)

        elapsed = (time.time() - start) * 1000
        logger.info(format_search_info(self.name, self.iterations, elapsed, choice, self.best_score))
        for i, (m, s) in enumerate(best_pass[:3], 1):
            logger.debug("  %d. %s score %d", i, m.uci(), s)

        return self._validated(choice, legal)

    def score_move(self, board: chess.Board, move: chess.Move,
                   opponent_rule: HandicapRule, in_check: bool) -> int:
        cfg = self.cfg
        us = board.turn

        score = capture_value(board, move, cfg.capture_values) * cfg.capture_multiplier
        if is_king_capture(board, move):
            score += cfg.king_capture_bonus

        after = board.copy(stack=False)
        after.push(move)

        # Opponent replies: their handicap applies, their random outcome is unknown.
        replies = filtered_legal_moves(after, opponent_rule, None)
        king_exposed = False
        max_risk = 0
        for reply in replies:
            if is_king_capture(after, reply):
                king_exposed = True
                break
            max_risk = max(max_risk, capture_value(after, reply, cfg.capture_values))

        if king_exposed:
            score -= cfg.king_exposed_penalty
        score -= max_risk * cfg.piece_risk_factor

        if after.is_check():
            score += cfg.check_bonus + max(0, cfg.check_reply_weight * (cfg.check_reply_baseline - len(replies)))

        if in_check:
            score += cfg.escape_check_bonus

        score += int(king_safety(after, us) * cfg.king_safety_weight)

        # evaluator scores for the side to move, which is now the opponent
        score -= self.evaluator.evaluate(after)
        return score
