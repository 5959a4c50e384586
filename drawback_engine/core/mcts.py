"""Monte Carlo Tree Search for Drawback chess.

The tree lives in an arena: ``self.nodes`` is a flat list and children are
referenced by index. Nodes have no parent pointers; every iteration records
the index path it walked from the root and replays it for backpropagation.

One iteration:

1. Selection: from the root, follow the UCT-best child while the node is
   non-terminal and fully expanded.
2. Expansion: if the reached node has been visited before and still has
   untried moves, play one of them at random and add the child.
3. Simulation: random playout until the game ends, or the depth limit is
   reached on a quiet position (with an optional quiescence extension).
4. Backpropagation: every node on the path, root included, gets one visit
   and the playout score.

Scores are stored from the root mover's perspective (1 win, 0.5 draw,
0 loss). During selection the mean is flipped for nodes where the opponent
chooses, so each side picks its own best continuation.
"""
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import chess

from drawback_engine.config import CONFIG
from drawback_engine.core.context import SearchContext
from drawback_engine.core.evaluator import Evaluator
from drawback_engine.core.handicaps import HandicapRegistry, HandicapRule
from drawback_engine.core.rules import filtered_legal_moves, game_outcome, is_quiet, outcome_score
from drawback_engine.core.search import BaseSearch
from drawback_engine.core.utils import format_search_info

logger = logging.getLogger(__name__)

ROOT = 0


@dataclass
class SearchNode:
    board: chess.Board
    move: Optional[chess.Move]
    untried: List[chess.Move]
    terminal: Optional[chess.Outcome] = None
    visits: int = 0
    total_score: float = 0.0
    children: List[int] = field(default_factory=list)

    @property
    def mean(self) -> float:
        return self.total_score / self.visits if self.visits else 0.0


class MCTSSearch(BaseSearch):
    name = "mcts"

    def __init__(self, registry: Optional[HandicapRegistry] = None,
                 evaluator: Optional[Evaluator] = None,
                 exploration: Optional[float] = None):
        super().__init__(registry, evaluator)
        self.exploration = CONFIG.search.exploration if exploration is None else exploration
        self.nodes: List[SearchNode] = []
        self.root_color: chess.Color = chess.WHITE

    @property
    def root(self) -> Optional[SearchNode]:
        return self.nodes[ROOT] if self.nodes else None

    def run(self, ctx: SearchContext) -> Optional[chess.Move]:
        player_rule, opponent_rule, legal = self._begin(ctx)
        self.nodes = []
        if not legal:
            return None

        board = ctx.board
        self.root_color = board.turn
        rules = {board.turn: player_rule, not board.turn: opponent_rule}
        self.nodes.append(SearchNode(board.copy(stack=False), None, list(legal)))

        start = time.time()
        while self.iterations < ctx.iteration_limit:
            if self._out_of_budget(ctx, start):
                break

            path = self._select()
            leaf = self.nodes[path[-1]]
            if leaf.visits > 0 and leaf.untried:
                path.append(self._expand(path[-1], rules))

            first_outcome = ctx.rng_outcome if path[-1] == ROOT else None
            score = self._simulate(self.nodes[path[-1]], ctx, rules, first_outcome)

            for idx in path:
                node = self.nodes[idx]
                node.visits += 1
                node.total_score += score
            self.iterations += 1

            if self.iterations % 1000 == 0:
                logger.debug("MCTS progress: %d iterations, %.0f ms", self.iterations,
                             (time.time() - start) * 1000)

        move = self._robust_child()
        elapsed = (time.time() - start) * 1000
        logger.info(format_search_info(self.name, self.iterations, elapsed, move,
                                       nodes=len(self.nodes)))
        return self._validated(move, legal)

    def _select(self) -> List[int]:
        path = [ROOT]
        node = self.nodes[ROOT]
        while node.terminal is None and not node.untried and node.children:
            idx = self._uct_child(node)
            path.append(idx)
            node = self.nodes[idx]
        return path

    def _uct_child(self, node: SearchNode) -> int:
        log_visits = math.log(node.visits)
        flip = node.board.turn != self.root_color
        best: List[int] = []
        best_value = -math.inf
        for idx in node.children:
            child = self.nodes[idx]
            mean = 1.0 - child.mean if flip else child.mean
            value = mean + self.exploration * math.sqrt(log_visits / child.visits)
            if value > best_value:
                best_value = value
                best = [idx]
            elif value == best_value:
                best.append(idx)
        return self.rng.choice(best)

    def _expand(self, idx: int, rules: Dict[chess.Color, HandicapRule]) -> int:
        node = self.nodes[idx]
        move = node.untried.pop(self.rng.randrange(len(node.untried)))
        board = node.board.copy(stack=False)
        board.push(move)

        rule = rules[board.turn]
        moves = filtered_legal_moves(board, rule, None)
        terminal = game_outcome(board, rule, moves)
        self.nodes.append(SearchNode(board, move, [] if terminal else moves, terminal))
        child_idx = len(self.nodes) - 1
        node.children.append(child_idx)
        return child_idx

    def _draw_outcome(self, rule: HandicapRule) -> Optional[int]:
        if rule.needs_turn_randomness():
            return self.rng.randrange(rule.random_outcome_count())
        return None

    def _simulate(self, node: SearchNode, ctx: SearchContext,
                  rules: Dict[chess.Color, HandicapRule],
                  first_outcome: Optional[int]) -> float:
        if node.terminal is not None:
            return outcome_score(node.terminal, self.root_color)

        board = node.board.copy(stack=False)
        hard_limit = ctx.depth_limit + (ctx.quiescence_depth if ctx.check_quietness else 0)
        outcome = first_outcome if first_outcome is not None else self._draw_outcome(rules[board.turn])
        depth = 0
        while True:
            rule = rules[board.turn]
            moves = filtered_legal_moves(board, rule, outcome)
            result = game_outcome(board, rule, moves)
            if result is not None:
                return outcome_score(result, self.root_color)

            if depth >= ctx.depth_limit:
                if not ctx.check_quietness or depth >= hard_limit or is_quiet(board):
                    return self._cutoff_score(board)

            board.push(self.rng.choice(moves))
            depth += 1
            outcome = self._draw_outcome(rules[board.turn])

    def _cutoff_score(self, board: chess.Board) -> float:
        balance = self.evaluator.material_balance(board, self.root_color)
        score = 0.5 + balance / (2.0 * self.evaluator.cfg.material_normalizer)
        return min(1.0, max(0.0, score))

    def _robust_child(self) -> Optional[chess.Move]:
        root = self.nodes[ROOT]
        if not root.children:
            return self.rng.choice(root.untried) if root.untried else None
        most = max(self.nodes[idx].visits for idx in root.children)
        best = [idx for idx in root.children if self.nodes[idx].visits == most]
        return self.nodes[self.rng.choice(best)].move
