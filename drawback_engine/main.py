import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Dict, Optional

import chess

from drawback_engine.config import CONFIG, Config
from drawback_engine.core.board import GameState
from drawback_engine.core.context import SearchContext
from drawback_engine.core.evaluator import Evaluator
from drawback_engine.core.handicaps import HandicapId, build_registry
from drawback_engine.core.mcts import MCTSSearch
from drawback_engine.core.search import BaseSearch, HeuristicSearch, RandomSearch
from drawback_engine.core.zobrist import AuxState, init_keys, zobrist_hash

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    HEURISTIC = "heuristic"
    MCTS = "mcts"
    RANDOM = "random"


class Engine:
    """Search facade: one registry and key table, one search at a time."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or CONFIG
        self.registry = build_registry()
        self.keys = init_keys(self.config.zobrist_seed)
        self.evaluator = Evaluator(self.config.eval)
        self.searchers: Dict[Algorithm, BaseSearch] = {
            Algorithm.HEURISTIC: HeuristicSearch(self.registry, self.evaluator, self.config.heuristic),
            Algorithm.MCTS: MCTSSearch(self.registry, self.evaluator, self.config.search.exploration),
            Algorithm.RANDOM: RandomSearch(self.registry, self.evaluator),
        }
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="search")
        self._active: Optional[BaseSearch] = None
        self._pending: Optional[Future] = None

    def searcher(self, algorithm: Optional[str] = None) -> BaseSearch:
        return self.searchers[Algorithm(algorithm or self.config.search.algorithm)]

    def find_best_move(self, context: SearchContext,
                       algorithm: Optional[str] = None) -> Optional[chess.Move]:
        """Blocking search. None only when the side to move has no legal move."""
        self._ensure_idle()
        searcher = self.searcher(algorithm)
        self._active = searcher
        return searcher.find_best_move(context)

    def start_search(self, context: SearchContext,
                     algorithm: Optional[str] = None) -> Future:
        """Run the search on the background worker and return its Future."""
        self._ensure_idle()
        searcher = self.searcher(algorithm)
        searcher.clear_stop()
        self._active = searcher
        self._pending = self._executor.submit(searcher.run, context)
        return self._pending

    def is_searching(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def _ensure_idle(self):
        if self.is_searching():
            raise RuntimeError("A background search is still running; stop it or wait for its result")

    def stop(self):
        if self._active:
            self._active.stop()

    def shutdown(self):
        self.stop()
        self._executor.shutdown(wait=True)

    def fingerprint(self, board: chess.Board, aux: AuxState) -> int:
        return zobrist_hash(board, aux, self.keys)

    def new_game(self, fen: Optional[str] = None,
                 white_handicap: int = HandicapId.NONE,
                 black_handicap: int = HandicapId.NONE) -> GameState:
        return GameState(self.registry, self.keys, fen, white_handicap, black_handicap)

    def context_for(self, state: GameState, seed: Optional[int] = None) -> SearchContext:
        return SearchContext.from_game_state(state, self.config.search, seed)
