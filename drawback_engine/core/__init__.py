"""Core engine components: handicaps, evaluator, searchers, zobrist keys and game state."""

from .board import GameState
from .context import SearchContext
from .evaluator import Evaluator
from .handicaps import HandicapId, HandicapRegistry, HandicapRule, build_registry
from .mcts import MCTSSearch
from .search import HeuristicSearch, RandomSearch
from .zobrist import AuxState, ZobristKeys, init_keys, zobrist_hash
