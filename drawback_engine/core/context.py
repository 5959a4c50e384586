"""Immutable per-call input to the move searchers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import chess

from drawback_engine.config import SearchConfig
from drawback_engine.core.handicaps import HandicapId

if TYPE_CHECKING:
    from drawback_engine.core.board import GameState


@dataclass(frozen=True)
class SearchContext:
    board: chess.Board
    turn: chess.Color
    player_handicap: int = HandicapId.NONE
    opponent_handicap: int = HandicapId.NONE
    rng_outcome: Optional[int] = None  # the mover's per-turn random outcome, if drawn
    current_hash: int = 0
    depth_limit: int = 20
    quiescence_depth: int = 18
    check_quietness: bool = True
    iteration_limit: int = 1000
    time_limit_ms: int = 3000
    seed: Optional[int] = None

    @classmethod
    def from_game_state(cls, state: "GameState", cfg: SearchConfig,
                        seed: Optional[int] = None) -> "SearchContext":
        turn = state.board.turn
        return cls(
            board=state.board.copy(stack=False),
            turn=turn,
            player_handicap=state.handicap_for(turn),
            opponent_handicap=state.handicap_for(not turn),
            rng_outcome=state.rng_outcome,
            current_hash=state.zobrist_hash,
            depth_limit=cfg.depth_limit,
            quiescence_depth=cfg.quiescence_depth,
            check_quietness=cfg.check_quietness,
            iteration_limit=cfg.iteration_limit,
            time_limit_ms=cfg.time_limit_ms,
            seed=seed,
        )

    @property
    def time_limit_s(self) -> float:
        return self.time_limit_ms / 1000.0
