# drawback_engine/config.py
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import os
import tomllib  # python >=3.11

logger = logging.getLogger(__name__)

# Midgame / endgame base values (centipawns)
MATERIAL_MG = {
    "PAWN": 94,
    "KNIGHT": 337,
    "BISHOP": 365,
    "ROOK": 479,
    "QUEEN": 1025,
    "KING": 10000,
}

MATERIAL_EG = {
    "PAWN": 100,
    "KNIGHT": 281,
    "BISHOP": 297,
    "ROOK": 512,
    "QUEEN": 929,
    "KING": 10000,
}

# Static values used when scoring captures. The king is capturable in this variant.
CAPTURE_VALUES = {
    "PAWN": 120,
    "KNIGHT": 370,
    "BISHOP": 380,
    "ROOK": 550,
    "QUEEN": 1000,
    "KING": 20000,
}

ZOBRIST_SEED = 42664


@dataclass
class SearchConfig:
    algorithm: str = "mcts"  # "mcts", "heuristic" or "random"
    iteration_limit: int = 1_500_000
    time_limit_ms: int = 3000
    depth_limit: int = 20
    check_quietness: bool = True
    quiescence_depth: int = 18
    exploration: float = 1.4


@dataclass
class EvalConfig:
    material_mg: Dict[str, int] = field(default_factory=lambda: MATERIAL_MG.copy())
    material_eg: Dict[str, int] = field(default_factory=lambda: MATERIAL_EG.copy())
    phase_weights: Dict[str, int] = field(default_factory=lambda: {
        "PAWN": 0, "KNIGHT": 1, "BISHOP": 1, "ROOK": 2, "QUEEN": 4, "KING": 0
    })
    max_phase: int = 24
    # one side's non-king material at the start, used to squash material into [0, 1]
    material_normalizer: int = 4000


@dataclass
class HeuristicConfig:
    capture_values: Dict[str, int] = field(default_factory=lambda: CAPTURE_VALUES.copy())
    capture_multiplier: int = 3
    king_capture_bonus: int = 20000
    king_exposed_penalty: int = 15000
    piece_risk_factor: int = 1
    check_bonus: int = 70
    check_reply_weight: int = 30
    check_reply_baseline: int = 20
    escape_check_bonus: int = 500
    king_safety_weight: float = 1.0
    winning_score: int = 10000
    max_passes: int = 1


@dataclass
class PlayerConfig:
    is_ai: bool = False
    handicap_name: Optional[str] = None   # e.g. "No Castling"
    handicap_index: Optional[int] = None  # e.g. 1


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    heuristic: HeuristicConfig = field(default_factory=HeuristicConfig)
    white: PlayerConfig = field(default_factory=PlayerConfig)
    black: PlayerConfig = field(default_factory=lambda: PlayerConfig(is_ai=True))
    log_level: str = "INFO"
    zobrist_seed: int = ZOBRIST_SEED

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "heuristic", "white", "black"):
            if section in raw:
                target = getattr(cfg, section)
                for k, v in raw[section].items():
                    if not hasattr(target, k):
                        logger.warning("Unknown config key [%s].%s ignored", section, k)
                        continue
                    default = getattr(target, k)
                    if not _matches_default(default, v):
                        logger.warning("Bad value %r for [%s].%s, keeping %r", v, section, k, default)
                        continue
                    if isinstance(default, dict):
                        v = {**default, **v}
                    elif isinstance(default, float):
                        v = float(v)
                    setattr(target, k, v)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        if "zobrist_seed" in raw:
            if _matches_default(cfg.zobrist_seed, raw["zobrist_seed"]):
                cfg.zobrist_seed = raw["zobrist_seed"]
            else:
                logger.warning("Bad value %r for zobrist_seed, keeping %r", raw["zobrist_seed"], cfg.zobrist_seed)
        return cfg


def _matches_default(default, value) -> bool:
    """True if value can replace default without changing its type."""
    if default is None:
        return True
    if isinstance(default, bool) or isinstance(value, bool):
        return isinstance(default, bool) and isinstance(value, bool)
    if isinstance(default, float):
        return isinstance(value, (int, float))
    if isinstance(default, dict):
        return isinstance(value, dict) and all(
            k in default and _matches_default(default[k], v) for k, v in value.items())
    return isinstance(value, type(default))


def _preset(white_ai: bool, black_ai: bool, iterations: int, time_ms: int,
            depth: int, quietness: bool, q_depth: int) -> Config:
    return Config(
        search=SearchConfig(
            iteration_limit=iterations,
            time_limit_ms=time_ms,
            depth_limit=depth,
            check_quietness=quietness,
            quiescence_depth=q_depth,
        ),
        white=PlayerConfig(is_ai=white_ai),
        black=PlayerConfig(is_ai=black_ai),
    )


PRESETS = {
    "human_vs_ai": lambda: _preset(False, True, 1_000_000, 3000, 18, True, 16),
    "ai_vs_human": lambda: _preset(True, False, 1_000_000, 3000, 18, True, 16),
    "max_power_ai": lambda: _preset(True, True, 10_000_000, 3000, 24, True, 20),
    "ai_vs_ai": lambda: _preset(True, True, 500_000, 2000, 12, True, 8),
    "easy_ai": lambda: _preset(False, True, 200_000, 1500, 8, False, 4),
    "strong_ai": lambda: _preset(False, True, 2_000_000, 5000, 24, True, 20),
    "smart_ai": lambda: _preset(False, True, 1_500_000, 3000, 20, True, 18),
}


def preset(name: str) -> Config:
    """Return a fresh copy of a named preset."""
    try:
        return PRESETS[name]()
    except KeyError:
        raise ValueError(f"Unknown preset: {name!r} (choose from {', '.join(PRESETS)})")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("ENGINE_CONFIG_TOML", "config.toml"))
# allow env overrides for quick debugging
try:
    override_depth = os.environ.get("ENGINE_SEARCH_DEPTH")
    if override_depth:
        CONFIG.search.depth_limit = int(override_depth)
    override_time = os.environ.get("ENGINE_TIME_LIMIT_MS")
    if override_time:
        CONFIG.search.time_limit_ms = int(override_time)
except ValueError:
    logger.warning("Ignoring malformed ENGINE_* environment override")
