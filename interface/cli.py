"""Self-play driver: the engine plays both sides of a Drawback chess game.

    python -m interface.cli --white-handicap 1 --black-handicap "Random File Blocked" \
        --algorithm heuristic --max-moves 80 --seed 7
"""
import argparse
import copy
import logging
import random
from typing import List, Optional

from drawback_engine.config import CONFIG, PRESETS, configure_logging, preset
from drawback_engine.core.handicaps import HandicapId, resolve_handicap_id
from drawback_engine.main import Algorithm, Engine

logger = logging.getLogger(__name__)


def parse_handicap(value: Optional[str]) -> Optional[HandicapId]:
    if value is None:
        return None
    if value.isdigit():
        return resolve_handicap_id(index=int(value))
    return resolve_handicap_id(name=value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Drawback chess engine self-play")
    parser.add_argument("--preset", choices=sorted(PRESETS), help="Start from a named config preset")
    parser.add_argument("--algorithm", choices=[a.value for a in Algorithm],
                        help="Search algorithm for both sides")
    parser.add_argument("--white-handicap", help="Handicap index or name for White")
    parser.add_argument("--black-handicap", help="Handicap index or name for Black")
    parser.add_argument("--fen", help="Start from this position instead of the initial one")
    parser.add_argument("--max-moves", type=int, default=200, help="Stop after this many plies")
    parser.add_argument("--iterations", type=int, help="Iteration limit per move")
    parser.add_argument("--time-ms", type=int, help="Time limit per move in milliseconds")
    parser.add_argument("--depth", type=int, help="MCTS playout depth limit")
    parser.add_argument("--seed", type=int, help="Seed for turn outcomes and searches")
    parser.add_argument("--log-level", help="Logging level (defaults to the config value)")
    parser.add_argument("--quiet", action="store_true", help="Only print the final result")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    cfg = preset(args.preset) if args.preset else copy.deepcopy(CONFIG)
    if args.iterations is not None:
        cfg.search.iteration_limit = args.iterations
    if args.time_ms is not None:
        cfg.search.time_limit_ms = args.time_ms
    if args.depth is not None:
        cfg.search.depth_limit = args.depth
    configure_logging(args.log_level or cfg.log_level)

    white = parse_handicap(args.white_handicap)
    if white is None:
        white = resolve_handicap_id(cfg.white.handicap_name, cfg.white.handicap_index)
    black = parse_handicap(args.black_handicap)
    if black is None:
        black = resolve_handicap_id(cfg.black.handicap_name, cfg.black.handicap_index)

    engine = Engine(cfg)
    state = engine.new_game(args.fen, white, black)
    rng = random.Random(args.seed)
    logger.info("Self-play: white handicap %s, black handicap %s, algorithm %s",
                white.name, black.name, args.algorithm or cfg.search.algorithm)

    plies = 0
    try:
        while plies < args.max_moves:
            state.begin_turn(rng)
            if state.is_game_over():
                break

            seed = rng.randrange(2 ** 32) if args.seed is not None else None
            move = engine.find_best_move(engine.context_for(state, seed), args.algorithm)
            if move is None:
                break
            state.make_move(move.uci())
            plies += 1

            if not args.quiet:
                print(state.board)
                print(f"{plies}. {move.uci()}  fingerprint {state.zobrist_hash:016x}")
                print("----------------------------")
    finally:
        engine.shutdown()

    outcome = state.outcome()
    if outcome is None:
        print(f"Stopped after {plies} plies, no result")
    else:
        print(f"Result: {outcome.result()} ({outcome.termination.name}) after {plies} plies")
    print(f"Final FEN: {state.get_fen()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
