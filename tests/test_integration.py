"""
Integration test suite for the Drawback chess engine.

Tests components working together end-to-end:
- Full games under handicaps (engine vs engine)
- Engine facade: algorithm dispatch, fingerprints
- Background search lifecycle (start / poll / stop)
- Self-play command line driver
- Config file driving the engine
"""

import random
import time

import chess
import pytest

from drawback_engine.config import Config, SearchConfig
from drawback_engine.core.handicaps import HandicapId
from drawback_engine.core.rules import filtered_legal_moves
from drawback_engine.main import Algorithm, Engine
from interface import cli


def fast_config(**search):
    search.setdefault("iteration_limit", 150)
    search.setdefault("time_limit_ms", 10_000)
    search.setdefault("depth_limit", 4)
    search.setdefault("quiescence_depth", 4)
    return Config(search=SearchConfig(**search))


@pytest.fixture
def engine():
    eng = Engine(fast_config())
    yield eng
    eng.shutdown()


def play(engine, state, algorithms, max_plies, rng):
    """Alternate algorithms per side until the game ends. Returns plies played."""
    plies = 0
    while plies < max_plies:
        state.begin_turn(rng)
        if state.is_game_over():
            break
        algorithm = algorithms[state.board.turn]
        ctx = engine.context_for(state, seed=rng.randrange(2 ** 32))
        move = engine.find_best_move(ctx, algorithm)
        assert move is not None
        assert move in state.legal_moves(), f"{algorithm} played {move} outside the filtered set"
        assert state.make_move(move.uci())
        plies += 1
    return plies


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE VS ENGINE, FULL GAMES
# ════════════════════════════════════════════════════════════════════════════


class TestFullGame:
    """Complete games under every handicap pairing must stay inside the rules."""

    @pytest.mark.parametrize("white,black", [
        (HandicapId.NONE, HandicapId.NONE),
        (HandicapId.NO_CASTLING, HandicapId.PAWN_PUSH_ONE),
        (HandicapId.BLOCK_RANDOM_FILE, HandicapId.BLOCK_RANDOM_FILE),
    ])
    def test_random_game_completes(self, engine, white, black):
        state = engine.new_game(white_handicap=white, black_handicap=black)
        algorithms = {chess.WHITE: Algorithm.RANDOM, chess.BLACK: Algorithm.RANDOM}
        plies = play(engine, state, algorithms, 600, random.Random(int(white) * 10 + int(black)))
        assert plies > 0
        outcome = state.outcome()
        if outcome is not None:
            assert outcome.result() in ("1-0", "0-1", "1/2-1/2")

    def test_heuristic_vs_mcts(self, engine):
        state = engine.new_game(white_handicap=HandicapId.BLOCK_RANDOM_FILE,
                                black_handicap=HandicapId.NO_CASTLING)
        algorithms = {chess.WHITE: Algorithm.HEURISTIC, chess.BLACK: Algorithm.MCTS}
        plies = play(engine, state, algorithms, 16, random.Random(11))
        assert plies == 16 or state.is_game_over()
        assert len(state.move_history) == plies

    def test_heuristic_finishes_bare_king(self, engine):
        """Rook and king against a lone king reaches a result before the move-count draw."""
        state = engine.new_game(fen="4k3/8/8/8/8/8/R7/4K3 w - - 0 1")
        algorithms = {chess.WHITE: Algorithm.HEURISTIC, chess.BLACK: Algorithm.RANDOM}
        play(engine, state, algorithms, 200, random.Random(3))
        outcome = state.outcome()
        assert outcome is not None
        if outcome.termination == chess.Termination.VARIANT_WIN:
            assert outcome.winner == chess.WHITE

    def test_fingerprints_track_game(self, engine):
        state = engine.new_game(white_handicap=HandicapId.BLOCK_RANDOM_FILE)
        rng = random.Random(21)
        for _ in range(10):
            state.begin_turn(rng)
            assert engine.fingerprint(state.board, state.aux_state()) == state.zobrist_hash
            move = engine.find_best_move(engine.context_for(state, seed=1), Algorithm.RANDOM)
            state.make_move(move.uci())


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE FACADE
# ════════════════════════════════════════════════════════════════════════════


class TestEngineFacade:
    @pytest.mark.parametrize("algorithm", list(Algorithm))
    def test_every_algorithm_returns_filtered_move(self, engine, algorithm):
        state = engine.new_game(fen="r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1",
                                white_handicap=HandicapId.NO_CASTLING)
        move = engine.find_best_move(engine.context_for(state, seed=4), algorithm)
        assert move in filtered_legal_moves(state.board, state.current_rule())

    @pytest.mark.parametrize("algorithm", ["heuristic", "mcts", "random"])
    def test_no_moves_returns_none(self, engine, algorithm):
        state = engine.new_game(fen="rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1")
        assert engine.find_best_move(engine.context_for(state), algorithm) is None

    def test_default_algorithm_from_config(self):
        eng = Engine(fast_config(algorithm="heuristic"))
        try:
            assert eng.searcher() is eng.searchers[Algorithm.HEURISTIC]
        finally:
            eng.shutdown()

    def test_unknown_algorithm(self, engine):
        with pytest.raises(ValueError):
            engine.searcher("alphabeta")

    def test_start_position_scenario(self, engine):
        state = engine.new_game()
        ctx = engine.context_for(state)
        ctx = type(ctx)(board=ctx.board, turn=ctx.turn, depth_limit=4,
                        iteration_limit=1000, time_limit_ms=50)
        move = engine.find_best_move(ctx, Algorithm.MCTS)
        assert state.board.piece_type_at(move.from_square) in (chess.PAWN, chess.KNIGHT)

    def test_engines_agree_on_fingerprint(self):
        a, b = Engine(Config()), Engine(Config())
        try:
            board = chess.Board("r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3")
            state = a.new_game(fen=board.fen(), white_handicap=HandicapId.PAWN_PUSH_ONE)
            aux = state.aux_state()
            assert a.fingerprint(board, aux) == b.fingerprint(board, aux) == state.zobrist_hash
        finally:
            a.shutdown()
            b.shutdown()


# ════════════════════════════════════════════════════════════════════════════
#  BACKGROUND SEARCH LIFECYCLE
# ════════════════════════════════════════════════════════════════════════════


class TestBackgroundSearch:
    def test_future_completes(self, engine):
        state = engine.new_game()
        future = engine.start_search(engine.context_for(state, seed=2), Algorithm.MCTS)
        deadline = time.time() + 30
        while not future.done() and time.time() < deadline:
            time.sleep(0.01)
        assert future.done()
        assert future.result() in state.board.legal_moves

    def test_stop_returns_best_so_far(self):
        eng = Engine(fast_config(iteration_limit=10_000_000, time_limit_ms=60_000))
        try:
            state = eng.new_game()
            future = eng.start_search(eng.context_for(state), Algorithm.MCTS)
            time.sleep(0.1)
            start = time.time()
            eng.stop()
            move = future.result(timeout=10)
            assert time.time() - start < 10
            assert move in state.board.legal_moves
        finally:
            eng.shutdown()

    def test_stop_flag_reset_between_searches(self, engine):
        state = engine.new_game()
        engine.stop()
        future = engine.start_search(engine.context_for(state, seed=5), Algorithm.MCTS)
        future.result(timeout=30)
        assert engine.searchers[Algorithm.MCTS].iterations == 150

    def test_one_search_at_a_time(self):
        eng = Engine(fast_config(iteration_limit=10_000_000, time_limit_ms=60_000))
        try:
            state = eng.new_game()
            future = eng.start_search(eng.context_for(state), Algorithm.MCTS)
            assert eng.is_searching()
            with pytest.raises(RuntimeError):
                eng.find_best_move(eng.context_for(state), Algorithm.MCTS)
            with pytest.raises(RuntimeError):
                eng.start_search(eng.context_for(state), Algorithm.HEURISTIC)
            eng.stop()
            assert future.result(timeout=10) in state.board.legal_moves
            assert not eng.is_searching()
            assert eng.find_best_move(eng.context_for(state), Algorithm.RANDOM) in state.board.legal_moves
        finally:
            eng.shutdown()

    def test_blocking_search_after_stop(self, engine):
        state = engine.new_game()
        engine.find_best_move(engine.context_for(state), Algorithm.HEURISTIC)
        engine.stop()
        move = engine.find_best_move(engine.context_for(state), Algorithm.HEURISTIC)
        assert move in state.board.legal_moves


# ════════════════════════════════════════════════════════════════════════════
#  CLI
# ════════════════════════════════════════════════════════════════════════════


class TestCLI:
    def test_quiet_self_play(self, capsys):
        code = cli.main(["--algorithm", "random", "--max-moves", "6", "--seed", "3", "--quiet"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Final FEN:" in out
        assert "fingerprint" not in out

    def test_verbose_self_play_with_handicaps(self, capsys):
        code = cli.main(["--algorithm", "heuristic", "--max-moves", "4", "--seed", "1",
                         "--white-handicap", "3", "--black-handicap", "No Castling"])
        out = capsys.readouterr().out
        assert code == 0
        assert out.count("fingerprint") == 4
        assert "Stopped after 4 plies" in out

    def test_game_ends_on_king_capture(self, capsys):
        code = cli.main(["--algorithm", "heuristic", "--fen", "4k2R/8/8/8/8/8/8/4K3 w - - 0 1",
                         "--seed", "1", "--quiet"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Result: 1-0 (VARIANT_WIN) after 1 plies" in out

    def test_preset_and_overrides(self, capsys):
        code = cli.main(["--preset", "easy_ai", "--algorithm", "mcts", "--iterations", "30",
                         "--time-ms", "500", "--depth", "2", "--max-moves", "2", "--quiet"])
        assert code == 0
        assert "Final FEN:" in capsys.readouterr().out

    def test_parse_handicap(self):
        assert cli.parse_handicap(None) is None
        assert cli.parse_handicap("2") == HandicapId.PAWN_PUSH_ONE
        assert cli.parse_handicap("Random File Blocked") == HandicapId.BLOCK_RANDOM_FILE
        assert cli.parse_handicap("nonsense") == HandicapId.NONE

    def test_bad_arguments_exit(self):
        with pytest.raises(SystemExit):
            cli.main(["--algorithm", "minimax"])


# ════════════════════════════════════════════════════════════════════════════
#  CONFIG FILE → ENGINE
# ════════════════════════════════════════════════════════════════════════════


class TestConfigIntegration:
    def test_toml_drives_engine(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            "zobrist_seed = 7\n"
            "[search]\n"
            'algorithm = "random"\n'
            "iteration_limit = 20\n"
            "[heuristic]\n"
            "capture_multiplier = 5\n"
        )
        cfg = Config.load_from_toml(str(path))
        eng = Engine(cfg)
        try:
            assert eng.searcher() is eng.searchers[Algorithm.RANDOM]
            assert eng.searchers[Algorithm.HEURISTIC].cfg.capture_multiplier == 5
            default = Engine(Config())
            board = chess.Board()
            state = eng.new_game()
            assert eng.fingerprint(board, state.aux_state()) != default.fingerprint(board, state.aux_state())
            default.shutdown()
        finally:
            eng.shutdown()
