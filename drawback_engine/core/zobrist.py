"""Zobrist fingerprints for Drawback chess positions.

A fingerprint XORs independent 64-bit keys for every feature of the state:

- one key per occupied (piece, square),
- a turn key when Black is to move,
- one key per castling right still held,
- an en-passant file key when a legal en-passant capture exists,
- a key for the side to move's handicap id,
- a key for the pending per-turn random outcome, or the dedicated
  "no outcome" key when none was drawn.

Keys come from a fixed seed so that separate processes (and machines) agree
on the fingerprint of identical states. Build them once with init_keys() and
pass the table around; it is never modified.

Usage:

    keys = init_keys()
    h = zobrist_hash(board, AuxState(HandicapId.NONE, None), keys)
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

import chess

from drawback_engine.config import ZOBRIST_SEED

MAX_HANDICAP_INDICES = 1024
MAX_RNG_OUTCOMES = 256
NO_OUTCOME_SLOT = MAX_RNG_OUTCOMES


@dataclass(frozen=True)
class AuxState:
    """Per-turn state hashed alongside the board, for the side to move."""
    handicap_id: int = 0
    rng_outcome: Optional[int] = None


@dataclass(frozen=True)
class ZobristKeys:
    pieces: Tuple[Tuple[int, ...], ...]   # [12][64], white P..K then black p..k
    turn: int
    castling: Tuple[int, ...]             # [WK, WQ, BK, BQ]
    en_passant: Tuple[int, ...]           # [8] by file
    handicaps: Tuple[int, ...]            # [MAX_HANDICAP_INDICES]
    rng_outcomes: Tuple[int, ...]         # [MAX_RNG_OUTCOMES + 1], last slot = no outcome


def init_keys(seed: int = ZOBRIST_SEED) -> ZobristKeys:
    """Generate the key table. Same seed, same table, on every run."""
    rng = random.Random(seed)

    def rand64() -> int:
        return rng.getrandbits(64)

    pieces = tuple(tuple(rand64() for _ in range(64)) for _ in range(12))
    turn = rand64()
    castling = tuple(rand64() for _ in range(4))
    en_passant = tuple(rand64() for _ in range(8))
    handicaps = tuple(rand64() for _ in range(MAX_HANDICAP_INDICES))
    rng_outcomes = tuple(rand64() for _ in range(MAX_RNG_OUTCOMES + 1))
    return ZobristKeys(pieces, turn, castling, en_passant, handicaps, rng_outcomes)


def piece_index(piece: chess.Piece) -> int:
    return (piece.piece_type - 1) + (0 if piece.color == chess.WHITE else 6)


def zobrist_hash(board: chess.Board, aux: AuxState, keys: ZobristKeys) -> int:
    h = 0
    # pieces
    for sq, piece in board.piece_map().items():
        h ^= keys.pieces[piece_index(piece)][sq]
    # side: xor when black to move (convention)
    if board.turn == chess.BLACK:
        h ^= keys.turn
    # castling rights, one key each
    if board.has_kingside_castling_rights(chess.WHITE):
        h ^= keys.castling[0]
    if board.has_queenside_castling_rights(chess.WHITE):
        h ^= keys.castling[1]
    if board.has_kingside_castling_rights(chess.BLACK):
        h ^= keys.castling[2]
    if board.has_queenside_castling_rights(chess.BLACK):
        h ^= keys.castling[3]
    # en-passant file, only when the capture is actually playable
    if board.ep_square is not None and board.has_legal_en_passant():
        h ^= keys.en_passant[chess.square_file(board.ep_square)]
    # handicap of the side to move
    h ^= keys.handicaps[int(aux.handicap_id) % MAX_HANDICAP_INDICES]
    # pending random outcome
    if aux.rng_outcome is None:
        h ^= keys.rng_outcomes[NO_OUTCOME_SLOT]
    else:
        h ^= keys.rng_outcomes[aux.rng_outcome % MAX_RNG_OUTCOMES]
    return h
