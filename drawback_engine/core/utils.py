def format_search_info(algorithm, iterations, elapsed_ms, best_move, score=None, nodes=None):
    move_str = best_move.uci() if best_move else "-"
    ips = int(iterations * 1000 / elapsed_ms) if elapsed_ms > 0 else 0
    parts = [f"info algo {algorithm} iterations {iterations} ips {ips} time {int(elapsed_ms)}"]
    if nodes is not None:
        parts.append(f"nodes {nodes}")
    if score is not None:
        parts.append(f"score {score:.3f}" if isinstance(score, float) else f"score cp {score}")
    parts.append(f"bestmove {move_str}")
    return " ".join(parts)
