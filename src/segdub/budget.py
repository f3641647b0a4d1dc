"""
Cap the number of chunks a run processes.
"""

import logging
import math
from collections.abc import Sequence

from .config import DEFAULT_CHUNK_SECONDS, clamp_minutes
from .models import AudioChunk

logger = logging.getLogger("segdub")


def used_chunk_count(
    total_chunks: int, max_minutes: float, chunk_seconds: int = DEFAULT_CHUNK_SECONDS
) -> int:
    """Chunks that fit in the budget; with 60s chunks that is ceil(max_minutes)."""
    budget_chunks = math.ceil(clamp_minutes(max_minutes) * 60 / chunk_seconds)
    return min(total_chunks, budget_chunks)


def apply_budget(
    chunks: Sequence[AudioChunk],
    max_minutes: float,
    chunk_seconds: int = DEFAULT_CHUNK_SECONDS,
) -> tuple[list[AudioChunk], list[AudioChunk]]:
    """Return ``(used, dropped)``: the leading chunks within budget and the rest."""
    ordered = sorted(chunks, key=lambda c: c.index)
    n = used_chunk_count(len(ordered), max_minutes, chunk_seconds)
    used, dropped = ordered[:n], ordered[n:]
    if dropped:
        logger.info(
            f"Budget of {max_minutes:g} min: processing {len(used)} chunk(s), dropping {len(dropped)}"
        )
    return used, dropped
