# Directory: assignment/history.py
"""
Which past draws are excluded from this year's draw.
"""
from typing import List, Optional, Sequence

from models import HistoryRecord
from utils.logger import logger


def select_history_window(
    records: Sequence[HistoryRecord],
    lookback_years: Optional[int] = None,
    current_year: Optional[int] = None,
) -> List[HistoryRecord]:
    """
    Pick the history records whose pairs should be excluded.

    Looking back indefinitely eventually leaves no valid draw for a small
    group, so the window is chosen by the caller.

    Args:
        records: All known history records
        lookback_years: How many past years to exclude (None for all of them)
        current_year: Year being drawn; defaults to the year after the newest record

    Returns:
        List[HistoryRecord]: Records with `exclude_pairs` set inside the window,
        newest first
    """
    if lookback_years is not None and lookback_years < 0:
        raise ValueError(f"lookback_years must be non-negative, got {lookback_years}")

    excluding = [r for r in records if r.exclude_pairs]
    excluding.sort(key=lambda r: r.year, reverse=True)

    if lookback_years is None or not records:
        return excluding

    if current_year is None:
        current_year = max(r.year for r in records) + 1

    window = [r for r in excluding if 0 < current_year - r.year <= lookback_years]
    skipped = len(excluding) - len(window)
    if skipped:
        logger.info(
            f"Ignoring {skipped} history record(s) outside the {lookback_years}-year "
            f"window before {current_year}."
        )
    return window
