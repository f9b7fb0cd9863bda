# Directory: analysis/history_report.py
"""
Tables and summaries over past draws.
"""
from typing import List, Sequence

import pandas as pd

from models import HistoryRecord

HISTORY_COLUMNS = ["year", "giver", "receiver", "exclude_pairs"]


def history_frame(records: Sequence[HistoryRecord]) -> pd.DataFrame:
    """One row per past pair, in record order."""
    rows = [
        {
            "year": record.year,
            "giver": pair.giver,
            "receiver": pair.receiver,
            "exclude_pairs": record.exclude_pairs,
        }
        for record in records
        for pair in record.pairs
    ]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def receivers_for(giver: str, records: Sequence[HistoryRecord]) -> List[str]:
    """People this giver was secret santa for, as ``"Name (year)"``."""
    frame = history_frame(records)
    matches = frame[frame["giver"] == giver]
    return [f"{row.receiver} ({row.year})" for row in matches.itertuples(index=False)]


def givers_for(receiver: str, records: Sequence[HistoryRecord]) -> List[str]:
    """People who were secret santa for this receiver, as ``"Name (year)"``."""
    frame = history_frame(records)
    matches = frame[frame["receiver"] == receiver]
    return [f"{row.giver} ({row.year})" for row in matches.itertuples(index=False)]


def repeated_pairs(records: Sequence[HistoryRecord]) -> pd.DataFrame:
    """Pairs drawn in more than one year, with how often and when."""
    frame = history_frame(records)
    if frame.empty:
        return pd.DataFrame(columns=["giver", "receiver", "times", "years"])

    grouped = (
        frame.groupby(["giver", "receiver"])["year"]
        .agg(times="count", years=list)
        .reset_index()
    )
    grouped["years"] = grouped["years"].apply(sorted)
    repeated = grouped[grouped["times"] > 1]
    return repeated.sort_values(["times", "giver"], ascending=[False, True]).reset_index(
        drop=True
    )
