from __future__ import annotations

from typing import Iterable, Optional, Sequence

import pandas as pd


def to_frame(rows: Iterable[dict], *, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Build a DataFrame from flat report rows.

    Decimal amounts are kept as objects so the formatter decides how to round.
    """

    rows = list(rows)
    if columns is None and rows:
        columns = list(rows[0].keys())
    return pd.DataFrame(rows, columns=list(columns) if columns else None)
