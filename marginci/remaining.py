""" Counting the votes not yet reflected in a snapshot. """
import numpy as np  # type: ignore
import pandas as pd  # type: ignore
from marginci.snapshots import Snapshot


def remaining(total_expected: int, counted_so_far: int) -> int:
    """
    Returns the number of votes still to be counted in a county, never less
    than zero. Upstream expected totals are taken as authoritative even when
    they move between snapshots.
    """
    return int(max(0, total_expected - counted_so_far))


def remaining_for_snapshot(snapshot: Snapshot) -> pd.Series:
    """
    Applies :func:`remaining` to every county in ``snapshot``, where the
    votes counted so far are the county's full counts summed over all
    candidates.

    Returns an integer Series indexed by county.
    """
    counted = snapshot.votes.sum(axis=1)
    expected = snapshot.total_expected
    return pd.Series([remaining(expected[county], counted[county])
                      for county in counted.index],
                     index=counted.index, dtype=np.int64)
