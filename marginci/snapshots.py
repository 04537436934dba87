""" Point-in-time vote-count snapshots and per-region snapshot histories. """
from datetime import datetime
from typing import Dict, List, Optional, Union
import numpy as np  # type: ignore
import pandas as pd  # type: ignore
from loguru import logger
from marginci.errors import EmptySnapshotHistory, MalformedCounts

Timestamp = Union[datetime, pd.Timestamp, str]


class Snapshot:
    """
    A vote-count table for one region at one point in time. Rows are counties;
    columns are candidates. A snapshot may also carry mail-ballot-only counts
    for some or all of its counties, and always carries the total number of
    votes expected in each county.

    Snapshots are immutable: the constructor copies its inputs, the
    ``votes``, ``mail_votes`` and ``total_expected`` properties return copies,
    and ``timestamp`` is read-only.
    """
    def __init__(self, votes: pd.DataFrame, total_expected: pd.Series,
                 timestamp: Timestamp,
                 mail_votes: Optional[pd.DataFrame] = None):
        """
        :param votes: Counted votes so far, indexed by county name with one
            column per candidate.
        :param total_expected: The total number of votes expected in each
            county, indexed by county name. Counties missing here are
            treated as expecting no further votes.
        :param timestamp: When the upstream data was collected.
        :param mail_votes: (optional) Mail-ballot-only counts, indexed by
            county name. Every column must also be a column of ``votes``;
            candidates missing from the mail table count as zero.
        """
        self._votes = _check_counts(votes, 'votes')
        self._total_expected = _check_expected(total_expected,
                                               self._votes.index)
        self._mail_votes = None  # type: Optional[pd.DataFrame]
        if mail_votes is not None:
            unknown = set(mail_votes.columns) - set(self._votes.columns)
            if unknown:
                raise MalformedCounts(
                    'Mail-ballot counts for unknown candidates: {}'.format(
                        sorted(unknown)))
            unknown = set(mail_votes.index) - set(self._votes.index)
            if unknown:
                raise MalformedCounts(
                    'Mail-ballot counts for unknown counties: {}'.format(
                        sorted(unknown)))
            mail_votes = mail_votes.reindex(columns=self._votes.columns,
                                            fill_value=0)
            self._mail_votes = _check_counts(mail_votes, 'mail_votes')
        self._timestamp = pd.Timestamp(timestamp)

    @property
    def timestamp(self) -> pd.Timestamp:
        """ When the upstream data was collected. """
        return self._timestamp

    @property
    def votes(self) -> pd.DataFrame:
        """ The full vote counts (county x candidate). """
        return self._votes.copy()

    @property
    def mail_votes(self) -> Optional[pd.DataFrame]:
        """ The mail-ballot-only counts, or ``None`` if none were supplied. """
        if self._mail_votes is None:
            return None
        return self._mail_votes.copy()

    @property
    def total_expected(self) -> pd.Series:
        """ The total number of votes expected in each county. """
        return self._total_expected.copy()

    @property
    def candidates(self) -> List[str]:
        return list(self._votes.columns)

    @property
    def counties(self) -> List[str]:
        return list(self._votes.index)

    def __repr__(self):
        return ('Snapshot at {} with {} counties and {} candidates'
                ' (mail counts: {})').format(
                    self._timestamp, len(self._votes.index),
                    len(self._votes.columns),
                    'yes' if self._mail_votes is not None else 'no')


class SnapshotRepository:
    """
    Ordered snapshot histories, one per region. Snapshots are addressed by
    integer index in collection order; negative indices count back from the
    most recent snapshot, as with Python lists.
    """
    def __init__(self):
        self._history = {}  # type: Dict[str, List[Snapshot]]

    def append(self, region: str, snapshot: Snapshot) -> bool:
        """
        Appends ``snapshot`` to ``region``'s history. A snapshot whose
        timestamp matches the region's most recent snapshot is a repeat of
        data already held and is not appended.

        Returns ``True`` if the snapshot was appended, ``False`` otherwise.
        """
        history = self._history.setdefault(region, [])
        if history and history[-1].timestamp == snapshot.timestamp:
            logger.debug(f"Skipping repeat snapshot for {region} "
                         f"at {snapshot.timestamp}")
            return False
        history.append(snapshot)
        logger.debug(f"Stored snapshot {len(history) - 1} for {region} "
                     f"at {snapshot.timestamp}")
        return True

    def get(self, region: str, index: int = -1) -> Snapshot:
        """
        Returns ``region``'s snapshot at ``index``.

        :raises EmptySnapshotHistory: if the region has no snapshots or
            ``index`` is out of range.
        """
        history = self._history.get(region)
        if not history:
            raise EmptySnapshotHistory(
                'No snapshots for region {!r}'.format(region))
        if not -len(history) <= index < len(history):
            raise EmptySnapshotHistory(
                'Region {!r} has {} snapshots; index {} is out of '
                'range'.format(region, len(history), index))
        return history[index]

    def count(self, region: str) -> int:
        """ Returns the number of snapshots held for ``region``. """
        return len(self._history.get(region, []))

    @property
    def regions(self) -> List[str]:
        return sorted(self._history)

    def __contains__(self, region: str) -> bool:
        return bool(self._history.get(region))


def _check_counts(counts: pd.DataFrame, name: str) -> pd.DataFrame:
    """
    Validates a county x candidate count table and returns an integer copy.
    Counts must be finite, non-negative and whole.
    """
    if counts.index.has_duplicates:
        raise MalformedCounts('Duplicate counties in {}'.format(name))
    if counts.columns.has_duplicates:
        raise MalformedCounts('Duplicate candidates in {}'.format(name))
    try:
        values = counts.astype(float)
    except (TypeError, ValueError):
        raise MalformedCounts('Non-numeric counts in {}'.format(name))
    if not np.isfinite(values.values).all():
        raise MalformedCounts('Missing or infinite counts in {}'.format(name))
    if (values.values < 0).any():
        raise MalformedCounts('Negative counts in {}'.format(name))
    if (values.values != np.floor(values.values)).any():
        raise MalformedCounts('Fractional counts in {}'.format(name))
    return values.astype(np.int64)


def _check_expected(total_expected: pd.Series,
                    counties: pd.Index) -> pd.Series:
    """
    Validates expected vote totals and aligns them to ``counties``.
    Counties without a figure expect zero votes.
    """
    if total_expected.index.has_duplicates:
        raise MalformedCounts('Duplicate counties in total_expected')
    try:
        expected = total_expected.astype(float)
    except (TypeError, ValueError):
        raise MalformedCounts('Non-numeric expected vote totals')
    expected = expected.reindex(counties).fillna(0)
    if not np.isfinite(expected.values).all():
        raise MalformedCounts('Infinite expected vote totals')
    if (expected.values < 0).any():
        raise MalformedCounts('Negative expected vote totals')
    return expected.round().astype(np.int64)
