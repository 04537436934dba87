"""
Per-county estimates built from the most informative vote counts available.
"""
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple
import pandas as pd  # type: ignore
from loguru import logger
from marginci.common import check_alpha
from marginci.errors import MalformedCounts
from marginci.intervals import MultinomialIntervalEstimator, \
                               ProbabilityInterval
from marginci.remaining import remaining_for_snapshot
from marginci.snapshots import Snapshot, SnapshotRepository


class Source(Enum):
    """ The vote counts a county's estimate was computed from. """
    DIFFERENTIAL = 'differential'
    MAIL = 'mail'
    TOTAL = 'total'


class CountyEstimate(NamedTuple):
    """
    A county's remaining votes and the simultaneous intervals on each
    candidate's share of them, tagged with the counts they came from.
    """
    source: Source
    remaining: int
    intervals: Dict[str, ProbabilityInterval]


def clamp_downward_revisions(differential: pd.DataFrame) -> pd.DataFrame:
    """
    Zeroes negative entries in a snapshot-to-snapshot differential.

    A count that goes down between snapshots is a correction to data already
    published, not a retracted vote, so it carries no information about the
    current trend. The correction itself is lost by clamping, so every
    clamped county is reported.
    """
    revised = (differential < 0).any(axis=1)
    if revised.any():
        logger.warning(f"Clamping downward revisions to zero in "
                       f"{int(revised.sum())} counties: "
                       f"{list(differential.index[revised])}")
    return differential.clip(lower=0)


def differential_counts(current: Snapshot,
                        reference: Snapshot) -> pd.DataFrame:
    """
    Returns the votes counted between ``reference`` and ``current`` in each
    county present in both, with downward revisions clamped to zero.
    Candidates missing from ``reference`` are treated as having had no
    votes there.
    """
    cur = current.votes
    ref = reference.votes.reindex(columns=cur.columns, fill_value=0)
    counties = cur.index.intersection(ref.index, sort=False)
    return clamp_downward_revisions(cur.loc[counties] - ref.loc[counties])


class CountyEstimateBuilder:
    """
    Builds one :class:`CountyEstimate` per county, choosing for each county
    the most informative vote counts available. In order of preference:

    1. the differential between the current and reference snapshots, which
       reflects the most recent trend;
    2. the current snapshot's mail-ballot-only counts, which reflect the
       skew of mail voters;
    3. the current snapshot's full counts.

    The choice is made county by county: each source is estimated over all
    the counties it can support, and a county takes its estimate from the
    first source that supports it.
    """
    def __init__(self, estimator: Optional[MultinomialIntervalEstimator] = None,
                 reference_candidate: Optional[str] = None):
        """
        :param estimator: The interval estimator to use. Defaults to
            Goodman's simultaneous intervals.
        :param reference_candidate: The candidate whose count decides
            whether a source can be used for a county: a source is unusable
            wherever this count is zero. Defaults to the first candidate
            column of the snapshot.
        """
        self.estimator = estimator or MultinomialIntervalEstimator()
        self.reference_candidate = reference_candidate

    def build(self, repository: SnapshotRepository, region: str,
              ref_index: int = 0, cur_index: int = -1,
              alpha: float = 0.05) -> Dict[str, CountyEstimate]:
        """
        :param repository: The snapshot histories to read from.
        :param region: The region whose counties are estimated.
        :param ref_index: The index of the reference snapshot the
            differential is taken against. Defaults to the earliest.
        :param cur_index: The index of the current snapshot. Defaults to
            the most recent.
        :param alpha: The simultaneous significance level, in (0, 1).

        Returns a dictionary mapping county names, in sorted order, to their
        estimates. Counties with no usable counts in any source are left
        out.
        """
        alpha = check_alpha(alpha)
        current = repository.get(region, cur_index)
        reference = repository.get(region, ref_index)
        remaining = remaining_for_snapshot(current)

        estimates = {}  # type: Dict[str, CountyEstimate]
        for source, counts in self._sources(current, reference):
            if counts is None:
                logger.debug(f"{region}: no {source.value} counts available")
                continue
            usable = self._usable(counts)
            added = 0
            for county, intervals in self.estimator.estimate_counties(
                    usable, alpha).items():
                if county in estimates:
                    continue
                estimates[county] = CountyEstimate(
                    source, int(remaining[county]), intervals)
                added += 1
            logger.debug(f"{region}: {added} of {len(usable)} usable "
                         f"counties taken from {source.value} counts")

        skipped = len(current.counties) - len(estimates)
        if skipped:
            logger.debug(f"{region}: {skipped} counties have no usable "
                         f"counts")
        return {county: estimates[county] for county in sorted(estimates)}

    def _sources(self, current: Snapshot, reference: Snapshot
                 ) -> List[Tuple[Source, Optional[pd.DataFrame]]]:
        """ Returns the candidate count tables, most preferred first. """
        return [
            (Source.DIFFERENTIAL, differential_counts(current, reference)),
            (Source.MAIL, current.mail_votes),
            (Source.TOTAL, current.votes)
        ]

    def _usable(self, counts: pd.DataFrame) -> pd.DataFrame:
        """
        Drops the counties a count table can't support: those where the
        reference candidate has no votes, and those with no votes at all.
        """
        if len(counts.columns) == 0:
            return counts.iloc[0:0]
        reference = self.reference_candidate
        if reference is None:
            reference = counts.columns[0]
        elif reference not in counts.columns:
            raise MalformedCounts(
                'Unknown reference candidate {!r}'.format(reference))
        keep = (counts[reference] > 0) & (counts.sum(axis=1) > 0)
        return counts[keep]


def estimates_frame(estimates: Dict[str, CountyEstimate]) -> pd.DataFrame:
    """
    Flattens builder output into a table with one row per county and
    columns ``source``, ``remaining``, and ``<candidate>_low`` /
    ``<candidate>_high`` for every candidate.
    """
    rows = []
    for county, estimate in estimates.items():
        row = {'county': county, 'source': estimate.source.value,
               'remaining': estimate.remaining}
        for candidate, (low, high) in estimate.intervals.items():
            row['{}_low'.format(candidate)] = low
            row['{}_high'.format(candidate)] = high
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=['source', 'remaining'],
                            index=pd.Index([], name='county'))
    return pd.DataFrame(rows).set_index('county')
