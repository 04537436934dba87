"""
Projecting per-county share intervals through the remaining vote to an
interval on the final margin between two candidates.
"""
from math import isnan, sqrt
from typing import Dict, Mapping, NamedTuple, Tuple
from scipy.stats import norm  # type: ignore
from marginci.builder import CountyEstimate
from marginci.common import check_alpha
from marginci.errors import MalformedCounts
from marginci.snapshots import Snapshot


class VoteInterval(NamedTuple):
    """ Bounds on a number of votes. """
    low: float
    high: float


class MarginInterval(NamedTuple):
    """
    Bounds on candidate A's final total minus candidate B's final total,
    and the counted differential they were projected from.
    """
    low: float
    high: float
    current_diff: float


def prediction_interval(remaining: int, p_low: float, p_high: float,
                        alpha: float) -> Tuple[float, float]:
    """
    Normal-approximation prediction interval on the number of ``remaining``
    votes that go to one candidate. The pessimistic bound is taken at the
    low end of the candidate's share interval and the optimistic bound at
    the high end:

        lo = n * p_low  + z * sqrt(n * p_low  * (1 - p_low))
        hi = n * p_high - z * sqrt(n * p_high * (1 - p_high))

    with ``z`` the standard normal quantile at ``alpha / 2`` (negative).

    Each end depends only on its own share bound. A bound of exactly 0 or 1
    has no binomial variance, so that end is simply ``n * p``: 0 or all of
    the remaining votes. With no remaining votes the county contributes
    (0, 0), and an undefined end contributes 0.
    """
    if remaining <= 0:
        return 0.0, 0.0
    z = norm.ppf(alpha / 2)
    return (_prediction_bound(remaining, p_low, z),
            _prediction_bound(remaining, p_high, -z))


def _prediction_bound(remaining: int, share: float, z: float) -> float:
    """ Returns ``n * p + z * sqrt(n * p * (1 - p))``, or 0 if undefined. """
    if isnan(share):
        return 0.0
    if share in (0.0, 1.0):
        return float(remaining * share)
    value = remaining * share + z * sqrt(remaining * share * (1 - share))
    return 0.0 if isnan(value) else value


def aggregate(county_estimates: Mapping[str, CountyEstimate],
              alpha: float) -> Dict[str, VoteInterval]:
    """
    Sums per-county prediction intervals into an interval on each
    candidate's share of all remaining votes in the region.

    :param county_estimates: Builder output, keyed by county.
    :param alpha: The significance level of the prediction intervals,
        in (0, 1).

    Returns a dictionary mapping each candidate to a :class:`VoteInterval`.
    """
    alpha = check_alpha(alpha)
    totals = {}  # type: Dict[str, Tuple[float, float]]
    for estimate in county_estimates.values():
        for candidate, (p_low, p_high) in estimate.intervals.items():
            low, high = prediction_interval(estimate.remaining, p_low,
                                            p_high, alpha)
            low_total, high_total = totals.get(candidate, (0.0, 0.0))
            totals[candidate] = (low_total + low, high_total + high)
    return {candidate: VoteInterval(low, high)
            for candidate, (low, high) in totals.items()}


def counted_difference(snapshot: Snapshot,
                       county_estimates: Mapping[str, CountyEstimate],
                       candidate_a: str, candidate_b: str) -> int:
    """
    Returns candidate A's counted votes minus candidate B's in ``snapshot``,
    over the counties that have an estimate.
    """
    votes = snapshot.votes
    for candidate in (candidate_a, candidate_b):
        if candidate not in votes.columns:
            raise MalformedCounts(
                'Unknown candidate {!r}'.format(candidate))
    votes = votes.loc[[c for c in county_estimates if c in votes.index]]
    return int(votes[candidate_a].sum() - votes[candidate_b].sum())


def final_margin(current_diff: float, remaining_a: Tuple[float, float],
                 remaining_b: Tuple[float, float]) -> MarginInterval:
    """
    Combines the counted differential with the remaining-vote intervals of
    two candidates. The low end pairs A's worst case with B's best case,
    and the high end the reverse.
    """
    a_low, a_high = remaining_a
    b_low, b_high = remaining_b
    return MarginInterval(low=current_diff + a_low - b_high,
                          high=current_diff + a_high - b_low,
                          current_diff=current_diff)
