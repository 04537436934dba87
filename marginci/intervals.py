""" Simultaneous confidence intervals on multinomial vote shares. """
from typing import Dict, Mapping, NamedTuple, Union
import pandas as pd  # type: ignore
from statsmodels.stats.proportion import \
    multinomial_proportions_confint  # type: ignore
from marginci.common import bound, check_alpha
from marginci.errors import MalformedCounts

METHODS = ('goodman', 'sison-glaz')

Counts = Union[Mapping[str, float], pd.Series]


class ProbabilityInterval(NamedTuple):
    """ Bounds on one candidate's true share of the vote in one county. """
    low: float
    high: float


class MultinomialIntervalEstimator:
    """
    Computes simultaneous confidence intervals for the category
    probabilities of a multinomial distribution, treating each county's
    vote counts as one multinomial draw over the candidates.

    The intervals hold jointly at the chosen level, not candidate by
    candidate. Pairing one candidate's lower bound with another's upper
    bound is only conservative under joint coverage.
    """
    def __init__(self, method: str = 'goodman'):
        """
        :param method: The simultaneous-coverage procedure passed to
            ``statsmodels``. Options: ``goodman`` (Goodman, 1965) and
            ``sison-glaz`` (Sison and Glaz, 1995). Sison-Glaz is tighter
            for many categories but approximate for few.
        """
        if method not in METHODS:
            raise ValueError('Unknown interval method {!r}; expected one '
                             'of {}'.format(method, METHODS))
        self.method = method

    def estimate(self, counts: Counts,
                 alpha: float) -> Dict[str, ProbabilityInterval]:
        """
        Estimates a simultaneous confidence interval on each candidate's
        share of the vote from a single vector of counts.

        :param counts: A mapping from candidate to vote count. Negative
            counts are clamped to zero.
        :param alpha: The total significance level, in (0, 1). For example,
            0.05 gives 95% simultaneous coverage.

        Returns a dictionary mapping each candidate to a
        :class:`ProbabilityInterval` with ``0 <= low <= p <= high <= 1``,
        where ``p`` is the candidate's observed share.

        :raises MalformedCounts: if the counts are missing values or sum to
            zero, in which case no interval is defined.
        """
        alpha = check_alpha(alpha)
        counts = pd.Series(counts, dtype=float)
        if counts.isnull().any():
            raise MalformedCounts('Missing values in vote counts')
        counts = counts.clip(lower=0)
        total = counts.sum()
        if total <= 0:
            raise MalformedCounts('Cannot estimate shares from an all-zero '
                                  'vote count vector')

        confint = multinomial_proportions_confint(counts.values, alpha=alpha,
                                                  method=self.method)
        shares = counts.values / total
        intervals = {}
        for candidate, share, (low, high) in zip(counts.index, shares,
                                                  confint):
            # Rounding in the underlying procedure can leave the observed
            # share a hair outside its own interval.
            intervals[candidate] = ProbabilityInterval(
                float(bound(min(low, share), 0.0, 1.0)),
                float(bound(max(high, share), 0.0, 1.0)))
        return intervals

    def estimate_counties(
            self, counts: pd.DataFrame,
            alpha: float) -> Dict[str, Dict[str, ProbabilityInterval]]:
        """
        Runs :meth:`estimate` independently on every row of a county x
        candidate count table.

        Returns a dictionary mapping each county (in table order) to its
        candidate intervals.
        """
        alpha = check_alpha(alpha)
        return {county: self.estimate(row, alpha)
                for county, row in counts.iterrows()}

    def __repr__(self):
        return 'MultinomialIntervalEstimator(method={!r})'.format(self.method)
