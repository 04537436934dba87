""" End-to-end margin projection for one region. """
from typing import Dict, NamedTuple, Optional
from loguru import logger
from marginci.builder import CountyEstimate, CountyEstimateBuilder
from marginci.common import check_alpha
from marginci.config import Config
from marginci.errors import ConfigError, MalformedCounts
from marginci.intervals import MultinomialIntervalEstimator
from marginci.projection import MarginInterval, VoteInterval, aggregate, \
                                counted_difference, final_margin
from marginci.snapshots import SnapshotRepository


class Projection(NamedTuple):
    """ Everything computed for one region in one projection run. """
    estimates: Dict[str, CountyEstimate]
    remaining_totals: Dict[str, VoteInterval]
    margin: MarginInterval


def project_margin(repository: SnapshotRepository, region: str,
                   candidate_a: str, candidate_b: str, alpha: float = 0.05,
                   ref_index: int = 0, cur_index: int = -1,
                   builder: Optional[CountyEstimateBuilder] = None
                   ) -> Projection:
    """
    Projects an interval on candidate A's final margin over candidate B
    in ``region``.

    :param repository: The snapshot histories to read from.
    :param region: The region to project.
    :param candidate_a: The candidate whose margin is projected.
    :param candidate_b: The candidate the margin is taken against.
    :param alpha: The significance level used both for the share
        intervals and for the remaining-vote prediction intervals.
    :param ref_index: The reference snapshot for the differential.
    :param cur_index: The current snapshot.
    :param builder: (optional) A preconfigured estimate builder.
    """
    alpha = check_alpha(alpha)
    current = repository.get(region, cur_index)
    for candidate in (candidate_a, candidate_b):
        if candidate not in current.candidates:
            raise MalformedCounts('Unknown candidate {!r} in region '
                                  '{!r}'.format(candidate, region))

    builder = builder or CountyEstimateBuilder()
    estimates = builder.build(repository, region, ref_index, cur_index,
                              alpha)
    totals = aggregate(estimates, alpha)
    no_votes = VoteInterval(0.0, 0.0)
    margin = final_margin(
        counted_difference(current, estimates, candidate_a, candidate_b),
        totals.get(candidate_a, no_votes), totals.get(candidate_b, no_votes))
    logger.debug(f"{region}: {candidate_a} - {candidate_b} margin in "
                 f"[{margin.low:.0f}, {margin.high:.0f}] "
                 f"(counted {margin.current_diff:.0f}, "
                 f"{len(estimates)} counties)")
    return Projection(estimates, totals, margin)


def project_margin_from_config(repository: SnapshotRepository, region: str,
                               config: Config) -> Projection:
    """
    Runs :func:`project_margin` with the candidates, indices, significance
    level and interval method taken from ``config``.
    """
    candidate_a, candidate_b = config.candidates
    if candidate_a is None or candidate_b is None:
        raise ConfigError('Both candidates.a and candidates.b must be set')
    builder = CountyEstimateBuilder(
        MultinomialIntervalEstimator(config.method),
        reference_candidate=config.reference_candidate)
    return project_margin(repository, region, candidate_a, candidate_b,
                          alpha=config.alpha, ref_index=config.ref_index,
                          cur_index=config.cur_index, builder=builder)
