""" Confidence intervals on vote margins from partial county counts. """
from marginci.snapshots import Snapshot, SnapshotRepository
from marginci.intervals import MultinomialIntervalEstimator, \
                               ProbabilityInterval
from marginci.builder import CountyEstimate, CountyEstimateBuilder, Source, \
                             estimates_frame
from marginci.remaining import remaining, remaining_for_snapshot
from marginci.projection import MarginInterval, VoteInterval, aggregate, \
                                final_margin
from marginci.pipeline import Projection, project_margin, \
                              project_margin_from_config
from marginci.config import Config
from marginci.errors import MarginCIError, InvalidSignificanceLevel, \
                            EmptySnapshotHistory, MalformedCounts, ConfigError
