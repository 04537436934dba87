""" Shared fixtures for marginci tests. """
import pytest
import pandas as pd
from marginci import Snapshot, SnapshotRepository


def snapshot(votes, expected, timestamp, mail=None):
    """
    Builds a ``Snapshot`` from plain dicts:
        * votes: county -> candidate -> count
        * expected: county -> total expected votes
        * mail: (optional) county -> candidate -> mail-ballot count
    """
    mail_votes = None
    if mail is not None:
        mail_votes = pd.DataFrame.from_dict(mail, orient='index')
    return Snapshot(pd.DataFrame.from_dict(votes, orient='index'),
                    pd.Series(expected), timestamp, mail_votes)


@pytest.fixture
def make_snapshot():
    return snapshot


@pytest.fixture
def two_counties():
    """
    Returns a ``SnapshotRepository`` with two snapshots of the region 'GA':
        * Adams: A 100 -> 150, B 50 -> 80, 300 votes expected
        * Brown: A 20 -> 60, B 40 -> 70, 200 votes expected
    """
    repo = SnapshotRepository()
    repo.append('GA', snapshot({'Adams': {'A': 100, 'B': 50},
                                'Brown': {'A': 20, 'B': 40}},
                               {'Adams': 300, 'Brown': 200},
                               '2020-11-03 20:00'))
    repo.append('GA', snapshot({'Adams': {'A': 150, 'B': 80},
                                'Brown': {'A': 60, 'B': 70}},
                               {'Adams': 300, 'Brown': 200},
                               '2020-11-03 21:00'))
    return repo


@pytest.fixture
def three_tiers():
    """
    Returns a ``SnapshotRepository`` for the region 'PA' in which each
    county can only be served by one source:
        * Centre: votes changed between snapshots (differential)
        * Dauphin: no change, but mail-ballot counts exist (mail)
        * Erie: no change and no mail-ballot counts (total)
        * Fulton: no votes counted at all (omitted)
    Centre also has mail-ballot counts, which must lose to the differential.
    """
    repo = SnapshotRepository()
    expected = {'Centre': 1000, 'Dauphin': 800, 'Erie': 600, 'Fulton': 100}
    repo.append('PA', snapshot({'Centre': {'A': 200, 'B': 100},
                                'Dauphin': {'A': 150, 'B': 250},
                                'Erie': {'A': 90, 'B': 60},
                                'Fulton': {'A': 0, 'B': 0}},
                               expected, '2020-11-04 09:00'))
    repo.append('PA', snapshot({'Centre': {'A': 260, 'B': 180},
                                'Dauphin': {'A': 150, 'B': 250},
                                'Erie': {'A': 90, 'B': 60},
                                'Fulton': {'A': 0, 'B': 0}},
                               expected, '2020-11-04 12:00',
                               mail={'Centre': {'A': 40, 'B': 10},
                                     'Dauphin': {'A': 70, 'B': 30}}))
    return repo


@pytest.fixture
def one_sided():
    """
    Returns a ``SnapshotRepository`` for the region 'GA' in which only
    candidate A gained votes between snapshots:
        * Adams: A 100 -> 150, B 50 -> 50, 20000 votes expected
    The differential is (50, 0), so A's share interval reaches 1 and B's
    reaches 0.
    """
    repo = SnapshotRepository()
    repo.append('GA', snapshot({'Adams': {'A': 100, 'B': 50}},
                               {'Adams': 20000}, '2020-11-03 20:00'))
    repo.append('GA', snapshot({'Adams': {'A': 150, 'B': 50}},
                               {'Adams': 20000}, '2020-11-03 21:00'))
    return repo
