""" Unit tests for marginci.builder. """
import pytest
import pandas as pd
from loguru import logger
from marginci.builder import CountyEstimateBuilder, Source, \
                             clamp_downward_revisions, differential_counts, \
                             estimates_frame
from marginci.errors import EmptySnapshotHistory, InvalidSignificanceLevel, \
                            MalformedCounts
from marginci.intervals import MultinomialIntervalEstimator
from marginci.snapshots import SnapshotRepository


@pytest.fixture
def builder():
    return CountyEstimateBuilder()


@pytest.fixture
def warnings_logged():
    """ Collects loguru warnings emitted during a test. """
    messages = []
    handler_id = logger.add(messages.append, level='WARNING',
                            format='{message}')
    yield messages
    logger.remove(handler_id)


def test_two_county_differential(builder, two_counties):
    # Adams gained A 50, B 30 between snapshots; 230 of 300 votes are in.
    estimates = builder.build(two_counties, 'GA', 0, -1, 0.05)
    adams = estimates['Adams']
    assert adams.source == Source.DIFFERENTIAL
    assert adams.remaining == 70
    expected = MultinomialIntervalEstimator().estimate({'A': 50, 'B': 30},
                                                       0.05)
    assert adams.intervals == expected
    low, high = adams.intervals['A']
    assert low < 0.625 < high
    assert abs((low + high) / 2 - 0.625) < 0.02


def test_defaults_use_first_and_last_snapshots(builder, two_counties):
    assert builder.build(two_counties, 'GA') == \
        builder.build(two_counties, 'GA', 0, 1, 0.05)


def test_tiers(builder, three_tiers):
    estimates = builder.build(three_tiers, 'PA', 0, -1, 0.05)
    assert estimates['Centre'].source == Source.DIFFERENTIAL
    assert estimates['Dauphin'].source == Source.MAIL
    assert estimates['Erie'].source == Source.TOTAL
    assert 'Fulton' not in estimates


def test_differential_beats_mail(builder, three_tiers):
    # Centre has both a differential and mail-ballot counts.
    estimate = builder.build(three_tiers, 'PA')['Centre']
    differential = MultinomialIntervalEstimator().estimate(
        {'A': 60, 'B': 80}, 0.05)
    mail = MultinomialIntervalEstimator().estimate({'A': 40, 'B': 10}, 0.05)
    assert estimate.intervals == differential
    assert estimate.intervals != mail


def test_unchanged_county_falls_through(builder, three_tiers):
    # Dauphin didn't change between snapshots, so its differential is all
    # zero and its mail-ballot counts are used instead.
    estimate = builder.build(three_tiers, 'PA')['Dauphin']
    assert estimate.intervals == MultinomialIntervalEstimator().estimate(
        {'A': 70, 'B': 30}, 0.05)
    assert estimate.remaining == 400


def test_same_snapshot_has_no_differential(builder, two_counties):
    # Diffing a snapshot against itself leaves only full counts.
    estimates = builder.build(two_counties, 'GA', 1, 1, 0.05)
    assert {e.source for e in estimates.values()} == {Source.TOTAL}
    assert estimates['Adams'].intervals == \
        MultinomialIntervalEstimator().estimate({'A': 150, 'B': 80}, 0.05)


def test_reference_candidate_zero_filters_source(make_snapshot):
    # B gained votes in Adams but A did not: with A as the reference
    # candidate the differential is unusable there.
    repo_snapshots = [
        make_snapshot({'Adams': {'A': 100, 'B': 50}}, {'Adams': 300},
                      '2020-11-03 20:00'),
        make_snapshot({'Adams': {'A': 100, 'B': 90}}, {'Adams': 300},
                      '2020-11-03 21:00')
    ]
    repo = SnapshotRepository()
    for snap in repo_snapshots:
        repo.append('GA', snap)

    by_a = CountyEstimateBuilder().build(repo, 'GA')
    assert by_a['Adams'].source == Source.TOTAL
    by_b = CountyEstimateBuilder(reference_candidate='B').build(repo, 'GA')
    assert by_b['Adams'].source == Source.DIFFERENTIAL


def test_unknown_reference_candidate(two_counties):
    with pytest.raises(MalformedCounts):
        CountyEstimateBuilder(reference_candidate='Z').build(two_counties,
                                                             'GA')


def test_idempotent(builder, three_tiers):
    first = builder.build(three_tiers, 'PA', 0, -1, 0.05)
    second = builder.build(three_tiers, 'PA', 0, -1, 0.05)
    assert first == second
    assert list(first.keys()) == list(second.keys())


def test_sorted_by_county(builder, three_tiers):
    estimates = builder.build(three_tiers, 'PA')
    assert list(estimates.keys()) == ['Centre', 'Dauphin', 'Erie']


def test_invalid_alpha_before_lookup(builder):
    # The significance level is checked before any snapshot is read.
    with pytest.raises(InvalidSignificanceLevel):
        builder.build(SnapshotRepository(), 'GA', alpha=1.2)


def test_missing_history(builder, two_counties):
    with pytest.raises(EmptySnapshotHistory):
        builder.build(two_counties, 'AZ')
    with pytest.raises(EmptySnapshotHistory):
        builder.build(two_counties, 'GA', ref_index=5)


def test_clamp_downward_revisions(warnings_logged):
    differential = pd.DataFrame({'A': [10, -4], 'B': [3, 7]},
                                index=['Adams', 'Brown'])
    clamped = clamp_downward_revisions(differential)
    assert clamped.loc['Brown', 'A'] == 0
    assert clamped.loc['Adams', 'A'] == 10
    assert differential.loc['Brown', 'A'] == -4
    assert len(warnings_logged) == 1
    assert 'Brown' in str(warnings_logged[0])


def test_clamp_without_revisions(warnings_logged):
    differential = pd.DataFrame({'A': [10], 'B': [3]}, index=['Adams'])
    assert clamp_downward_revisions(differential).equals(differential)
    assert warnings_logged == []


def test_differential_counts(make_snapshot):
    reference = make_snapshot({'Adams': {'A': 100},
                               'Brown': {'A': 20}},
                              {'Adams': 300, 'Brown': 200},
                              '2020-11-03 20:00')
    current = make_snapshot({'Adams': {'A': 150, 'B': 80},
                             'Brown': {'A': 10, 'B': 40},
                             'Clark': {'A': 5, 'B': 5}},
                            {'Adams': 300, 'Brown': 200, 'Clark': 50},
                            '2020-11-03 21:00')
    diff = differential_counts(current, reference)
    # Clark has no reference counts; B had none in the reference snapshot.
    assert list(diff.index) == ['Adams', 'Brown']
    assert diff.loc['Adams'].to_dict() == {'A': 50, 'B': 80}
    assert diff.loc['Brown'].to_dict() == {'A': 0, 'B': 40}


def test_estimates_frame(builder, three_tiers):
    frame = estimates_frame(builder.build(three_tiers, 'PA'))
    assert list(frame.index) == ['Centre', 'Dauphin', 'Erie']
    assert list(frame.columns) == ['source', 'remaining', 'A_low', 'A_high',
                                   'B_low', 'B_high']
    assert frame.loc['Erie', 'source'] == 'total'
    assert frame.loc['Centre', 'remaining'] == 560


def test_estimates_frame_empty():
    frame = estimates_frame({})
    assert len(frame) == 0
    assert list(frame.columns) == ['source', 'remaining']
