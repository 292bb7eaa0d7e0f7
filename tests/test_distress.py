from owner_resolution.models import (
    DistressInputs,
    FeedResults,
    LitigationSummary,
    RentStabilization,
    SpeculationListing,
    ViolationSummary,
)
from owner_resolution.scoring.distress import distress_inputs_from, distress_score, units_lost


def test_mixed_signals_total():
    inputs = DistressInputs(
        open_violations=12,
        hazardous_violations=4,
        open_litigation=1,
        harassment_finding=False,
        penalty_balance=500,
        on_watch_list=False,
        recent_complaints=20,
    )
    result = distress_score(inputs)
    assert result.total == 70
    assert result.signals == [
        "12 open HPD violations",
        "4 hazardous (Class C) violations",
        "1 open HPD lawsuits",
        "20 complaints in last 3 years",
    ]


def test_everything_fires_and_clamps():
    inputs = DistressInputs(
        open_violations=50,
        hazardous_violations=10,
        open_litigation=2,
        harassment_finding=True,
        penalty_balance=25_000,
        on_watch_list=True,
        regulated_units_baseline=100,
        regulated_units_latest=50,
        recent_complaints=40,
    )
    assert distress_score(inputs).total == 100


def test_no_signals():
    result = distress_score(DistressInputs())
    assert result.total == 0
    assert result.signals == []


def test_tiers_are_exclusive():
    assert distress_score(DistressInputs(open_violations=7)).total == 10
    assert distress_score(DistressInputs(open_violations=5)).total == 0
    assert distress_score(DistressInputs(penalty_balance=1_000)).total == 0
    mid = distress_score(DistressInputs(penalty_balance=5_000))
    assert (mid.total, mid.signals) == (10, ["$5,000 in ECB penalties"])
    high = distress_score(DistressInputs(penalty_balance=12_500.4))
    assert (high.total, high.signals) == (20, ["$12,500 in ECB penalties"])


def test_units_lost_threshold():
    assert units_lost(DistressInputs(regulated_units_baseline=100, regulated_units_latest=70))
    assert not units_lost(DistressInputs(regulated_units_baseline=100, regulated_units_latest=71))
    assert not units_lost(DistressInputs(regulated_units_baseline=100, regulated_units_latest=0))
    result = distress_score(DistressInputs(regulated_units_baseline=40, regulated_units_latest=20))
    assert result.signals == ["Lost 50% of rent-stabilized units"]


def test_inputs_from_feeds():
    feeds = FeedResults(
        violations=ViolationSummary(total=20, open=11, class_c=4),
        litigation=LitigationSummary(total=1, open=1),
        rent_stabilization=RentStabilization(unit_counts={2007: 0, 2008: 40, 2017: 20, 2018: 0}),
        speculation=SpeculationListing(),
    )
    inputs = distress_inputs_from(feeds)
    assert inputs.regulated_units_baseline == 40
    assert inputs.regulated_units_latest == 20
    assert inputs.on_watch_list
    assert distress_score(inputs).total == 20 + 15 + 25 + 15 + 10
    assert distress_score(distress_inputs_from(FeedResults())).total == 0
