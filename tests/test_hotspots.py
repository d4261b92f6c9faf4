from datetime import timedelta

import pytest

from core.domain import ReportCategory, to_iso
from core.geo import distance_m
from core.hotspots import cluster_reports, generate_hotspots
from helpers import NOW, make_report


def test_empty_input_gives_no_hotspots():
    assert generate_hotspots([], now=NOW) == []


def test_two_close_reports_form_one_hotspot():
    reports = [
        make_report("r1", 40.71280001, -74.00600002),
        make_report("r2", 40.71279999, -74.00599998, age=timedelta(hours=1)),
    ]
    hotspots = generate_hotspots(reports, radius_meters=200, now=NOW)
    assert len(hotspots) == 1
    h = hotspots[0]
    assert h.report_count == 2
    assert h.radius == 200
    expected = round(1.0 + 0.5 ** (1 / (7 * 24)), 3)
    assert h.risk_score == pytest.approx(expected)
    assert 1.95 < h.risk_score < 2.0
    assert h.last_report_timestamp == to_iso(NOW)
    assert h.center.latitude == pytest.approx(40.7128)
    assert h.center.longitude == pytest.approx(-74.006)


def test_partition_and_seed_distance_bound():
    reports = [
        make_report("a", 48.5000, 32.2500),
        make_report("b", 48.5010, 32.2500),
        make_report("c", 48.5100, 32.2600),
        make_report("d", 48.5005, 32.2505),
        make_report("e", 48.5101, 32.2601),
        make_report("f", 49.0000, 33.0000),
    ]
    clusters = cluster_reports(reports, radius_meters=200)
    ids = [r.id for cl in clusters for r in cl]
    assert sorted(ids) == sorted(r.id for r in reports)
    assert len(ids) == len(set(ids))
    for cl in clusters:
        seed = cl[0]
        assert all(distance_m(seed.location, r.location) <= 200 for r in cl)

    hotspots = generate_hotspots(reports, radius_meters=200, now=NOW)
    assert sum(h.report_count for h in hotspots) == len(reports)


def test_no_chaining_and_order_dependence():
    # ~150 m apart along a meridian, radius 200 m
    a = make_report("a", 0.0, 0.0)
    b = make_report("b", 0.00135, 0.0)
    c = make_report("c", 0.0027, 0.0)

    sizes = [len(cl) for cl in cluster_reports([a, b, c], radius_meters=200)]
    assert sizes == [2, 1]

    sizes = [len(cl) for cl in cluster_reports([b, a, c], radius_meters=200)]
    assert sizes == [3]


def test_decay_at_age_zero_and_half_life():
    fresh = generate_hotspots([make_report("a", 1.0, 1.0)], now=NOW)[0]
    assert fresh.risk_score == 1.0

    store = generate_hotspots(
        [make_report("s", 1.0, 1.0, category=ReportCategory.STORE_POS, confidence=0.5)], now=NOW
    )[0]
    assert store.risk_score == pytest.approx(0.4)

    week_old = generate_hotspots([make_report("w", 1.0, 1.0, age=timedelta(days=7))], now=NOW)[0]
    assert week_old.risk_score == pytest.approx(0.5)

    custom = generate_hotspots(
        [make_report("w", 1.0, 1.0, age=timedelta(days=2))], half_life_days=2, now=NOW
    )[0]
    assert custom.risk_score == pytest.approx(0.5)


def test_decay_is_strictly_decreasing_with_age():
    scores = [
        generate_hotspots([make_report("a", 1.0, 1.0, age=timedelta(days=d))], now=NOW)[0].risk_score
        for d in (0, 1, 3, 10, 30)
    ]
    assert all(x > y for x, y in zip(scores, scores[1:]))


def test_sorted_by_risk_with_stable_ties():
    reports = [
        make_report("low", 10.0, 10.0, category=ReportCategory.STORE_POS),
        make_report("tie1", 20.0, 20.0),
        make_report("tie2", 30.0, 30.0),
        make_report("high1", 40.0, 40.0),
        make_report("high2", 40.0001, 40.0001),
    ]
    hotspots = generate_hotspots(reports, now=NOW)
    assert [h.id for h in hotspots] == ["hs-high1", "hs-tie1", "hs-tie2", "hs-low"]
    assert hotspots[0].last_report_timestamp == to_iso(NOW)


def test_same_snapshot_gives_same_hotspots():
    reports = [make_report("a", 1.0, 1.0), make_report("b", 1.0005, 1.0, age=timedelta(days=3))]
    assert generate_hotspots(reports, now=NOW) == generate_hotspots(reports, now=NOW)
