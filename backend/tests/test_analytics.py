"""Tests for per-subject statistics and projections."""
from collections import namedtuple

import pytest

from classlog.services.analytics_service import (
    AttendanceAnalyticsEngine, AttendanceEvent, NO_SUBJECTS_PLACEHOLDER, rounded_percentage
)

Session = namedtuple('Session', 'id')

def sessions(*ids):
    return [Session(i) for i in ids]

def test_exactly_at_threshold():
    stat = AttendanceAnalyticsEngine.summarize('DBMS', total=20, attended=15)

    assert stat.percentage == 75
    assert stat.classes_needed_for_75 == 0
    assert stat.classes_can_skip == 0
    assert not stat.below_threshold

def test_below_threshold_projection():
    stat = AttendanceAnalyticsEngine.summarize('DBMS', total=10, attended=6)

    assert stat.percentage == 60
    assert stat.classes_needed_for_75 == 6
    assert stat.classes_can_skip == 0
    assert stat.below_threshold

def test_zero_sessions():
    stat = AttendanceAnalyticsEngine.summarize('DBMS', total=0, attended=0)

    assert (stat.percentage, stat.classes_needed_for_75, stat.classes_can_skip) == (0, 0, 0)

def test_above_threshold_can_skip():
    stat = AttendanceAnalyticsEngine.summarize('DBMS', total=12, attended=12)

    assert stat.percentage == 100
    # 12 / (12 + 4) == 0.75
    assert stat.classes_can_skip == 4
    assert stat.classes_needed_for_75 == 0

@pytest.mark.parametrize('total, attended', [(10, 6), (7, 3), (20, 14), (1, 0), (9, 5)])
def test_needed_classes_reach_threshold_exactly(total, attended):
    needed = AttendanceAnalyticsEngine.summarize('S', total, attended).classes_needed_for_75

    assert 4 * (attended + needed) >= 3 * (total + needed)
    if needed:
        assert 4 * (attended + needed - 1) < 3 * (total + needed - 1)

def test_rounded_up_to_threshold_never_gives_negative_skip():
    # 149 / 200 = 74.5% rounds to 75
    stat = AttendanceAnalyticsEngine.summarize('S', total=200, attended=149)

    assert stat.percentage == 75
    assert stat.classes_can_skip == 0
    assert stat.classes_needed_for_75 == 4

def test_rounded_percentage_half_up():
    assert rounded_percentage(1, 8) == 13
    assert rounded_percentage(1, 3) == 33
    assert rounded_percentage(2, 3) == 67
    assert rounded_percentage(5, 0) == 0

def test_compute_subject_stats_counts_present_and_late():
    events = [
        AttendanceEvent(1, 10, 'present'),
        AttendanceEvent(1, 11, 'late'),
        AttendanceEvent(1, 12, 'absent'),
        AttendanceEvent(2, 13, 'present'),
        AttendanceEvent(1, 20, 'present'),
    ]
    by_subject = {'DBMS': sessions(10, 11, 12, 13), 'OOSE': sessions(20)}

    stats = AttendanceAnalyticsEngine.compute_subject_stats(1, events, by_subject)

    assert [(s.subject, s.total_sessions, s.attended_sessions, s.percentage) for s in stats] == [
        ('DBMS', 4, 2, 50),
        ('OOSE', 1, 1, 100),
    ]

def test_declared_subject_without_sessions_gets_zero_row():
    stats = AttendanceAnalyticsEngine.compute_subject_stats(
        1, [], {'DBMS': sessions(1)}, declared_subjects=['FEE', ' DBMS ']
    )

    assert [s.subject for s in stats] == ['DBMS', 'FEE']
    fee = stats[1]
    assert (fee.total_sessions, fee.attended_sessions, fee.percentage) == (0, 0, 0)

def test_subject_inferred_from_group_sessions_is_included():
    stats = AttendanceAnalyticsEngine.compute_subject_stats(
        1, [AttendanceEvent(1, 5, 'present')], {'OOSE': sessions(5)}, declared_subjects=['DBMS']
    )

    assert [s.subject for s in stats] == ['DBMS', 'OOSE']
    assert stats[1].attended_sessions == 1

def test_no_subjects_gives_placeholder():
    stats = AttendanceAnalyticsEngine.compute_subject_stats(1, [], {}, declared_subjects=[])

    assert len(stats) == 1
    assert stats[0].subject == NO_SUBJECTS_PLACEHOLDER
    assert stats[0].total_sessions == 0

def test_compute_subject_stats_is_deterministic():
    events = [AttendanceEvent(1, 1, 'present')]
    by_subject = {'B': sessions(1), 'A': sessions(2)}

    first = AttendanceAnalyticsEngine.compute_subject_stats(1, events, by_subject)
    second = AttendanceAnalyticsEngine.compute_subject_stats(1, events, by_subject)

    assert first == second
    assert [s.subject for s in first] == ['A', 'B']

def test_overall_attendance():
    events = [
        AttendanceEvent(1, 1, 'present'),
        AttendanceEvent(1, 2, 'late'),
        AttendanceEvent(1, 3, 'absent'),
    ]

    assert AttendanceAnalyticsEngine.compute_overall_attendance(events) == 67
    assert AttendanceAnalyticsEngine.compute_overall_attendance([]) == 0

def test_summary_to_dict():
    data = AttendanceAnalyticsEngine.summarize('DBMS', 4, 3).to_dict()

    assert data == {
        'subject': 'DBMS',
        'total_sessions': 4,
        'attended_sessions': 3,
        'percentage': 75,
        'classes_needed_for_75': 0,
        'classes_can_skip': 0,
        'below_threshold': False,
    }
