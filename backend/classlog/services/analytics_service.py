"""Per-subject attendance statistics and 75% projections."""
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional

ATTENDED_STATUSES = ('present', 'late')
NO_SUBJECTS_PLACEHOLDER = 'No subjects assigned'

@dataclass(frozen=True)
class AttendanceEvent:
    """Attendance fact as seen by the analytics engine."""
    student_id: int
    session_id: int
    status: str

    @property
    def attended(self) -> bool:
        return self.status in ATTENDED_STATUSES

@dataclass(frozen=True)
class SubjectAttendanceSummary:
    subject: str
    total_sessions: int
    attended_sessions: int
    percentage: int
    classes_needed_for_75: int
    classes_can_skip: int

    @property
    def below_threshold(self) -> bool:
        return self.percentage < 75

    def to_dict(self) -> dict:
        data = asdict(self)
        data['below_threshold'] = self.below_threshold
        return data

def rounded_percentage(part: int, whole: int) -> int:
    """100 * part / whole rounded half up, 0 when whole is 0."""
    if whole <= 0:
        return 0
    # integer half-up rounding of 100 * part / whole
    return (200 * part + whole) // (2 * whole)

class AttendanceAnalyticsEngine:
    """
    Pure functions over attendance events and sessions.

    The projections assume every future session also counts toward the
    total, at a 75% threshold (3/4), in exact integer arithmetic:

    * needed: smallest X with (A + X) / (T + X) >= 3/4, i.e. X = 3T - 4A
    * can skip: largest Y with A / (T + Y) >= 3/4, i.e. Y = floor((4A - 3T) / 3)
    """

    THRESHOLD = 75

    @staticmethod
    def classes_needed(total: int, attended: int) -> int:
        """
        Consecutive classes to attend to reach 75%, counting each of them
        toward the total too (10 held, 6 attended needs 6, not 2).
        """
        return max(0, 3 * total - 4 * attended)

    @staticmethod
    def classes_can_skip(total: int, attended: int, percentage: int) -> int:
        if percentage < AttendanceAnalyticsEngine.THRESHOLD:
            return 0
        # rounding can lift 74.6% to 75, where the surplus is still negative
        return max(0, (4 * attended - 3 * total) // 3)

    @staticmethod
    def summarize(subject: str, total: int, attended: int) -> SubjectAttendanceSummary:
        """Build the summary for one subject from its counts."""
        percentage = rounded_percentage(attended, total)
        return SubjectAttendanceSummary(
            subject=subject,
            total_sessions=total,
            attended_sessions=attended,
            percentage=percentage,
            classes_needed_for_75=AttendanceAnalyticsEngine.classes_needed(total, attended),
            classes_can_skip=AttendanceAnalyticsEngine.classes_can_skip(total, attended, percentage),
        )

    @staticmethod
    def compute_subject_stats(
        student_id,
        events: Iterable[AttendanceEvent],
        sessions_by_subject: Dict[str, Iterable],
        declared_subjects: Optional[Iterable[str]] = None,
    ) -> List[SubjectAttendanceSummary]:
        """
        Summaries for every subject the student declared or that has a
        session for the student's group, sorted by subject name.

        sessions_by_subject maps a subject to the sessions (anything with
        an ``id``) held for the student's group.
        """
        session_ids_by_subject = {}
        for subject, sessions in sessions_by_subject.items():
            name = (subject or '').strip()
            if not name:
                continue
            session_ids_by_subject.setdefault(name, set()).update(s.id for s in sessions)

        subjects = {s.strip() for s in (declared_subjects or []) if s and s.strip()}
        subjects.update(session_ids_by_subject)

        if not subjects:
            return [AttendanceAnalyticsEngine.summarize(NO_SUBJECTS_PLACEHOLDER, 0, 0)]

        attended_ids = {
            e.session_id for e in events
            if e.student_id == student_id and e.attended
        }

        stats = []
        for subject in sorted(subjects):
            session_ids = session_ids_by_subject.get(subject, set())
            stats.append(AttendanceAnalyticsEngine.summarize(
                subject,
                total=len(session_ids),
                attended=len(session_ids & attended_ids),
            ))
        return stats

    @staticmethod
    def compute_overall_attendance(events: Iterable[AttendanceEvent]) -> int:
        """Share of events that count as attended, as a rounded percentage."""
        events = list(events)
        attended = sum(1 for e in events if e.attended)
        return rounded_percentage(attended, len(events))
