"""Shared fixtures: app, client, seeded rows and a virtual-clock scheduler."""
import json
from dataclasses import replace

import pytest

from classlog import create_app, db
from classlog.models.student import Student
from classlog.models.teacher import Teacher, TeacherGroup
from classlog.services.session_liveness_service import SessionLivenessController
from classlog.services.session_store import SessionSnapshot, SessionStore

START_MS = 1_700_000_000_000

class ManualTimer:
    def __init__(self, due_ms, callback):
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

class ManualScheduler:
    """Scheduler whose timers only fire when the test advances virtual time."""

    def __init__(self, start_ms=START_MS):
        self.now_ms = start_ms
        self.timers = []

    def clock(self):
        return self.now_ms

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now_ms + int(delay * 1000), callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds):
        target = self.now_ms + int(seconds * 1000)
        while True:
            due = [t for t in self.pending if t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due_ms)
            self.timers.remove(timer)
            self.now_ms = timer.due_ms
            timer.callback()
        self.now_ms = target

class InMemorySessionStore:
    """Dict-backed stand-in for the relational session store."""

    def __init__(self):
        self.sessions = {}
        self.writes = []
        self.fail_writes = False

    def add(self, session_id, active=True, last_renewed_at=0, group_name='G1', subject='DBMS'):
        self.sessions[str(session_id)] = SessionSnapshot(
            id=session_id, group_name=group_name, subject=subject,
            active=active, last_renewed_at=last_renewed_at,
        )

    def get_session(self, session_id):
        return self.sessions.get(str(session_id))

    def set_last_renewed_at(self, session_id, timestamp_ms):
        self.writes.append((session_id, timestamp_ms))
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        session = self.sessions[str(session_id)]
        if timestamp_ms > session.last_renewed_at:
            self.sessions[str(session_id)] = replace(session, last_renewed_at=timestamp_ms)

    def deactivate(self, session_id):
        session = self.sessions[str(session_id)]
        self.sessions[str(session_id)] = replace(session, active=False)

@pytest.fixture
def scheduler():
    return ManualScheduler()

@pytest.fixture
def memory_store():
    return InMemorySessionStore()

@pytest.fixture
def controller(memory_store, scheduler):
    """Controller over the in-memory store, driven by virtual time."""
    return SessionLivenessController(
        store=memory_store, scheduler=scheduler, clock=scheduler.clock
    )

@pytest.fixture
def app(scheduler):
    """Create test app with an in-memory database and virtual-time rotation."""
    app = create_app('testing')
    app.extensions['session_liveness'] = SessionLivenessController(
        store=SessionStore(), scheduler=scheduler, clock=scheduler.clock
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def liveness(app):
    return app.extensions['session_liveness']

@pytest.fixture
def teacher(app):
    teacher = Teacher(name='Test Teacher', email='teacher@example.com', department='CSE')
    teacher.set_password('teacher123')
    teacher.save()
    for subject in ('DBMS', 'OOSE'):
        TeacherGroup(teacher_id=teacher.id, group_name='G1', subject=subject).save()
    return teacher

@pytest.fixture
def students(app):
    rows = [
        ('Asha', 'CS001', 'G1', 'DBMS, FEE'),
        ('Ravi', 'CS002', 'G1', 'DBMS'),
        ('Zoya', 'CS101', 'G2', ''),
    ]
    created = []
    for name, roll_no, group_name, subjects in rows:
        student = Student(name=name, roll_no=roll_no, email=f'{roll_no.lower()}@example.com',
                          group_name=group_name, semester=3, subjects=subjects)
        student.set_password('student123')
        created.append(student.save())
    return created

def login(client, **credentials):
    response = client.post('/api/auth/login', json=credentials)
    assert response.status_code == 200, response.data
    token = json.loads(response.data)['data']['access_token']
    return {'Authorization': f'Bearer {token}'}

@pytest.fixture
def teacher_headers(client, teacher):
    return login(client, user_type='teacher', email='teacher@example.com', password='teacher123')

@pytest.fixture
def student_headers(client, students):
    return login(client, user_type='student', id='CS001', password='student123')
