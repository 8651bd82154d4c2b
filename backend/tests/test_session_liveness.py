"""Tests for token rotation and scan freshness."""
from classlog.services.session_liveness_service import ScanError, ScanResult
from conftest import START_MS

def test_first_tick_is_immediate(controller, memory_store, scheduler):
    memory_store.add(1)

    handle = controller.start_session(1)

    assert handle.tick_count == 1
    assert handle.current_token == f'1_{START_MS}'
    assert memory_store.get_session(1).last_renewed_at == START_MS

def test_rotation_cadence_over_35_seconds(controller, memory_store, scheduler):
    memory_store.add(1)
    handle = controller.start_session(1)
    tokens = [handle.current_token]

    for _ in range(35):
        scheduler.advance(1)
        if handle.current_token != tokens[-1]:
            tokens.append(handle.current_token)

    assert handle.tick_count == 4
    assert len(set(tokens)) == 4
    assert [ts for _, ts in memory_store.writes] == [
        START_MS, START_MS + 10000, START_MS + 20000, START_MS + 30000
    ]

def test_countdown_restarts_after_each_tick(controller, memory_store, scheduler):
    memory_store.add(1)
    controller.start_session(1)

    scheduler.advance(10)

    assert len(scheduler.pending) == 1
    assert scheduler.pending[0].due_ms == START_MS + 20000

def test_sessions_rotate_independently(controller, memory_store, scheduler):
    memory_store.add(1)
    memory_store.add(2)
    first = controller.start_session(1)
    scheduler.advance(4)
    second = controller.start_session(2)

    scheduler.advance(10)

    assert first.tick_count == 2
    assert second.tick_count == 2
    assert memory_store.get_session(1).last_renewed_at == START_MS + 10000
    assert memory_store.get_session(2).last_renewed_at == START_MS + 14000

def test_start_session_reuses_running_handle(controller, memory_store):
    memory_store.add(1)

    handle = controller.start_session(1)

    assert controller.start_session(1) is handle
    assert controller.get_handle(1) is handle
    assert handle.tick_count == 1

def test_freshness_window_follows_every_rotation(controller, memory_store, scheduler):
    memory_store.add(1)
    controller.start_session(1)

    for _ in range(4):
        watermark = memory_store.get_session(1).last_renewed_at
        assert controller.validate_scan(1, watermark - 1001) == ScanResult.reject(ScanError.EXPIRED)
        assert controller.validate_scan(1, watermark - 1000).accepted
        assert controller.validate_scan(1, watermark).accepted
        scheduler.advance(10)

def test_token_from_previous_rotation_expires(controller, memory_store, scheduler):
    memory_store.add(1)
    handle = controller.start_session(1)
    old_timestamp = handle.issued_at

    assert controller.validate_scan(1, old_timestamp).accepted
    scheduler.advance(10)

    result = controller.validate_scan(1, old_timestamp)
    assert not result.accepted
    assert result.reason == ScanError.EXPIRED

def test_future_timestamp_is_accepted(controller, memory_store):
    memory_store.add(1, last_renewed_at=START_MS)

    assert controller.validate_scan(1, START_MS + 60000).accepted

def test_unknown_session_is_rejected(controller):
    result = controller.validate_scan(99, START_MS)

    assert result.reason == ScanError.UNKNOWN_SESSION
    assert result.message == 'Invalid or expired QR code session.'

def test_stopped_session_rejects_fresh_tokens(controller, memory_store, scheduler):
    memory_store.add(1)
    handle = controller.start_session(1)
    token_time = handle.issued_at

    controller.stop_session(handle)

    assert not handle.is_running
    assert controller.validate_scan(1, token_time).reason == ScanError.SESSION_INACTIVE
    assert controller.validate_scan(1, token_time + 5000).reason == ScanError.SESSION_INACTIVE

def test_stop_cancels_future_ticks(controller, memory_store, scheduler):
    memory_store.add(1)
    handle = controller.start_session(1)

    controller.stop_session(handle)
    scheduler.advance(60)

    assert handle.tick_count == 1
    assert len(memory_store.writes) == 1
    assert controller.get_handle(1) is None

def test_stop_is_idempotent(controller, memory_store):
    memory_store.add(1)
    handle = controller.start_session(1)

    controller.stop_session(handle)
    memory_store.add(1, active=True, last_renewed_at=START_MS)
    controller.stop_session(handle)

    # second stop did not touch the store
    assert memory_store.get_session(1).active

def test_failed_watermark_write_does_not_stop_rotation(controller, memory_store, scheduler, caplog):
    memory_store.add(1)
    memory_store.fail_writes = True

    handle = controller.start_session(1)
    scheduler.advance(10)

    assert handle.tick_count == 2
    assert handle.is_running
    assert 'Failed to persist watermark' in caplog.text

    memory_store.fail_writes = False
    scheduler.advance(10)

    assert memory_store.get_session(1).last_renewed_at == START_MS + 20000

def test_handle_to_dict(controller, memory_store):
    memory_store.add(3)

    data = controller.start_session(3).to_dict()

    assert data['token'] == f'3_{START_MS}'
    assert data['tick_count'] == 1
    assert data['interval_seconds'] == 10
    assert data['running'] is True
