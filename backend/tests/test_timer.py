import logging

from gomoku.services.games.timer import TurnTimer


class _Recorder:
    def __init__(self):
        self.ticks = []
        self.expired = 0

    def on_tick(self, remaining):
        self.ticks.append(remaining)

    def on_expire(self):
        self.expired += 1


def test_restart_emits_fresh_value_immediately():
    rec = _Recorder()
    timer = TurnTimer(rec.on_tick, rec.on_expire, duration=60)
    timer.restart()
    assert rec.ticks == [60]
    assert timer.active
    assert timer.remaining == 60


def test_ticks_count_down_and_expire_once():
    rec = _Recorder()
    timer = TurnTimer(rec.on_tick, rec.on_expire, duration=3)
    timer.restart()
    for _ in range(3):
        assert timer.tick()
    assert rec.ticks == [3, 2, 1, 0]
    assert rec.expired == 1
    assert not timer.active
    # A cancelled timer emits nothing further
    assert timer.tick() is False
    assert rec.ticks == [3, 2, 1, 0]


def test_cancel_stops_ticks():
    rec = _Recorder()
    timer = TurnTimer(rec.on_tick, rec.on_expire, duration=5)
    timer.restart()
    timer.tick()
    timer.cancel()
    assert timer.tick() is False
    assert rec.ticks == [5, 4]
    assert rec.expired == 0


def test_restart_resets_remaining_and_supersedes_generation():
    rec = _Recorder()
    timer = TurnTimer(rec.on_tick, rec.on_expire, duration=5)
    timer.restart()
    first = timer.generation
    timer.tick()
    timer.tick()
    timer.restart()
    assert timer.remaining == 5
    assert timer.generation > first
    assert rec.ticks == [5, 4, 3, 5]


def test_background_worker_stops_when_superseded():
    rec = _Recorder()
    started = []
    timer = TurnTimer(
        rec.on_tick,
        rec.on_expire,
        duration=10,
        start_task=lambda fn, gen: started.append((fn, gen)),
        sleep=lambda seconds: None,
    )
    timer.restart()
    timer.restart()
    assert len(started) == 2
    stale_worker, stale_gen = started[0]
    # The first loop wakes up, sees a newer countdown and exits without ticking
    stale_worker(stale_gen)
    assert rec.ticks == [10, 10]


def test_background_worker_ticks_until_expiry():
    rec = _Recorder()
    started = []
    timer = TurnTimer(
        rec.on_tick,
        rec.on_expire,
        duration=3,
        start_task=lambda fn, gen: started.append((fn, gen)),
        sleep=lambda seconds: None,
    )
    timer.restart()
    worker, gen = started[0]
    worker(gen)
    assert rec.ticks == [3, 2, 1, 0]
    assert rec.expired == 1


def test_heartbeat_logs_remaining_after_tick(caplog):
    caplog.set_level(logging.INFO, logger='gomoku.services.games.timer')
    rec = _Recorder()
    started = []
    timer = TurnTimer(
        rec.on_tick,
        rec.on_expire,
        duration=3,
        start_task=lambda fn, gen: started.append((fn, gen)),
        sleep=lambda seconds: None,
        heartbeat_sec=1,
        label='hb',
    )
    timer.restart()
    worker, gen = started[0]
    worker(gen)
    beats = [r.getMessage() for r in caplog.records if '[timer-heartbeat]' in r.getMessage()]
    assert [b.split('remaining=')[1] for b in beats] == ['2s', '1s']
