from scrumpoker.services.rooms import DeferredActions, RoomJanitor


def test_action_fires_only_after_deadline(clock):
    fired = []
    deferred = DeferredActions(clock=clock)
    deferred.schedule('k', 30, lambda: fired.append('k'))

    clock.advance(29.9)
    assert deferred.run_due() == 0
    assert deferred.is_pending('k')

    clock.advance(0.2)
    assert deferred.run_due() == 1
    assert fired == ['k']
    assert not deferred.is_pending('k')


def test_cancelled_action_never_fires(clock):
    fired = []
    deferred = DeferredActions(clock=clock)
    deferred.schedule('k', 30, lambda: fired.append('k'))
    assert deferred.cancel('k') is True
    assert deferred.cancel('k') is False

    clock.advance(60)
    assert deferred.run_due() == 0
    assert fired == []


def test_firing_is_idempotent(clock):
    fired = []
    deferred = DeferredActions(clock=clock)
    token = deferred.schedule('k', 1, lambda: fired.append('k'))
    clock.advance(2)
    assert deferred.fire('k', token) is True
    assert deferred.fire('k', token) is False
    assert deferred.run_due() == 0
    assert fired == ['k']


def test_rescheduling_invalidates_previous_token(clock):
    fired = []
    deferred = DeferredActions(clock=clock)
    stale = deferred.schedule('k', 1, lambda: fired.append('first'))
    deferred.schedule('k', 10, lambda: fired.append('second'))
    clock.advance(2)
    assert deferred.fire('k', stale) is False
    clock.advance(10)
    deferred.run_due()
    assert fired == ['second']


def test_spawned_runner_sleeps_until_deadline(clock):
    fired = []
    spawned = []
    sleeps = []

    def sleep(seconds):
        sleeps.append(seconds)
        clock.advance(seconds)

    deferred = DeferredActions(clock=clock, spawn=lambda fn, *args: spawned.append((fn, args)), sleep=sleep)
    deferred.schedule('k', 5, lambda: fired.append('k'))
    assert len(spawned) == 1

    fn, args = spawned[0]
    fn(*args)
    assert sleeps == [5]
    assert fired == ['k']


def test_janitor_sweep_and_lifecycle(store, clock):
    store.create_or_get('OLD')
    clock.advance(100)
    spawned = []
    janitor = RoomJanitor(store, interval_sec=60, threshold_sec=50,
                          spawn=lambda fn, *args: spawned.append(fn))
    assert janitor.sweep() == 1
    assert not store.exists('OLD')

    janitor.start()
    janitor.start()
    assert janitor.running
    assert len(spawned) == 1
    janitor.stop()
    assert not janitor.running


def test_janitor_loop_stops_after_stop(store, clock):
    calls = []
    janitor = RoomJanitor(store, interval_sec=60, threshold_sec=50, spawn=lambda fn: None)

    def sleep(seconds):
        calls.append(seconds)
        if len(calls) == 2:
            janitor.stop()

    janitor.sleep = sleep
    janitor.start()
    janitor._loop()
    assert calls == [60, 60]


def test_stale_runner_cannot_fire_action_rescheduled_at_same_instant(clock):
    fired = []
    spawned = []
    deferred = DeferredActions(clock=clock, spawn=lambda fn, *args: spawned.append((fn, args)),
                               sleep=lambda seconds: None)
    deferred.schedule('k', 5, lambda: fired.append('first'))
    deferred.cancel('k')
    # Same clock reading, same delay: identical deadline
    deferred.schedule('k', 5, lambda: fired.append('second'))

    stale_fn, stale_args = spawned[0]
    clock.advance(5)
    stale_fn(*stale_args)
    assert fired == []
    assert deferred.is_pending('k')

    fresh_fn, fresh_args = spawned[1]
    fresh_fn(*fresh_args)
    assert fired == ['second']
