from liarsdice.services.games.registry import RoomRegistry
from liarsdice.services.games.scheduler import RoomScheduler


def _deferred(flask_app, sio):
    registry = RoomRegistry()
    return sio, registry, RoomScheduler(flask_app, sio, registry, inline=False)


def test_inline_in_testing_mode(flask_app, recording_sio):
    registry = RoomRegistry()
    scheduler = RoomScheduler(flask_app, recording_sio, registry)
    assert scheduler.inline
    room = registry.get_or_create('r')
    fired = []
    handle = scheduler.schedule(room, 'next_round', 0, fired.append)
    assert fired == [room]
    assert handle.fired
    assert room.timer is None


def test_deferred_callback_fires_after_delay(flask_app, recording_sio):
    sio, registry, scheduler = _deferred(flask_app, recording_sio)
    room = registry.get_or_create('r')
    fired = []
    scheduler.schedule(room, 'next_round', 3, fired.append)
    assert fired == []
    sio.run_pending()
    assert sio.slept == [3]
    assert fired == [room]


def test_cancelled_timer_does_not_fire(flask_app, recording_sio):
    sio, registry, scheduler = _deferred(flask_app, recording_sio)
    room = registry.get_or_create('r')
    fired = []
    handle = scheduler.schedule(room, 'next_round', 3, fired.append)
    scheduler.cancel(room)
    sio.run_pending()
    assert handle.cancelled
    assert fired == []


def test_new_schedule_supersedes_old(flask_app, recording_sio):
    sio, registry, scheduler = _deferred(flask_app, recording_sio)
    room = registry.get_or_create('r')
    fired = []
    first = scheduler.schedule(room, 'next_round', 3, lambda r: fired.append('first'))
    scheduler.schedule(room, 'lobby_reset', 3, lambda r: fired.append('second'))
    sio.run_pending()
    assert first.cancelled
    assert fired == ['second']


def test_callback_skipped_when_room_removed(flask_app, recording_sio):
    sio, registry, scheduler = _deferred(flask_app, recording_sio)
    room = registry.get_or_create('r')
    fired = []
    scheduler.schedule(room, 'next_round', 3, fired.append)
    registry.remove('r')
    sio.run_pending()
    assert fired == []
