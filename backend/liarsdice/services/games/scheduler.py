import time
from typing import Callable, Optional

from liarsdice.models import Room


class TimerHandle:
    """A single pending delayed transition for one room."""

    def __init__(self, room_name: str, label: str, delay: float):
        self.room_name = room_name
        self.label = label
        self.delay = delay
        self.deadline = time.time() + delay
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def __repr__(self):
        return f"TimerHandle(room={self.room_name!r}, label={self.label!r}, delay={self.delay})"


class RoomScheduler:
    """Run a callback once, after a delay, against a room that still exists.

    - Each room holds at most one pending handle; scheduling replaces it
    - Runs inline (synchronously) when ``inline`` is set, e.g. in TESTING mode
    - The callback runs inside an app context with the room lock held and
      is skipped if the handle was cancelled or the room is gone
    """

    def __init__(self, app, socketio, registry, inline: Optional[bool] = None):
        self.app = app
        self.socketio = socketio
        self.registry = registry
        if inline is None:
            inline = bool(app.config.get('TESTING')) and not app.config.get('ENABLE_SCHEDULER_IN_TESTS')
        self.inline = inline

    def schedule(self, room: Room, label: str, delay: float, callback: Callable[[Room], None]) -> TimerHandle:
        self.cancel(room)
        handle = TimerHandle(room.name, label, delay)
        room.timer = handle
        self.app.logger.info(f"[timer-set] room={room.name} label={label} delay={delay}s deadline={handle.deadline}")
        if self.inline:
            self._worker(handle, callback)
        else:
            self.socketio.start_background_task(self._worker, handle, callback)
        return handle

    def cancel(self, room: Room) -> None:
        handle = room.timer
        if handle is not None and handle.pending:
            handle.cancel()
            self.app.logger.info(f"[timer-cancel] room={room.name} label={handle.label}")
        room.timer = None

    def _worker(self, handle: TimerHandle, callback: Callable[[Room], None]) -> None:
        if handle.delay > 0 and not self.inline:
            self.socketio.sleep(handle.delay)
        with self.app.app_context():
            room = self.registry.get(handle.room_name)
            if room is None or handle.cancelled:
                self.app.logger.info(f"[timer-abort] room={handle.room_name} label={handle.label} cancelled={handle.cancelled}")
                return
            with room.lock:
                if handle.cancelled or room.timer is not handle:
                    self.app.logger.info(f"[timer-abort] room={handle.room_name} label={handle.label} superseded")
                    return
                handle.fired = True
                room.timer = None
                self.app.logger.info(f"[timer-fire] room={room.name} label={handle.label} phase={room.phase}")
                callback(room)
