"""
Debounce scheduling.

Debouncer wraps cancel-and-reschedule timing (trailing edge, last write
wins) behind an explicit object so it can be flushed, cancelled and driven by
a fake timer in tests.
"""
from functools import partial
import logging
import threading

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Call `callback` once, `wait` seconds after the last schedule() call.

    Every schedule() cancels the pending call and replaces its arguments.
    `timer_factory(interval, function)` must return an object with start()
    and cancel(); threading.Timer is used by default.
    """

    def __init__(self, wait, callback, timer_factory=None):
        self.wait = wait
        self.callback = callback
        self.timer_factory = timer_factory or threading.Timer
        self._lock = threading.RLock()
        self._timer = None
        self._generation = 0
        self._args = ()
        self._kwargs = {}

    @property
    def pending(self):
        return self._timer is not None

    def schedule(self, *args, **kwargs):
        with self._lock:
            self._cancel_timer()
            self._args = args
            self._kwargs = kwargs
            self._generation += 1
            timer = self.timer_factory(self.wait, partial(self._fire, self._generation))
            if hasattr(timer, 'daemon'):
                timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self):
        """Drop the pending call, if any"""
        with self._lock:
            self._cancel_timer()
            self._args = ()
            self._kwargs = {}

    def flush(self):
        """Run the pending call now. Returns False when nothing was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._cancel_timer()
            args, kwargs = self._args, self._kwargs
            self._args = ()
            self._kwargs = {}
        self.callback(*args, **kwargs)
        return True

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation):
        with self._lock:
            # a timer cancelled after it started running must not fire
            if self._timer is None or generation != self._generation:
                return
            self._timer = None
            args, kwargs = self._args, self._kwargs
            self._args = ()
            self._kwargs = {}
        try:
            self.callback(*args, **kwargs)
        except Exception:
            logger.exception("Debounced callback failed")
