"""
Theme studio editor state.

ThemeEditor keeps three things apart:

- the draft, edited in place and pushed live into the ThemeContext;
- the history, full snapshots of the draft, one per burst of edits;
- the baseline, the last mapping known to be stored on the backend.

The dirty set is never stored; it is the diff between draft and baseline.
Debounced history pushes and the auto-clearing "saved" indicator run on
timers, so every state change is done under one lock.
"""
import logging
import threading

from .context import ThemeContext
from .exceptions import GatewayError
from .history import DraftHistory
from .presets import Preset, get_preset, merge_preset
from .scheduler import Debouncer
from .tokens import DEFAULT_THEME, dirty_keys, merge_settings

logger = logging.getLogger(__name__)

HISTORY_DEBOUNCE_SECONDS = 0.5
SAVED_FEEDBACK_SECONDS = 3


class ThemeEditor:
    IDLE = 'idle'
    SAVING = 'saving'
    SAVED = 'saved'
    ERROR = 'error'

    def __init__(self, gateway, context=None, origin='', debounce_wait=HISTORY_DEBOUNCE_SECONDS,
                 timer_factory=None, feedback_seconds=SAVED_FEEDBACK_SECONDS):
        self.gateway = gateway
        self.context = context if context is not None else ThemeContext(origin)
        self.draft = dict(self.context.theme)
        self.baseline = dict(self.draft)
        self.history = DraftHistory(self.draft)
        self.status = self.IDLE
        self.message = ''
        self.closed = False
        self._lock = threading.RLock()
        self._push_token = 0
        self._pending_push = None
        self._history_push = Debouncer(debounce_wait, self._push_history, timer_factory)
        self._feedback = Debouncer(feedback_seconds, self._clear_feedback, timer_factory)

    # -- loading ---------------------------------------------------------

    def load(self):
        """
        Fetch stored settings and start a fresh editing session from them.

        Draft, baseline and history are all reset to the merged mapping. A
        failed fetch starts the session from the defaults. Returns the merged
        mapping, or None when the editor was closed while the request was in
        flight (the response is discarded).
        """
        try:
            records = self.gateway.fetch_settings()
        except GatewayError as e:
            logger.error(f"Failed to load theme settings, using defaults: {e}")
            records = []

        with self._lock:
            if self.closed:
                logger.debug("Discarding theme settings loaded after close")
                return None
            merged = merge_settings(records)
            self._cancel_pending_push()
            self.draft = dict(merged)
            self.baseline = dict(merged)
            self.history.reset(merged)
            self.context.replace(merged)
            return merged

    # -- editing ---------------------------------------------------------

    def change(self, key, value):
        """Edit one token: live immediately, recorded in history after the debounce"""
        with self._lock:
            self.draft = {**self.draft, key: value}
            self.context.update(key, value)
            self._push_token += 1
            self._pending_push = self._push_token
            self._history_push.schedule(self._push_token)
            return self.draft

    def _push_history(self, token):
        with self._lock:
            # a push cancelled or already recorded while this one waited on the lock
            if self.closed or token != self._pending_push:
                return
            self._pending_push = None
            self.history.push(self.draft)

    def _flush_pending_push(self):
        self._history_push.flush()
        if self._pending_push is not None:
            # the timer already fired and its callback is waiting on the lock
            self._push_history(self._pending_push)

    def _cancel_pending_push(self):
        self._history_push.cancel()
        self._pending_push = None

    def undo(self):
        with self._lock:
            self._flush_pending_push()
            snapshot = self.history.undo()
            if snapshot is None:
                return None
            return self._replay(snapshot)

    def redo(self):
        with self._lock:
            self._flush_pending_push()
            snapshot = self.history.redo()
            if snapshot is None:
                return None
            return self._replay(snapshot)

    def _replay(self, snapshot):
        self.draft = dict(snapshot)
        self.context.replace(self.draft)
        return self.draft

    def apply_preset(self, preset):
        """
        Apply a preset (or preset name) as a single undo step.

        Content tokens such as the logo, hero copy and custom CSS are kept
        from the draft.
        """
        if not isinstance(preset, Preset):
            name = preset
            preset = get_preset(name)
            if preset is None:
                raise ValueError(f"Unknown preset: {name}")

        with self._lock:
            self._cancel_pending_push()
            self.draft = merge_preset(self.draft, preset)
            self.history.push(self.draft)
            self.context.replace(self.draft)
            logger.info(f"Applied theme preset {preset.name}")
            return self.draft

    def reset_to_defaults(self):
        """Replace the draft with the built-in defaults as one undo step"""
        with self._lock:
            self._cancel_pending_push()
            self.draft = dict(DEFAULT_THEME)
            self.history.push(self.draft)
            self.context.replace(self.draft)
            return self.draft

    def upload_image(self, key, file, filename=None):
        """Upload an image and store its path in `key` (e.g. theme_logo)"""
        path = self.gateway.upload_image(file, filename=filename)
        if not path:
            logger.warning(f"Image upload for {key} returned no path, draft unchanged")
            return ''
        self.change(key, path)
        return self.gateway.resolve_upload_url(path)

    # -- saving ----------------------------------------------------------

    def dirty_keys(self):
        with self._lock:
            return dirty_keys(self.draft, self.baseline)

    @property
    def is_dirty(self):
        return bool(self.dirty_keys())

    @property
    def can_undo(self):
        return self.history.can_undo

    @property
    def can_redo(self):
        return self.history.can_redo

    def save(self):
        """
        Upload the dirty keys in one bulk request.

        Returns True on success. With nothing dirty no request is made and the
        status stays idle. On failure the baseline is left untouched so the
        same keys are sent again on retry.
        """
        with self._lock:
            keys = dirty_keys(self.draft, self.baseline)
            if not keys:
                self.message = 'No changes to save'
                logger.info("Theme save skipped: no changes")
                return False
            snapshot = dict(self.draft)
            items = [{'key': key, 'value': snapshot[key]} for key in keys]
            self._feedback.cancel()
            self.status = self.SAVING
            self.message = ''

        try:
            self.gateway.bulk_update(items)
        except GatewayError as e:
            with self._lock:
                self.status = self.ERROR
                self.message = e.message
            logger.error(f"Theme save failed: {e}")
            return False

        with self._lock:
            self.baseline = snapshot
            self.status = self.SAVED
            self.message = f"Saved {len(items)} setting(s)"
            if not self.closed:
                self._feedback.schedule()
        logger.info(f"Theme saved: {', '.join(keys)}")
        return True

    def _clear_feedback(self):
        with self._lock:
            if self.status == self.SAVED:
                self.status = self.IDLE
                self.message = ''

    def close(self):
        """Tear down: cancel timers and ignore any response still in flight"""
        with self._lock:
            self.closed = True
            self._cancel_pending_push()
            self._feedback.cancel()
