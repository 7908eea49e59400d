"""
ThemeContext: the live theme of one document.

Both the editor page and every embedded preview get their own context object
passed in explicitly. A context owns the theme mapping, the StyleRoot it is
injected into and the broadcaster that forwards changes to child frames.
"""
import logging

from .broadcaster import PreviewMessage, ThemeBroadcaster, is_same_origin
from .injector import StyleRoot, inject_css_vars
from .tokens import DEFAULT_THEME

logger = logging.getLogger(__name__)


class ThemeContext:

    def __init__(self, origin, theme=None, root=None):
        self.origin = origin
        self.theme = dict(DEFAULT_THEME if theme is None else theme)
        self.root = root if root is not None else StyleRoot()
        self.broadcaster = ThemeBroadcaster(origin)
        self.public_settings = {}

    def apply(self):
        inject_css_vars(self.root, self.theme)

    def update(self, key, value):
        """Set one token, re-inject and broadcast the full mapping"""
        self.bulk_update({key: value})

    def bulk_update(self, changes):
        """Merge many tokens at once: one injection and one broadcast"""
        self.theme = {**self.theme, **changes}
        inject_css_vars(self.root, self.theme)
        self.broadcaster.broadcast(self.theme)
        return self.theme

    def replace(self, theme):
        """Replace the whole mapping (undo/redo replay)"""
        self.theme = dict(theme)
        inject_css_vars(self.root, self.theme)
        self.broadcaster.broadcast(self.theme)
        return self.theme

    def handle_message(self, origin, data):
        """
        Receive a THEME_PREVIEW message from another document.

        Messages from any origin other than our own are rejected, as is
        anything that is not a theme preview. Returns True when applied.
        """
        if not is_same_origin(self.origin, origin):
            logger.warning(f"Rejected theme message from foreign origin {origin!r}")
            return False
        message = PreviewMessage.from_dict(data)
        if message is None:
            return False
        self.theme = {**self.theme, **message.theme}
        inject_css_vars(self.root, self.theme)
        return True
