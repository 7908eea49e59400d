"""
Cross-context theme broadcasting.

The editor and each embedded preview frame hold their own theme state; the
only link between them is a tagged THEME_PREVIEW message. Outbound messages
are addressed to the editor's own origin, so a frame living on another origin
never receives them, and inbound messages are only accepted from the page's
own origin.

Delivery is fire-and-forget and in post order per frame. There are no
sequence numbers, acknowledgements or deduplication.
"""
from dataclasses import dataclass, field
import logging
from typing import Optional

logger = logging.getLogger(__name__)

THEME_PREVIEW = 'THEME_PREVIEW'
MESSAGE_VERSION = 1


@dataclass(frozen=True)
class PreviewMessage:
    theme: dict = field(default_factory=dict)
    type: str = THEME_PREVIEW
    version: int = MESSAGE_VERSION

    def to_dict(self):
        return {'type': self.type, 'version': self.version, 'theme': dict(self.theme)}

    @classmethod
    def from_dict(cls, data) -> Optional['PreviewMessage']:
        """Parse a wire message; returns None for anything that is not a theme preview"""
        if not isinstance(data, dict) or data.get('type') != THEME_PREVIEW:
            return None
        theme = data.get('theme')
        if not isinstance(theme, dict):
            return None
        return cls(theme=dict(theme), version=data.get('version', MESSAGE_VERSION))


def is_same_origin(expected, actual):
    return bool(expected) and expected == actual


class PreviewFrame:
    """
    An embedded preview document.

    `origin` is the origin of the document loaded in the frame. Messages are
    handed to `receiver.handle_message(origin, data)` when the target origin
    matches, mirroring window.postMessage.
    """

    def __init__(self, origin, receiver=None, name=''):
        self.origin = origin
        self.receiver = receiver
        self.name = name
        self.delivered = 0

    def post_message(self, data, target_origin, source_origin):
        if target_origin != '*' and target_origin != self.origin:
            logger.debug(f"Frame {self.name or self.origin}: dropped message for {target_origin}")
            return False
        self.delivered += 1
        if self.receiver is not None:
            self.receiver.handle_message(source_origin, data)
        return True

    def __repr__(self):
        return f"<PreviewFrame {self.name or self.origin}>"


class ThemeBroadcaster:
    """Posts the live theme to every registered preview frame"""

    def __init__(self, origin):
        self.origin = origin
        self._frames = []

    @property
    def frames(self):
        return list(self._frames)

    def register_frame(self, frame):
        if frame not in self._frames:
            self._frames.append(frame)
        return frame

    def unregister_frame(self, frame):
        if frame in self._frames:
            self._frames.remove(frame)

    def broadcast(self, theme):
        """
        Send the full mapping to all frames, targeted at our own origin.

        Returns the number of frames that accepted the message. A frame that
        fails is logged and skipped.
        """
        message = PreviewMessage(theme=dict(theme)).to_dict()
        delivered = 0
        for frame in list(self._frames):
            try:
                if frame.post_message(message, self.origin, self.origin):
                    delivered += 1
            except Exception as e:
                logger.warning(f"Theme preview delivery to {frame!r} failed: {e}")
        return delivered
