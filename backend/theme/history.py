"""
Undo/redo history of full theme snapshots.
"""
from types import MappingProxyType


def freeze(theme):
    return MappingProxyType(dict(theme))


class DraftHistory:
    """
    A list of immutable snapshots with a cursor.

    push() drops every entry after the cursor before appending, so a new edit
    made after an undo discards the redo branch.
    """

    def __init__(self, initial=None):
        self.entries = []
        self.index = -1
        if initial is not None:
            self.reset(initial)

    def reset(self, snapshot):
        self.entries = [freeze(snapshot)]
        self.index = 0

    def push(self, snapshot):
        del self.entries[self.index + 1:]
        self.entries.append(freeze(snapshot))
        self.index = len(self.entries) - 1
        return self.entries[self.index]

    @property
    def current(self):
        if self.index < 0:
            return None
        return self.entries[self.index]

    @property
    def can_undo(self):
        return self.index > 0

    @property
    def can_redo(self):
        return 0 <= self.index < len(self.entries) - 1

    def undo(self):
        if not self.can_undo:
            return None
        self.index -= 1
        return self.entries[self.index]

    def redo(self):
        if not self.can_redo:
            return None
        self.index += 1
        return self.entries[self.index]

    def __len__(self):
        return len(self.entries)
