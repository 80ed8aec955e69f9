# notices.py

from collections import deque


class Notices:
    """Transient user-facing notifications, shown once on the next rendered page."""

    def __init__(self, maxlen=20):
        self._queue = deque(maxlen=maxlen)

    def push(self, level, message):
        self._queue.append({"level": level, "message": message})

    def success(self, message):
        self.push("success", message)

    def error(self, message):
        self.push("error", message)

    def info(self, message):
        self.push("info", message)

    def drain(self):
        items = list(self._queue)
        self._queue.clear()
        return items

    def __len__(self):
        return len(self._queue)
