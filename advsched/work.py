from collections import namedtuple

from advsched.errors import ProtocolError

Chunk = namedtuple("Chunk", ["start", "stop"])


class WorkGenerator:
    """Hands out consecutive index ranges of ``granularity`` points over [0, points)."""

    def __init__(self, points, granularity):
        self.points = points
        self.granularity = granularity
        # max index up to which work has been assigned
        self.completed_index = 0
        self.issued = 0

    def is_exhausted(self):
        return self.completed_index == self.points

    def next_chunk(self):
        if self.is_exhausted():
            raise ProtocolError("next_chunk() called on an exhausted generator")
        start = self.completed_index
        stop = min(start + self.granularity, self.points)
        self.completed_index = stop
        self.issued += 1
        return Chunk(start, stop)


class ChunkSlotTable:
    """
    Per-worker ring of ``depth`` slots, each holding the last chunk sent into it
    together with the send request still reading it.
    """

    def __init__(self, workers, depth):
        # row 0 belongs to the controller and stays unused
        self.depth = depth
        self._chunks = [[None] * depth for _ in range(workers)]
        self._requests = [[None] * depth for _ in range(workers)]
        self._rotation = [0] * workers

    def next_slot(self, worker):
        slot = self._rotation[worker]
        self._rotation[worker] = (slot + 1) % self.depth
        return slot

    def get(self, worker, slot):
        return self._chunks[worker][slot]

    def set(self, worker, slot, chunk):
        pending = self._requests[worker][slot]
        if pending is not None:
            pending.wait()
        self._chunks[worker][slot] = chunk
        self._requests[worker][slot] = None

    def attach(self, worker, slot, request):
        self._requests[worker][slot] = request

    def pending(self):
        return [req for row in self._requests for req in row if req is not None]
