"""
Point-to-point messaging used by the controller and workers.

A transport exposes ``rank`` and ``size`` of the process group, a non-blocking
``send_async(payload, dest, tag)`` returning a request with ``wait()`` and
``test()`` (a ``(flag, message)`` pair as in mpi4py), and a blocking
``receive(source=ANY, tag=ANY, timeout=None)`` returning
``(payload, source, tag)``. Messages between one sender and one
receiver are delivered in the order they were sent.

``LocalGroup`` implements this inside one process for threads standing in
for ranks; ``advsched.mpi_transport.MPITransport`` implements it over mpi4py.
"""
import copy
import threading
import time
from collections import deque

from advsched.errors import ReceiveTimeout

ANY = None

CONTROLLER_RANK = 0

# message from controller to worker indicating that work is available
WORK_AVAILABLE = 1000
# message from controller to worker indicating that the worker should terminate
QUIT = 2000
# message from worker to controller carrying a partial sum (and asking for work)
PARTIAL_RESULT = 3000
# message from worker to controller indicating that the worker is terminating
WORKER_EXITING = 4000

TAG_NAMES = {
    WORK_AVAILABLE: "work-available",
    QUIT: "quit",
    PARTIAL_RESULT: "partial-result",
    WORKER_EXITING: "worker-exiting",
}


class CompletedRequest:
    """Request of a send whose payload has already been handed over."""

    def wait(self):
        return None

    def test(self):
        return True, None


class LocalGroup:
    def __init__(self, size):
        self.size = size
        self._inboxes = [deque() for _ in range(size)]
        self._ready = [threading.Condition() for _ in range(size)]

    def endpoint(self, rank):
        return LocalTransport(self, rank)

    def endpoints(self):
        return [self.endpoint(rank) for rank in range(self.size)]

    def _deliver(self, payload, source, dest, tag):
        with self._ready[dest]:
            self._inboxes[dest].append((copy.deepcopy(payload), source, tag))
            self._ready[dest].notify_all()

    def _take(self, rank, source, tag, timeout):
        deadline = None if timeout is None else time.monotonic() + timeout
        ready = self._ready[rank]
        inbox = self._inboxes[rank]
        with ready:
            while True:
                for position, message in enumerate(inbox):
                    if (source is ANY or message[1] == source) and (tag is ANY or message[2] == tag):
                        del inbox[position]
                        return message
                if deadline is None:
                    ready.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ReceiveTimeout(rank, timeout)
                ready.wait(remaining)


class LocalTransport:
    def __init__(self, group, rank):
        self._group = group
        self.rank = rank
        self.size = group.size

    def send_async(self, payload, dest, tag):
        self._group._deliver(payload, self.rank, dest, tag)
        return CompletedRequest()

    def receive(self, source=ANY, tag=ANY, timeout=None):
        return self._group._take(self.rank, source, tag, timeout)
