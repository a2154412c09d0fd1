"""
Pipelined master/worker scheduler for midpoint-rule integration.

1. The controller assigns ``pipeline_depth`` chunks to every worker in round
   robin order.
2. It receives a partial sum from any worker, accumulates it and reuses that
   worker's next slot: a fresh chunk if work is left, a quit signal otherwise.
3. A worker computes every chunk it gets and sends the sum back without
   waiting. After ``pipeline_depth`` quit signals it reports that it is exiting.
4. The controller stops once every worker has reported exiting.
"""
import logging
import threading
import time
from collections import namedtuple

import numpy as np

from advsched.errors import ProtocolError
from advsched.transport import (ANY, CONTROLLER_RANK, PARTIAL_RESULT, QUIT, TAG_NAMES,
                                WORK_AVAILABLE, WORKER_EXITING, LocalGroup)
from advsched.work import Chunk, ChunkSlotTable, WorkGenerator

logger = logging.getLogger(__name__)

IntegrationResult = namedtuple("IntegrationResult", ["value", "elapsed", "chunks"])

# payload of a quit sent into a slot that never carried work
_EMPTY_CHUNK = Chunk(0, 0)


def midpoint_sum(config, start, stop):
    """Midpoint-rule contribution of the indices in [start, stop)."""
    y = config.step
    x = config.lower_bound + (np.arange(start, stop, dtype=np.float64) + 0.5) * y
    with np.errstate(all="ignore"):
        return float(np.sum(config.integrand(x, config.intensity) * y))


def reference_integral(config):
    return midpoint_sum(config, 0, config.points)


def _wait_all(requests):
    for request in requests:
        request.wait()


class Worker:
    def __init__(self, transport, config, timeout=None):
        self.transport = transport
        self.config = config
        self.timeout = timeout
        self.quit_count = 0
        self.chunks_done = 0
        self._last_send = None

    def _send(self, value, tag):
        # the previous result has to be out before its successor is queued
        if self._last_send is not None:
            self._last_send.wait()
        self._last_send = self.transport.send_async(value, CONTROLLER_RANK, tag)

    def run(self):
        rank = self.transport.rank
        while True:
            chunk, _, tag = self.transport.receive(CONTROLLER_RANK, ANY, self.timeout)

            if tag == WORK_AVAILABLE:
                logger.debug("Node[%d] StartIndex = %d StopIndex = %d", rank, chunk.start, chunk.stop)
                value = midpoint_sum(self.config, chunk.start, chunk.stop)
                self.chunks_done += 1
                logger.debug("Node[%d] Sending integration %f", rank, value)
                self._send(value, PARTIAL_RESULT)
            elif tag == QUIT:
                self.quit_count += 1
                logger.debug("Node[%d] Quit message received. QuitCounter = %d", rank, self.quit_count)
                if self.quit_count == self.config.pipeline_depth:
                    logger.debug("Node[%d] Node exiting", rank)
                    self._send(0.0, WORKER_EXITING)
                    break
            else:
                raise ProtocolError("Node[%d] unexpected tag %r from controller" % (rank, tag))

        self._last_send.wait()


class Controller:
    def __init__(self, transport, config, timeout=None):
        self.transport = transport
        self.config = config
        self.timeout = timeout
        self.workers = transport.size - 1
        self.generator = WorkGenerator(config.points, config.granularity)
        self.slots = ChunkSlotTable(transport.size, config.pipeline_depth)
        self.accumulator = 0.0
        self.exit_count = 0
        self.quits_sent = [0] * transport.size

    def _dispatch(self, worker, slot):
        if not self.generator.is_exhausted():
            chunk = self.generator.next_chunk()
            tag = WORK_AVAILABLE
        else:
            chunk = self.slots.get(worker, slot) or _EMPTY_CHUNK
            tag = QUIT
            self.quits_sent[worker] += 1
        self.slots.set(worker, slot, chunk)
        logger.debug("Node[master] sending %s %s to node %d slot %d",
                     TAG_NAMES[tag], tuple(chunk), worker, slot)
        self.slots.attach(worker, slot, self.transport.send_async(chunk, worker, tag))

    def _fill(self):
        for _ in range(self.config.pipeline_depth):
            for worker in range(1, self.transport.size):
                self._dispatch(worker, self.slots.next_slot(worker))

    def run(self):
        start_time = time.time()
        self._fill()

        while self.exit_count < self.workers:
            value, worker, tag = self.transport.receive(ANY, ANY, self.timeout)

            if tag == WORKER_EXITING:
                self.exit_count += 1
                logger.debug("Node[master] node %d exited (%d of %d)", worker, self.exit_count, self.workers)
                continue
            if tag != PARTIAL_RESULT:
                raise ProtocolError("Node[master] unexpected tag %r from node %d" % (tag, worker))

            self.accumulator += value
            logger.debug("Node[master] IntegralOutput = %f, NodeIntegralOutput = %f", self.accumulator, value)
            self._dispatch(worker, self.slots.next_slot(worker))

        _wait_all(self.slots.pending())
        elapsed = time.time() - start_time
        logger.debug("Quit message received from all the workers. master exiting")
        return IntegrationResult(self.accumulator, elapsed, self.generator.issued)


def run_node(transport, config, timeout=None):
    """Runs the role of ``transport.rank``; returns the result on the controller, None elsewhere."""
    if transport.rank == CONTROLLER_RANK:
        return Controller(transport, config, timeout).run()
    Worker(transport, config, timeout).run()
    return None


class _WorkerThread(threading.Thread):
    def __init__(self, worker):
        super().__init__(name="worker-%d" % worker.transport.rank, daemon=True)
        self.worker = worker
        self.error = None

    def run(self):
        try:
            self.worker.run()
        except Exception as e:
            self.error = e


def run_local(config, size, timeout=None):
    """
    Runs a whole group of ``size`` ranks inside this process: the controller on
    the calling thread, each worker on its own thread.

    Returns ``(result, controller, workers)``.
    """
    group = LocalGroup(size)
    workers = [Worker(group.endpoint(rank), config, timeout) for rank in range(1, size)]
    threads = [_WorkerThread(worker) for worker in workers]
    for thread in threads:
        thread.start()
    controller = Controller(group.endpoint(CONTROLLER_RANK), config, timeout)
    result = controller.run()
    for thread in threads:
        thread.join()
        if thread.error is not None:
            raise thread.error
    return result, controller, workers
