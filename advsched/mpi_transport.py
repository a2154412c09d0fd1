import time

from mpi4py import MPI

from advsched.errors import ReceiveTimeout
from advsched.transport import ANY

# sleep between probes while waiting with a timeout
POLL_INTERVAL = 0.001


class MPITransport:
    """
    Transport over an mpi4py communicator.

    ``send_async`` uses the pickle based ``isend``, which serializes the payload
    into its own buffer before returning, so the caller may reuse its object
    right away. The returned ``MPI.Request`` still has to be completed.
    """

    def __init__(self, comm=None):
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()

    def send_async(self, payload, dest, tag):
        return self.comm.isend(payload, dest=dest, tag=tag)

    def receive(self, source=ANY, tag=ANY, timeout=None):
        source = MPI.ANY_SOURCE if source is ANY else source
        tag = MPI.ANY_TAG if tag is ANY else tag
        status = MPI.Status()
        if timeout is not None:
            deadline = time.monotonic() + timeout
            while not self.comm.iprobe(source=source, tag=tag):
                if time.monotonic() >= deadline:
                    raise ReceiveTimeout(self.rank, timeout)
                time.sleep(POLL_INTERVAL)
        payload = self.comm.recv(source=source, tag=tag, status=status)
        return payload, status.Get_source(), status.Get_tag()

    def abort(self, errorcode=1):
        self.comm.Abort(errorcode)
