class SchedulerError(Exception):
    pass


class ConfigurationError(SchedulerError):
    """Invalid run parameters; raised before any scheduling starts."""


class ProtocolError(SchedulerError):
    pass


class ReceiveTimeout(SchedulerError):
    def __init__(self, rank, timeout):
        super().__init__(
            "Node[%d] received nothing within %.3f s" % (rank, timeout))
        self.rank = rank
        self.timeout = timeout
