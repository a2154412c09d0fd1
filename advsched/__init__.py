from advsched.config import PIPELINE_DEPTH, ProblemConfig, make_config
from advsched.errors import ConfigurationError, ProtocolError, ReceiveTimeout, SchedulerError
from advsched.scheduler import Controller, IntegrationResult, Worker, run_local, run_node
from advsched.work import Chunk, ChunkSlotTable, WorkGenerator

__version__ = "1.1.0"
