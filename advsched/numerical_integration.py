import logging
import sys

from advsched import parsing_utils as pu
from advsched.config import ProblemConfig
from advsched.errors import ConfigurationError, SchedulerError
from advsched.scheduler import run_node

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = pu.parser_instance()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format="%(message)s", stream=sys.stderr)

    try:
        config = ProblemConfig.from_args(args)
    except ConfigurationError as e:
        parser.print_usage(sys.stderr)
        sys.stderr.write("%s: error: %s\n" % (parser.prog, e))
        return 1

    # importing mpi4py.MPI initializes MPI, so only do it for a valid run
    from advsched.mpi_transport import MPITransport
    transport = MPITransport()

    if args.debug and transport.rank == 0:
        sys.stderr.write("Args: %s\n" % str(args.__dict__))

    try:
        result = run_node(transport, config, args.timeout)
    except SchedulerError as e:
        logger.error("%s", e)
        transport.abort(1)
        return 1

    if result is not None:
        sys.stdout.write("%.12g\n" % result.value)
        sys.stderr.write("%f\n" % result.elapsed)
    return 0
