from collections import namedtuple

from advsched.errors import ConfigurationError
from advsched.integrands import Integrands

# max number of chunks a worker may hold at any point of time
PIPELINE_DEPTH = 3
MIN_POINTS = 1000
# below this many points the finer granularity is used
FINE_GRANULARITY_LIMIT = 10000
FINE_GRANULARITY = 10
COARSE_GRANULARITY = 100


def granularity(points):
    if points < FINE_GRANULARITY_LIMIT:
        return FINE_GRANULARITY
    return COARSE_GRANULARITY


_ProblemFields = namedtuple("_ProblemFields", [
    "function_id", "integrand", "lower_bound", "upper_bound",
    "points", "intensity", "granularity", "pipeline_depth",
])


class ProblemConfig(_ProblemFields):
    """Immutable description of one integration run, shared by every rank."""
    __slots__ = ()

    @property
    def step(self):
        return (self.upper_bound - self.lower_bound) / self.points

    @property
    def chunk_count(self):
        return -(-self.points // self.granularity)

    @classmethod
    def from_args(cls, args):
        return make_config(args.function_id, args.lower_bound, args.upper_bound,
                           args.points, args.intensity)


def make_config(function_id, lower_bound, upper_bound, points, intensity,
                pipeline_depth=PIPELINE_DEPTH):
    integrand = Integrands.get(function_id)
    if integrand is None:
        raise ConfigurationError(
            "Invalid function input for integration: %r (expected one of %s)"
            % (function_id, Integrands.describe()))
    if points < MIN_POINTS:
        raise ConfigurationError(
            "Invalid 'no of points' input for integration. "
            "This implementation needs 'no of points' to be more than or equal to %d"
            % MIN_POINTS)
    if pipeline_depth < 1:
        raise ConfigurationError("Pipeline depth must be positive, got %d" % pipeline_depth)
    return ProblemConfig(
        function_id=function_id,
        integrand=integrand,
        lower_bound=float(lower_bound),
        upper_bound=float(upper_bound),
        points=int(points),
        intensity=int(intensity),
        granularity=granularity(points),
        pipeline_depth=pipeline_depth,
    )
