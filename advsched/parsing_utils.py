def parser_instance():
    import argparse
    from advsched.integrands import Integrands
    parser = argparse.ArgumentParser(
        prog="advsched",
        description="Pipelined master/worker midpoint-rule integration over MPI")
    parser.add_argument('function_id',
                        type=int,
                        help="Function to integrate: [%s]" % Integrands.describe())
    parser.add_argument('lower_bound',
                        type=float)
    parser.add_argument('upper_bound',
                        type=float)
    parser.add_argument('points',
                        type=int,
                        help="Number of midpoint samples, at least 1000")
    parser.add_argument('intensity',
                        type=int,
                        help="Cost multiplier of one function evaluation")
    parser.add_argument('--timeout',
                        type=float,
                        default=None,
                        help="Give up when a node receives nothing for this many seconds "
                             "(default: wait forever)")
    parser.add_argument('--debug',
                        action='store_true')
    return parser
