import argparse
import csv
import shlex
import subprocess
import sys
import time
from functools import reduce

parser = argparse.ArgumentParser(description='Repeatedly run the scheduler under mpiexec and '
                                             'collect average timings into a CSV file')
parser.add_argument('--jobs', default=[2], nargs='+', type=int,
                    help='List of process counts to run (controller included)\n'
                         'Example: 2 3 4 5 6\n'
                         'Result: executing the program with 2, 3, 4, 5 and 6 processes separately')
parser.add_argument('--functions', default=[1], nargs='+', type=int,
                    help='List of function ids to integrate')
parser.add_argument('--points', default=[1000], nargs='+', type=int,
                    help='List of point counts')
parser.add_argument('--lower', default=0.0, type=float)
parser.add_argument('--upper', default=10.0, type=float)
parser.add_argument('--intensity', default=1, type=int)
parser.add_argument('--times', default=10, type=int,
                    help='How many times to repeat each execution')
parser.add_argument('--timeout', type=float, default=None)
parser.add_argument('--mpiexec', default='mpiexec', type=str)
parser.add_argument('--debug', action='store_true')
parser.add_argument('--out_csv_file', default="out.csv", type=str)

CSV_HEADER = ['Error', 'Function', 'Points', 'Intensity', 'Job Number',
              'Avg. Wall Time', 'Avg. Reported Time', 'Avg. Value']


def get_avg(lst, n):
    if not lst:
        return float('nan')
    return reduce((lambda a, b: a + b), lst) / n


def build_command(args, num_jobs, function_id, points):
    timeout_str = f'--timeout={args.timeout}' if args.timeout is not None else ''
    debug_str = '--debug' if args.debug else ''
    command = f"{args.mpiexec} -n {num_jobs} {shlex.quote(sys.executable)} -m advsched " \
              f"{function_id} {args.lower} {args.upper} {points} {args.intensity} " \
              f"{timeout_str} {debug_str}"
    return shlex.split(command)


def parse_output(output, error):
    """Returns (value, reported elapsed seconds) from a run's stdout and stderr."""
    return _last_number(output), _last_number(error)


def _last_number(text):
    # debug lines of other ranks may follow the number we are after
    for line in reversed(text.strip().splitlines()):
        try:
            return float(line)
        except ValueError:
            continue
    raise ValueError("no numeric line in output: %r" % text)


def run_combination(args, num_jobs, function_id, points):
    cmd_args = build_command(args, num_jobs, function_id, points)

    elapsed_list = []
    reported_list = []
    values = []
    error = ""
    for i in range(args.times):
        start = time.time()
        p = subprocess.Popen(cmd_args, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        output, err_output = p.communicate()
        elapsed_list.append(time.time() - start)

        output = output.decode('ascii')
        err_output = err_output.decode('ascii')
        if p.returncode != 0:
            print("Error during run: ", err_output)
            error = "Internal Error"
            continue
        value, reported = parse_output(output, err_output)
        values.append(value)
        reported_list.append(reported)

    return {
        'error': error,
        'function': function_id,
        'points': points,
        'intensity': args.intensity,
        'jobs': num_jobs,
        'avg_time': get_avg(elapsed_list, len(elapsed_list)),
        'avg_reported_time': get_avg(reported_list, len(reported_list)),
        'avg_value': get_avg(values, len(values))
    }


def write_csv(path, exec_outputs):
    with open(path, 'w', newline='') as csvfile:
        writer = csv.writer(csvfile, delimiter=';')
        writer.writerow(CSV_HEADER)
        for out in exec_outputs:
            out_list = [value for key, value in out.items()]
            writer.writerow(out_list)
            print(out_list)


def main(argv=None):
    args = parser.parse_args(argv)

    exec_outputs = []
    for num_jobs in args.jobs:
        for function_id in args.functions:
            for points in args.points:
                exec_outputs.append(run_combination(args, num_jobs, function_id, points))

    write_csv(args.out_csv_file, exec_outputs)
    return exec_outputs


if __name__ == "__main__":
    main()
