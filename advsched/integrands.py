import numpy as np


def _repeat(func, x, intensity):
    # intensity only scales the cost of an evaluation, never its value
    value = func(x)
    for _ in range(1, intensity):
        value = func(x)
    return value


def constant(x, intensity):
    return _repeat(np.ones_like, np.asarray(x, dtype=np.float64), intensity)


def linear(x, intensity):
    return _repeat(lambda v: v.copy(), np.asarray(x, dtype=np.float64), intensity)


def quadratic(x, intensity):
    return _repeat(np.square, np.asarray(x, dtype=np.float64), intensity)


def sine(x, intensity):
    return _repeat(np.sin, np.asarray(x, dtype=np.float64), intensity)


class Integrands:
    # function selector -> (name, callable)
    _functions = {
        1: ("constant", constant),
        2: ("linear", linear),
        3: ("quadratic", quadratic),
        4: ("sine", sine),
    }

    @staticmethod
    def ids():
        return sorted(Integrands._functions)

    @staticmethod
    def name(function_id):
        return Integrands._functions[function_id][0]

    @staticmethod
    def get(function_id):
        """Returns the integrand registered under ``function_id`` or None."""
        entry = Integrands._functions.get(function_id)
        return entry[1] if entry is not None else None

    @staticmethod
    def describe():
        return ", ".join("%d=%s" % (fid, Integrands.name(fid)) for fid in Integrands.ids())
