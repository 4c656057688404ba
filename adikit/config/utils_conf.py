#! /usr/bin/env python

"""
Module with internal utilities: input checks, progress bars and the
``pool_map`` abstraction used for every parallel loop of the package.
"""

__all__ = ['Progressbar',
           'check_array',
           'iterable',
           'pool_map',
           'sep']

import sys
import itertools as itt
import multiprocessing
from multiprocessing import cpu_count

import numpy as np

sep = '―' * 80


class Progressbar(object):
    """ Show progress bars.

    Examples
    --------
    .. code:: python

        from adikit.config import Progressbar

        for i in Progressbar(range(50), desc="Annuli"):
            process(i)

        # Progressbar can be disabled globally using
        Progressbar.backend = "hide"

        # or locally using the ``verbose`` keyword:
        Progressbar(iterable, verbose=False)

    """
    backend = "tqdm"

    def __new__(cls, iterable=None, desc=None, total=None, leave=True,
                backend=None, verbose=True):
        if backend is None:
            backend = Progressbar.backend

        if not verbose:
            backend = "hide"

        if backend == "tqdm":
            from tqdm import tqdm
            return tqdm(iterable=iterable, desc=desc, total=total, leave=leave,
                        ascii=True, ncols=80, file=sys.stdout,
                        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed"
                                   "}<{remaining}{postfix}]")
        elif backend == "hide":
            return NoProgressbar(iterable=iterable)
        else:
            raise NotImplementedError("unknown backend")

    @staticmethod
    def set(b):
        Progressbar.backend = b


class NoProgressbar(object):
    """ Wraps an ``iterable`` to behave like ``Progressbar``, but without
    producing output.
    """
    def __init__(self, iterable=None):
        self.iterable = iterable

    def __iter__(self):
        return self.iterable.__iter__()


def check_array(input_array, dim, msg=None):
    """ Checks the dimensionality of input. In case the check is not successful,
    a TypeError is raised.

    Parameters
    ----------
    input_array : list, tuple or np.ndarray
        Input data.
    dim : int or tuple
        Number of dimensions that ``input_array`` should have. ``dim`` can take
        one of these values: 1, 2, 3, (1,2) or (2,3).
    msg : str, optional
        String to be used in the error message (``input_array`` name).

    """
    if not isinstance(input_array, (list, tuple, np.ndarray)):
        raise TypeError("`input_array` must be a list, tuple of numpy ndarray")

    msg = 'Input array' if msg is None else '`' + msg + '`'

    if dim not in (1, 2, 3, (1, 2), (2, 3)):
        raise ValueError("`dim` must be: 1, 2, 3, (1,2) or (2,3)")

    if dim == 1:
        input_array = np.asarray(input_array)
        if input_array.ndim != 1:
            raise TypeError(msg + ' must be a list, tuple or a 1d numpy '
                                  'ndarray')
    elif isinstance(dim, int):
        if not isinstance(input_array, np.ndarray) or input_array.ndim != dim:
            raise TypeError(msg + ' must be a {}d numpy ndarray'.format(dim))
    else:
        msg_tup = ' or '.join(str(d) for d in dim)
        if not isinstance(input_array, np.ndarray) or \
                input_array.ndim not in dim:
            raise TypeError(msg + ' must be a ' + msg_tup + 'd numpy ndarray')


def eval_func_tuple(f_args):
    """ Takes a tuple of a function and args, evaluates and returns result"""
    return f_args[0](*f_args[1:])


class FixedObj(object):
    def __init__(self, v):
        self.v = v


def iterable(v):
    """ Helper function for ``pool_map``: prevents the argument from being
    wrapped in ``itertools.repeat()``.

    Examples
    --------
    .. code-block:: python

        # one job per annulus, every job sharing the same angles:
        pool_map(3, worker, iterable(matrices), angle_list)

        # results in calling
        #
        # worker(matrices[0], angle_list)
        # worker(matrices[1], angle_list)
        # ...
    """
    return FixedObj(v)


def pool_map(nproc, fkt, *args, **kwargs):
    """
    Abstraction layer for multiprocessing. When ``nproc=1``, the builtin
    ``map()`` is used. For ``nproc>1`` a ``multiprocessing.Pool`` is created.
    Results are always returned in submission order.

    Parameters
    ----------
    nproc : int or None
        Number of processes to use. If None, ``cpu_count()//2`` processes are
        used.
    fkt : callable
        The function to be called with each ``*args``
    *args : function arguments
        Arguments passed to ``fkt`` By default, ``itertools.repeat`` is applied
        on all the arguments, except when you wrap the argument in
        ``iterable()``.
        With ``nproc`` > 1, ``fkt`` and the arguments are pickled: lambdas and
        nested functions cannot be used.
    msg : str or None, optional
        Description to be displayed.
    progressbar_single : bool, optional
        Display a progress bar when single-processing is used. Defaults to
        ``False``.
    verbose : bool, optional
        Show more output. Also disables the progress bar when set to ``False``.

    Returns
    -------
    res : list
        A list with the results.

    """
    msg = kwargs.get("msg", None)
    verbose = kwargs.get("verbose", True)
    progressbar_single = kwargs.get("progressbar_single", False)

    if nproc is None:
        nproc = max(cpu_count() // 2, 1)

    args_r = [a.v if isinstance(a, FixedObj) else itt.repeat(a) for a in args]
    z = zip(itt.repeat(fkt), *args_r)

    if nproc == 1:
        if progressbar_single:
            total = len([a.v for a in args if isinstance(a, FixedObj)][0])
            z = Progressbar(z, desc=msg, verbose=verbose, total=total)
        res = list(map(eval_func_tuple, z))
    else:
        if verbose and msg is not None:
            print("{} with {} processes".format(msg, nproc))
        context = multiprocessing.get_context('fork')
        with context.Pool(processes=nproc) as pool:
            res = pool.map(eval_func_tuple, z)

    return res
