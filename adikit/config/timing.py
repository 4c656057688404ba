#! /usr/bin/env python

"""
Functions for timing the reduction and contrast procedures.
"""

__all__ = ['time_ini', 'timing']

from datetime import datetime
from .utils_conf import sep


def time_ini(verbose=True):
    """
    Set and print the time at which a procedure started.

    Returns
    -------
    start_time : datetime.datetime
        Starting time.

    """
    start_time = datetime.now()
    if verbose:
        print(sep)
        print("Starting time: " + start_time.strftime("%Y-%m-%d %H:%M:%S"))
        print(sep)
    return start_time


def timing(start_time):
    """
    Print the running time elapsed since ``start_time`` (see ``time_ini``).
    """
    print("Running time:  " + str(datetime.now() - start_time))
    print(sep)
