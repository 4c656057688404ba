#! /usr/bin/env python

"""
Module with the cube collapsing function.
"""

__all__ = ['cube_collapse']

import numpy as np

from ..config.paramenum import Collapse


def cube_collapse(cube, mode='median', w=None):
    """Collapse a 3D cube into a 2D frame.

    Parameters
    ----------
    cube : numpy ndarray
        Cube.
    mode : {'median', 'mean', 'sum', 'max', 'wmean'}
        Sets the way of collapsing the images in the cube.
        'wmean' stands for weighted mean and requires weights w to be provided.
    w: 1d numpy array or list, optional
        Weights to be applied for a weighted mean. Need to be provided if
        collapse mode is 'wmean'.

    Returns
    -------
    frame : numpy ndarray
        Output array, cube combined.
    """
    if cube.ndim != 3:
        raise TypeError('The input array is not a cube or 3d array.')

    if mode == Collapse.MEAN:
        frame = np.nanmean(cube, axis=0)
    elif mode == Collapse.MEDIAN:
        frame = np.nanmedian(cube, axis=0)
    elif mode == Collapse.SUM:
        frame = np.nansum(cube, axis=0)
    elif mode == Collapse.MAX:
        frame = np.nanmax(cube, axis=0)
    elif mode == Collapse.WMEAN:
        if w is None:
            raise ValueError("Weights have to be provided for weighted mean "
                             "mode")
        w = np.asarray(w)
        if len(w) != cube.shape[0]:
            raise TypeError("Weights need same length as cube")
        arr = np.nan_to_num(cube)
        frame = np.inner(w, np.moveaxis(arr, 0, -1))
    else:
        raise ValueError("Collapse mode `{}` not recognized".format(mode))

    return frame
