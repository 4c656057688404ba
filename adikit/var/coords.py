#! /usr/bin/env python

"""
Module with functions related to frame coordinates.
"""

__all__ = ['dist',
           'frame_center',
           'pol_to_cart']

import numpy as np


def dist(yc, xc, y1, x1):
    """
    Return the Euclidean distance between two points, or between an array
    of positions and a point.
    """
    return np.sqrt(np.power(yc - y1, 2) + np.power(xc - x1, 2))


def frame_center(array, verbose=False):
    """
    Return the coordinates y,x of the frame(s) center.
    If odd: (dim-1)/2
    If even: dim/2

    Parameters
    ----------
    array : 2d/3d numpy ndarray
        Frame or cube.
    verbose : bool optional
        If True the center coordinates are printed out.

    Returns
    -------
    cy, cx : int
        Coordinates of the center.

    """
    if array.ndim == 2:
        shape = array.shape
    elif array.ndim == 3:
        shape = array[0].shape
    else:
        raise ValueError('`array` is not a 2d or 3d array')

    cy = shape[0] // 2
    cx = shape[1] // 2

    if verbose:
        print('Center px coordinates at x,y = ({}, {})'.format(cx, cy))

    return cy, cx


def pol_to_cart(r, theta, cy=0, cx=0):
    """
    Convert polar coordinates (``theta`` in degrees, counted counterclockwise
    from the positive x axis) into pixel coordinates around ``(cy, cx)``.

    Returns
    -------
    y, x : float or numpy ndarray
    """
    theta = np.deg2rad(theta)
    y = r * np.sin(theta) + cy
    x = r * np.cos(theta) + cx
    return y, x
