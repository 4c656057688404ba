#! /usr/bin/env python

"""
Module with functions to extract annuli and annular segments from frames.
"""

__all__ = ['get_annulus_segments']

import numpy as np

from .coords import frame_center


def _frame_or_shape(data):
    """ Return ``data`` if it is a frame, or an empty frame of shape ``data``.
    """
    if isinstance(data, np.ndarray):
        if data.ndim != 2:
            raise TypeError('`data` is not a frame or 2d array')
        return data
    elif isinstance(data, tuple):
        return np.zeros(data)
    else:
        raise TypeError('`data` must be a tuple (shape) or a 2d array')


def get_annulus_segments(data, inner_radius, width, nsegm=1, theta_init=0,
                         mode="ind"):
    """
    Return indices or values in segments of a centered annulus.

    The annulus is defined by ``inner_radius <= r < inner_radius+width``,
    where ``r`` is the distance to ``frame_center``.

    Parameters
    ----------
    data : 2d numpy ndarray or tuple
        Input 2d array (image) or tuple with its shape.
    inner_radius : float
        The inner radius of the donut region.
    width : float
        The size of the annulus. Must be strictly positive.
    nsegm : int
        Number of segments of annulus to be extracted.
    theta_init : int
        Initial azimuth [degrees] of the first segment, counting from the
        positive x-axis counterclockwise.
    mode : {'ind', 'val', 'mask'}, optional
        Controls what is returned: indices of selected pixels, values of
        selected pixels, or a copy of the frame with the rest set to zero.

    Returns
    -------
    indices : list of ndarrays
        [mode='ind'] Coordinates of pixels for each annulus segment.
    values : list of ndarrays
        [mode='val'] Pixel values.
    masked : list of ndarrays
        [mode='mask'] Copy of ``data`` with masked out regions.

    """
    array = _frame_or_shape(data)

    if not isinstance(nsegm, (int, np.integer)):
        raise TypeError('`nsegm` must be an integer')
    if width <= 0:
        raise ValueError('`width` must be strictly positive, got '
                         '{}'.format(width))

    cy, cx = frame_center(array)
    azimuth_coverage = 2 * np.pi / nsegm

    yy, xx = np.mgrid[:array.shape[0], :array.shape[1]]
    rad = np.sqrt((xx - cx) ** 2 + (yy - cy) ** 2)
    phi = (np.arctan2(yy - cy, xx - cx) - np.deg2rad(theta_init)) % (2*np.pi)
    in_annulus = (rad >= inner_radius) & (rad < inner_radius + width)

    masks = []
    for i in range(nsegm):
        phi_start = i * azimuth_coverage
        phi_end = phi_start + azimuth_coverage
        masks.append(in_annulus & (phi >= phi_start) & (phi < phi_end))

    if mode == "ind":
        return [np.where(mask) for mask in masks]
    elif mode == "val":
        return [array[mask] for mask in masks]
    elif mode == "mask":
        return [array*mask for mask in masks]
    else:
        raise ValueError("mode '{}' unknown!".format(mode))
