#! /usr/bin/env python

"""
Module with the sub-pixel shift of frames.
"""

__all__ = ['frame_shift']

import numpy as np
from scipy.ndimage import fourier_shift, shift

from ..config.paramenum import INTERP_ORDER, Imlib, Interpolation


def frame_shift(array, shift_y, shift_x, imlib='ndimage-fourier',
                interpolation='bicubic', border_mode='reflect'):
    """ Shift a 2D array by shift_y, shift_x.

    Parameters
    ----------
    array : numpy ndarray
        Input 2d array.
    shift_y, shift_x: float
        Shifts in y and x directions.
    imlib : {'ndimage-fourier', 'ndimage-interp'}, string optional
        Library or method used for performing the image shift.
        'ndimage-fourier': shift in the Fourier plane, does a fourier shift
        operation and preserves better the pixel values (therefore the flux
        and photometry). 'ndimage-interp' uses spline interpolation with the
        order given by ``interpolation``.
    interpolation : str, optional
        Spline order for 'ndimage-interp' (see ``Interpolation``).
    border_mode : {'reflect', 'nearest', 'constant', 'mirror', 'wrap'}
        Points outside the boundaries of the input are filled accordingly, for
        'ndimage-interp' only.

    Returns
    -------
    array_shifted : numpy ndarray
        Shifted 2d array.

    """
    if array.ndim != 2:
        raise TypeError('Input array is not a frame or 2d array')

    if imlib == Imlib.NDIMAGEFOURIER:
        shift_val = (shift_y, shift_x)
        array_shifted = fourier_shift(np.fft.fftn(array), shift_val)
        array_shifted = np.fft.ifftn(array_shifted).real
    elif imlib == Imlib.NDIMAGEINTERP:
        try:
            order = INTERP_ORDER[Interpolation(interpolation)]
        except ValueError:
            raise ValueError('Scipy.ndimage interpolation method not '
                             'recognized')
        array_shifted = shift(array, (shift_y, shift_x), order=order,
                              mode=border_mode)
    else:
        raise ValueError('Image transformation library not recognized')

    return array_shifted
