#! /usr/bin/env python

"""
Module with fake companion injection functions.
"""

__all__ = ['normalize_psf',
           'cube_inject_companions',
           'frame_inject_companion']

import numpy as np
from photutils.aperture import CircularAperture, aperture_photometry

from ..config.utils_conf import check_array
from ..preproc import frame_shift
from ..var import frame_center, pol_to_cart


def normalize_psf(array, fwhm, verbose=False):
    """ Normalize a PSF template so that the flux in a centered aperture of
    diameter ``fwhm`` equals 1.

    Parameters
    ----------
    array: numpy ndarray, 2d
        The PSF frame, centered on ``frame_center``.
    fwhm: float
        FWHM of the PSF, in pixels.
    verbose : bool, optional
        Print the measured aperture flux.

    Returns
    -------
    psf_norm: numpy ndarray
        The normalized PSF.

    """
    check_array(array, 2, msg='array')
    cy, cx = frame_center(array)
    aper = CircularAperture((cx, cy), r=fwhm / 2)
    fwhm_flux = aperture_photometry(array, aper,
                                    method='exact')['aperture_sum'][0]
    if not fwhm_flux > 0:
        raise ValueError('The flux in the FWHM aperture of the PSF is not '
                         'positive')
    if verbose:
        print("Flux in 1xFWHM aperture: {:.3f}".format(fwhm_flux))
    return array / fwhm_flux


def _place_template(frame, template, shift_y, shift_x, flux, imlib,
                    interpolation):
    """ Add ``template`` (centered) to ``frame`` shifted by (shift_y, shift_x)
    from the frame center: sub-pixel shift inside the template, then integer
    placement in the frame. Parts falling outside the frame are dropped. """
    sizey, sizex = frame.shape
    size_fc = template.shape[0]
    ceny, cenx = frame_center(frame)
    w = size_fc // 2

    dsy = shift_y - int(shift_y)
    dsx = shift_x - int(shift_x)
    fc_sh = frame_shift(template, dsy, dsx, imlib, interpolation,
                        border_mode='constant')

    y0 = ceny - w + int(shift_y)
    x0 = cenx - w + int(shift_x)
    p_y0 = max(-y0, 0)
    p_x0 = max(-x0, 0)
    p_yN = size_fc - max(y0 + size_fc - sizey, 0)
    p_xN = size_fc - max(x0 + size_fc - sizex, 0)
    if p_yN <= p_y0 or p_xN <= p_x0:
        return frame
    y0 = max(y0, 0)
    x0 = max(x0, 0)
    frame[y0:y0 + p_yN - p_y0, x0:x0 + p_xN - p_x0] += \
        flux * fc_sh[p_y0:p_yN, p_x0:p_xN]
    return frame


def cube_inject_companions(array, psf_template, angle_list, flevel, rad_dists,
                           n_branches=1, theta=0, imlib='ndimage-fourier',
                           interpolation='bicubic', full_output=False,
                           verbose=False):
    """ Injects fake companions in branches of an ADI cube.

    In frame ``fr`` the companion is placed at position angle
    ``theta + branch*360/n_branches - angle_list[fr]``, so that it sits at the
    requested position angle once the cube is de-rotated.

    Parameters
    ----------
    array : 3d numpy ndarray
        Input cube. It is not modified.
    psf_template : 2d numpy ndarray
        Odd-sized, centered PSF template, normalized (see ``normalize_psf``)
        if ``flevel`` is to be understood as a flux.
    angle_list : 1d numpy ndarray
        List of parallactic angles, in degrees.
    flevel : float, 1d or 2d array
        Factor for controlling the brightness of the fake companions. A 1d
        array gives one value per frame, a 2d array [n_rad x n_frames] one
        value per radius and frame (columns of length 1 are broadcast).
    rad_dists : float, list or array 1d
        Vector of radial distances of fake companions in pixels.
    n_branches : int, optional
        Number of azimutal branches.
    theta : float, optional
        Angle in degrees for rotating the position of the first branch that by
        default is located at zero degrees. Theta counts counterclockwise from
        the positive x axis.
    imlib : str, optional
        See the documentation of the ``adikit.preproc.frame_shift`` function.
    interpolation : str, optional
        See the documentation of the ``adikit.preproc.frame_shift`` function.
    full_output : bool, optional
        Returns the ``x`` and ``y`` coordinates of the injections, additionally
        to the new array.
    verbose : bool, optional
        If True prints out additional information.

    Returns
    -------
    array_out : numpy ndarray
        Output array with the injected fake companions.
    positions : list of tuple(y, x)
        [full_output] Coordinates of the injections in the de-rotated frame.

    """
    check_array(array, 3, msg='array')
    check_array(psf_template, 2, msg='psf_template')
    if psf_template.shape[0] % 2 == 0:
        raise ValueError('Only odd-sized PSF template is accepted')
    nframes = array.shape[0]
    angle_list = np.asarray(angle_list)
    if angle_list.shape[0] != nframes:
        raise TypeError('Input vector or parallactic angles has wrong length')

    rad_dists = np.atleast_1d(rad_dists)
    flevel = np.asarray(flevel, dtype=float)
    if flevel.ndim == 1:
        flevel = flevel[np.newaxis]
    try:
        flevel = np.broadcast_to(flevel, (rad_dists.shape[0], nframes))
    except ValueError:
        raise TypeError('`flevel` must be a scalar, have one value per frame '
                        'or one row per radius')

    ceny, cenx = frame_center(array[0])
    if rad_dists[-1] >= min(array.shape[1:]) / 2:
        msg = 'rad_dists last location is at the border (or outside) '
        msg += 'of the field'
        raise ValueError(msg)

    array_out = array.copy()
    positions = []
    for branch in range(n_branches):
        ang = branch * 360 / n_branches + theta
        if verbose:
            print('Branch {}:'.format(branch + 1))
        for irad, rad in enumerate(rad_dists):
            for fr in range(nframes):
                shift_y, shift_x = pol_to_cart(rad, ang - angle_list[fr])
                _place_template(array_out[fr], psf_template, shift_y, shift_x,
                                flevel[irad, fr], imlib, interpolation)

            pos_y, pos_x = pol_to_cart(rad, ang, ceny, cenx)
            positions.append((pos_y, pos_x))
            if verbose:
                print('\t(X,Y)=({:.2f}, {:.2f}) at {:.2f} px from the '
                      'center'.format(pos_x, pos_y, rad))

    if full_output:
        return array_out, positions
    return array_out


def frame_inject_companion(array, array_fc, pos_y, pos_x, flux,
                           imlib='ndimage-fourier', interpolation='bicubic'):
    """ Injects a fake companion in a single frame at given coordinates, or in
    a cube (at the same coordinates, flux and with same fake companion image
    throughout the cube).

    Parameters
    ----------
    array : numpy ndarray, 2d or 3d
        Input frame or cube. It is not modified.
    array_fc : numpy ndarray, 2d
        Odd-sized fake companion image to be injected, centered.
    pos_y, pos_x: float
         Y and X coordinates where the companion should be injected
    flux : float
        Flux at which the fake companion should be injected (i.e. scaling
        factor for the injected image)
    imlib : str, optional
        See documentation of the ``adikit.preproc.frame_shift`` function.
    interpolation : str, optional
        See documentation of the ``adikit.preproc.frame_shift`` function.

    Returns
    -------
    array_out : numpy ndarray
        Frame or cube with the companion injected
    """
    check_array(array, (2, 3), msg='array')
    check_array(array_fc, 2, msg='array_fc')
    if array_fc.shape[0] % 2 == 0:
        raise ValueError('Only odd-sized PSF template is accepted')

    array_out = np.array(array, dtype=float, copy=True)
    ceny, cenx = frame_center(array_out)
    frames = array_out if array_out.ndim == 3 else [array_out]
    for frame in frames:
        _place_template(frame, array_fc, pos_y - ceny, pos_x - cenx, flux,
                        imlib, interpolation)
    return array_out
