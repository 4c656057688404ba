#! /usr/bin/env python

"""
Module with S/N and significance calculation functions.
We strongly recommend users to read Mawet et al. (2014) before using routines
of this module: https://ui.adsabs.harvard.edu/abs/2014ApJ...792...97M/abstract
"""

__all__ = ['snr',
           'noise',
           'significance',
           'snr_to_significance',
           'significance_to_snr',
           'detection_map',
           'snrmap']

import numpy as np
from photutils.aperture import CircularAperture, aperture_photometry
from scipy.stats import norm, t

from ..config import time_ini, timing
from ..config.utils_conf import check_array, iterable, pool_map
from ..var import dist, frame_center, get_annulus_segments


def _ring_fluxes(array, source_xy, fwhm, exclude_negative_lobes=False):
    """ Fluxes in the non-overlapping FWHM apertures of the ring passing by
    ``source_xy``. The first value is the flux of the test aperture. Returns
    None when the ring holds less than two background apertures. """
    sourcex, sourcey = source_xy
    centery, centerx = frame_center(array)
    sep = dist(centery, centerx, float(sourcey), float(sourcex))
    if not sep > (fwhm / 2) + 1:
        return None

    angle = np.arcsin(fwhm / 2. / sep) * 2
    number_apertures = int(np.floor(2 * np.pi / angle))
    yy = np.zeros((number_apertures))
    xx = np.zeros((number_apertures))
    cosangle = np.cos(angle)
    sinangle = np.sin(angle)
    xx[0] = sourcex - centerx
    yy[0] = sourcey - centery
    # clockwise
    for i in range(number_apertures - 1):
        xx[i + 1] = cosangle * xx[i] + sinangle * yy[i]
        yy[i + 1] = cosangle * yy[i] - sinangle * xx[i]

    xx += centerx
    yy += centery
    if exclude_negative_lobes:
        xx = np.concatenate(([xx[0]], xx[2:-1]))
        yy = np.concatenate(([yy[0]], yy[2:-1]))
    if xx.shape[0] < 3:
        return None

    # Coordinates (X,Y)
    apertures = CircularAperture(np.column_stack((xx, yy)), r=fwhm / 2.)
    fluxes = aperture_photometry(array, apertures, method='exact')
    return np.array(fluxes['aperture_sum'])


def snr(array, source_xy, fwhm, full_output=False,
        exclude_negative_lobes=False, verbose=False):
    """
    Calculate the S/N (signal to noise ratio) of a test resolution element
    in a residual frame (e.g. post-processed with PCA). Implements the
    approach described in Mawet et al. 2014 on small sample statistics, where
    a student t-test (eq. 9) can be used to determine S/N (and contrast) in
    high contrast imaging.

    *** DISCLAIMER ***
    Signal-to-noise ratio is not significance! For a conversion from snr to
    n-sigma (i.e. the equivalent confidence level of a Gaussian n-sigma), use
    the ``snr_to_significance`` function.

    Parameters
    ----------
    array : numpy ndarray, 2d
        Post-processed frame where we want to measure S/N.
    source_xy : tuple of floats
        X and Y coordinates of the planet or test speckle.
    fwhm : float
        Size in pixels of the FWHM.
    full_output : bool, optional
        If True returns back the S/N value, the y, x input coordinates, noise
        and flux.
    exclude_negative_lobes : bool, opt
        Whether to include the adjacent aperture lobes to the tested location
        or not. Can be set to True if the image shows significant neg lobes.
    verbose: bool, optional
        Chooses whether to print some output or not.

    Returns
    -------
    sourcey : numpy ndarray
        [full_output=True] Input coordinates (``source_xy``) in Y.
    sourcex : numpy ndarray
        [full_output=True] Input coordinates (``source_xy``) in X.
    f_source : float
        [full_output=True] Flux in test element.
    fluxes : numpy ndarray
        [full_output=True] Background apertures fluxes.
    snr_vale : float
        Value of the S/N for the given test resolution element. ``nan`` when
        the test element is too close to the center (``sep <= fwhm/2 + 1``).
    """
    check_array(array, dim=2, msg='array')
    if not isinstance(source_xy, tuple):
        raise TypeError("`source_xy` must be a tuple of floats")
    sourcex, sourcey = source_xy

    fluxes = _ring_fluxes(array, source_xy, fwhm, exclude_negative_lobes)
    if fluxes is None:
        if verbose:
            print('`source_xy` is too close to the frame center')
        if full_output:
            return sourcey, sourcex, np.nan, np.array([]), np.nan
        return np.nan

    f_source = fluxes[0].copy()
    fluxes = fluxes[1:]
    n2 = fluxes.shape[0]
    backgr_apertures_std = fluxes.std(ddof=1)
    snr_vale = (f_source - fluxes.mean()) / (backgr_apertures_std *
                                             np.sqrt(1 + (1 / n2)))

    if verbose:
        msg1 = 'S/N for the given pixel = {:.3f}'
        msg2 = 'Integrated flux in FWHM test aperture = {:.3f}'
        msg3 = 'Mean of background apertures integrated fluxes = {:.3f}'
        msg4 = 'Std-dev of background apertures integrated fluxes = {:.3f}'
        print(msg1.format(snr_vale))
        print(msg2.format(f_source))
        print(msg3.format(fluxes.mean()))
        print(msg4.format(backgr_apertures_std))

    if full_output:
        return sourcey, sourcex, f_source, fluxes, snr_vale
    return snr_vale


def noise(array, source_xy, fwhm):
    """
    Standard deviation (ddof=1) of the integrated fluxes in the background
    apertures of the ring passing by ``source_xy``. ``nan`` when the location
    is too close to the center.
    """
    check_array(array, dim=2, msg='array')
    fluxes = _ring_fluxes(array, source_xy, fwhm)
    if fluxes is None:
        return np.nan
    return fluxes[1:].std(ddof=1)


def _dof(rad, fwhm):
    return 2 * np.pi * np.asarray(rad, dtype=float) / fwhm - 2


def snr_to_significance(snr, rad, fwhm):
    """ Converts a S/N ratio (measured as in Mawet et al. 2014) into the
    equivalent gaussian significance, i.e. the n-sigma with the same
    confidence level as the S/N at the given separation.

    Parameters
    ----------
    snr : float or numpy array
        SNR value(s)
    rad : float or numpy array
        Radial separation(s) from the star in pixels. If an array, it should
        have the same shape as ``snr``.
    fwhm : float
        Full Width Half Maximum of the PSF.

    Returns
    -------
    sigma : float or numpy array
        Gaussian significance in terms of n-sigma. ``nan`` where the number of
        degrees of freedom (``2*pi*rad/fwhm - 2``) is not positive.

    """
    dof = _dof(rad, fwhm)
    snr = np.asarray(snr, dtype=float)
    snr, dof = np.broadcast_arrays(snr, dof)
    sigma = np.full(snr.shape, np.nan)
    valid = (dof > 0) & np.isfinite(snr)
    # survival functions keep the precision for high S/N
    sigma[valid] = norm.isf(t.sf(snr[valid], dof[valid]))
    if sigma.ndim == 0:
        return float(sigma)
    return sigma


def significance_to_snr(sigma, rad, fwhm):
    """ Inverse of ``snr_to_significance``: Student S/N with the same
    confidence level as a gaussian ``sigma`` at separation ``rad``. """
    dof = _dof(rad, fwhm)
    sigma = np.asarray(sigma, dtype=float)
    sigma, dof = np.broadcast_arrays(sigma, dof)
    snr_value = np.full(sigma.shape, np.nan)
    valid = (dof > 0) & np.isfinite(sigma)
    snr_value[valid] = t.isf(norm.sf(sigma[valid]), dof[valid])
    if snr_value.ndim == 0:
        return float(snr_value)
    return snr_value


def significance(array, source_xy, fwhm):
    """
    Gaussian significance of the test resolution element at ``source_xy``:
    its S/N converted with ``snr_to_significance`` at its separation.
    """
    sourcex, sourcey = source_xy
    centery, centerx = frame_center(array)
    sep = dist(centery, centerx, float(sourcey), float(sourcex))
    return snr_to_significance(snr(array, source_xy, fwhm), sep, fwhm)


def detection_map(array, fwhm, method=None, fill=0, nproc=1, verbose=True):
    """
    Evaluate a detection statistic for every pixel of a residual frame.

    Parameters
    ----------
    array : numpy ndarray
        Input frame (2d array).
    fwhm : float
        Size in pixels of the FWHM.
    method : callable, optional
        Statistic ``method(array, (x, y), fwhm) -> float``. Defaults to
        ``snr``.
    fill : float, optional
        Value given to the pixels outside the evaluated annulus and to
        non-finite values.
    nproc : int or None
        Number of processes for parallel computing.
    verbose: bool, optional
        Whether to print timing or not.

    Returns
    -------
    detmap : 2d numpy ndarray
        Map of the statistic. Only the pixels with
        ``fwhm/2 + 2 <= r < min(shape)/2 - fwhm + 2`` are evaluated.

    """
    if verbose:
        start_time = time_ini()
    check_array(array, dim=2, msg='array')
    if method is None:
        method = snr
    if not callable(method):
        raise TypeError('`method` must be a callable')

    sizey, sizex = array.shape
    detmap = np.full_like(array, fill, dtype=float)
    width = min(sizey, sizex) / 2 - 1.5 * fwhm
    if width > 0:
        yy, xx = get_annulus_segments(array, (fwhm / 2) + 2, width)[0]
        coords = [(int(x), int(y)) for (x, y) in zip(xx, yy)]
        res = pool_map(nproc, method, array, iterable(coords), fwhm,
                       msg='Computing detection map', verbose=verbose)
        values = np.array(res, dtype=float)
        values[~np.isfinite(values)] = fill
        detmap[yy, xx] = values

    if verbose:
        print("Detection map created using {} processes".format(nproc))
        timing(start_time)
    return detmap


def snrmap(array, fwhm, **kwargs):
    """
    Parallel implementation of the S/N map generation function. Applies the
    S/N function (small samples penalty) at each pixel. See ``detection_map``
    for the keyword arguments.
    """
    return detection_map(array, fwhm, method=snr, **kwargs)
