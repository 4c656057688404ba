#! /usr/bin/env python

"""
Module with contrast curve generation function.
"""

__all__ = ['CONTRAST_CURVE_Params',
           'contrast_curve',
           'throughput',
           'subsample_contrast',
           'calculate_contrast',
           'correction_factor',
           'aperture_flux',
           'annulus_noise',
           'estimate_starphot']

import dataclasses
import inspect
from dataclasses import dataclass
from typing import Callable, List

import numpy as np
import pandas as pd
from photutils.aperture import CircularAperture, aperture_photometry
from scipy.interpolate import InterpolatedUnivariateSpline
from scipy.signal import savgol_filter
from scipy.stats import norm, t

from ..config import time_ini, timing
from ..config.utils_conf import check_array, iterable, pool_map, sep
from ..config.utils_param import build_params
from ..fm import cube_inject_companions, frame_inject_companion, normalize_psf
from ..preproc import cube_collapse
from ..var import frame_center, pol_to_cart
from .snr_source import noise


@dataclass
class CONTRAST_CURVE_Params:
    """
    Set of parameters for the contrast curve computation.

    See function `contrast_curve` for documentation.
    """

    algo: Callable = None
    cube: np.ndarray = None
    angle_list: np.ndarray = None
    psf_template: np.ndarray = None
    fwhm: float = None
    sigma: float = 5
    nbranch: int = 1
    theta: float = 0
    inner_rad: int = 1
    starphot: float = None
    fc_rad_sep: int = 3
    fc_snr: float = 100
    subsample: bool = True
    smooth: bool = True
    interp_order: int = 2
    frame_nofc: np.ndarray = None
    nproc: int = 1
    dtype: type = np.float64
    full_output: bool = False
    verbose: bool = True


def contrast_curve(*all_args: List, **all_kwargs: dict):
    """Compute the contrast curve at a given confidence (``sigma``) level for
    an ADI cube. The contrast is calculated as
    sigma*noise/(throughput*starphot), where noise is measured in the
    reduced frame without fake companions and the throughput comes from
    ``throughput``. A Student-t corrected contrast, accounting for the small
    number of resolution elements at small separations (Mawet et al. 2014),
    is also returned.

    Parameters
    ----------
    all_args: list, optional
        Positionnal arguments for the contrast_curve function. Full list of
        parameters is provided below.
    all_kwargs: dictionary, optional
        Keyword arguments that can initialize a CONTRAST_CURVE_Params. Can
        also contain a CONTRAST_CURVE_Params object/dictionary named
        ``algo_params``. The keywords that are not fields of
        CONTRAST_CURVE_Params are passed to ``algo``.

    Parameters
    ----------
    algo : callable
        Post-processing algorithm, called as ``algo(cube, angle_list,
        **kwargs)`` and returning a frame. Instances of the ``adikit.psfsub``
        algorithms qualify.
    cube : numpy ndarray, 3d
        The input cube, without fake companions.
    angle_list : numpy ndarray, 1d
        Vector with the parallactic angles.
    psf_template : numpy ndarray, 2d
        Odd-sized frame with the PSF template for the fake companion(s).
    fwhm: float
        FWHM in pixels.
    sigma : float, optional
        Sigma level for contrast calculation.
    nbranch : int, optional
        Number of branches on which to inject fakes companions.
    theta : float, optional
        Angle in degrees for rotating the position of the first branch that by
        default is located at zero degrees. Theta counts counterclockwise from
        the positive x axis.
    inner_rad : int, optional
        Innermost radial distance to be considered in terms of FWHM.
    starphot : float or None, optional
        Integrated flux of the star. By default it is measured in an aperture
        of diameter ``fwhm`` at the center of the median frame of ``cube``.
    fc_rad_sep : int, optional
        Radial separation between the injected companions (in each of the
        patterns) in FWHM. Must be large enough to avoid overlapping.
    fc_snr: float optional
        Signal to noise ratio of injected fake companions (w.r.t a Gaussian
        distribution).
    subsample : bool, optional
        Whether to sample the curve at every pixel instead of every FWHM.
    smooth : bool, optional
        Whether to smooth the subsampled noise with a Savitzky-Golay filter.
    interp_order : int, optional
        Order of the spline used to interpolate the throughput when
        ``subsample`` is True.
    frame_nofc : 2d numpy ndarray, optional
        Reduced frame of ``cube`` without fake companions. Computed with
        ``algo`` if not provided.
    nproc : None or int, optional
        Number of processes for parallel computing of the throughput.
    dtype : numpy dtype, optional
        Precision of the computation. The cube is cast once at the beginning.
    full_output: bool, optional
        Whether to return the final contrast curve only or with other
        intermediate arrays.
    verbose : {True, False, 0, 1, 2}, optional
        If True or 1, prints to stdout the timing and additional info. If 2
        the throughput computation is also verbose.

    Returns
    -------
    datafr : pandas.DataFrame
        Columns ``distance``, ``throughput``, ``contrast``, ``contrast_corr``
        and ``noise``, sorted by distance.
    frame_fc_all : numpy ndarray
        [full_output=True] 3d array with the reduced frames with fake
        companions, one per branch and pattern.
    frame_nofc : numpy ndarray
        [full_output=True] 2d array, reduced frame without fake companions.
    fc_map_all : numpy ndarray
        [full_output=True] 3d array with the fake companion maps.

    """
    algo_params, algo_dict = build_params(CONTRAST_CURVE_Params, all_args,
                                          all_kwargs)

    check_array(algo_params.cube, 3, msg='cube')
    check_array(algo_params.psf_template, 2, msg='psf_template')
    if algo_params.fwhm is None:
        raise TypeError('`fwhm` must be provided')
    if not callable(algo_params.algo):
        raise TypeError('`algo` must be a callable')

    cube = np.asarray(algo_params.cube, dtype=algo_params.dtype)
    fwhm = algo_params.fwhm
    starphot = algo_params.starphot
    if starphot is None:
        starphot = estimate_starphot(cube, fwhm)

    if algo_params.verbose:
        start_time = time_ini()
        msg0 = 'ALGO : {}, FWHM = {}, # BRANCHES = {}, SIGMA = {},'
        msg0 += ' STARPHOT = {:.3f}'
        print(msg0.format(_algo_name(algo_params.algo), fwhm,
                          algo_params.nbranch, algo_params.sigma, starphot))
        print(sep)

    res_throug = throughput(algo_params.algo, cube, algo_params.angle_list,
                            algo_params.psf_template, fwhm,
                            nbranch=algo_params.nbranch,
                            theta=algo_params.theta,
                            inner_rad=algo_params.inner_rad,
                            fc_rad_sep=algo_params.fc_rad_sep,
                            fc_snr=algo_params.fc_snr,
                            frame_nofc=algo_params.frame_nofc,
                            nproc=algo_params.nproc, full_output=True,
                            verbose=algo_params.verbose == 2, **algo_dict)
    thruput_arr, vector_radd, noise_radd = res_throug[:3]
    frame_fc_all, frame_nofc, fc_map_all = res_throug[3:]
    thruput_mean = np.nanmean(thruput_arr, axis=0)

    if algo_params.verbose:
        print('Finished the throughput calculation')
        timing(start_time)

    if algo_params.subsample:
        datafr = subsample_contrast(frame_nofc, vector_radd, thruput_mean,
                                    fwhm, starphot, sigma=algo_params.sigma,
                                    theta=algo_params.theta,
                                    smooth=algo_params.smooth,
                                    interp_order=algo_params.interp_order)
    else:
        unit_contrast = noise_radd / (thruput_mean * starphot)
        sigma_corr = correction_factor(vector_radd, fwhm, algo_params.sigma)
        datafr = pd.DataFrame({
            'distance': vector_radd,
            'throughput': thruput_mean,
            'contrast': calculate_contrast(algo_params.sigma, unit_contrast),
            'contrast_corr': calculate_contrast(sigma_corr, unit_contrast),
            'noise': noise_radd})
        datafr = datafr.sort_values('distance', ignore_index=True)

    if algo_params.verbose:
        print('Finished the contrast curve calculation')
        timing(start_time)

    if algo_params.full_output:
        return datafr, frame_fc_all, frame_nofc, fc_map_all
    return datafr


def _algo_name(algo):
    return getattr(algo, '__name__', type(algo).__name__)


def _algo_kwargs(algo, algo_dict, nproc):
    """ Keywords for a silent run of ``algo``, and the algorithm itself with a
    single process when the throughput patterns run in parallel. """
    algo_kwargs = dict(algo_dict)
    try:
        params = inspect.signature(algo).parameters
    except (TypeError, ValueError):
        params = {}
    if 'verbose' in params and 'verbose' not in algo_kwargs:
        algo_kwargs['verbose'] = False
    if nproc is None or nproc > 1:
        if dataclasses.is_dataclass(algo) and hasattr(algo, 'nproc'):
            algo = dataclasses.replace(algo, nproc=1)
        elif 'nproc' in algo_kwargs:
            algo_kwargs['nproc'] = 1
    return algo, algo_kwargs


def _throughput_pattern(algo, cube, angle_list, psf_template, radii, fluxes,
                        theta, algo_kwargs):
    """ Inject one pattern of companions along a branch, reduce the cube and
    return the reduced frame and the noiseless companion map. """
    fc_map = np.zeros_like(cube[0])
    cy, cx = frame_center(cube[0])
    fluxes = np.asarray(fluxes, dtype=float)
    cube_fc = cube_inject_companions(cube, psf_template, angle_list,
                                     fluxes[:, np.newaxis], rad_dists=radii,
                                     theta=theta)
    for rad, flux in zip(radii, fluxes):
        y, x = pol_to_cart(rad, theta, cy, cx)
        fc_map = frame_inject_companion(fc_map, psf_template, y, x, flux)
    frame_fc = algo(cube_fc, angle_list, **algo_kwargs)
    return frame_fc, fc_map


def throughput(algo, cube, angle_list, psf_template, fwhm, nbranch=1,
               theta=0, inner_rad=1, fc_rad_sep=3, fc_snr=100,
               frame_nofc=None, nproc=1, full_output=False, verbose=True,
               **algo_dict):
    """ Measures the throughput for chosen algorithm and input dataset (ADI
    cube). The final throughput is the average of the same procedure
    measured in ``nbranch`` azimutally equidistant branches.

    Parameters
    ----------
    algo : callable
        Post-processing algorithm, called as ``algo(cube, angle_list,
        **algo_dict)``.
    cube : numpy ndarray, 3d
        The input cube, without fake companions.
    angle_list : numpy ndarray, 1d
        Vector with the parallactic angles.
    psf_template : numpy ndarray, 2d
        Odd-sized frame with the PSF template for the fake companion(s). It is
        normalized to a unit flux in a FWHM aperture before injection.
    fwhm: float
        The FWHM in pixels.
    nbranch : int, optional
        Number of branches on which to inject fakes companions. Each branch
        is tested individually.
    theta : float, optional
        Angle in degrees for rotating the position of the first branch that by
        default is located at zero degrees. Theta counts counterclockwise from
        the positive x axis.
    inner_rad : int, optional
        Innermost radial distance to be considered in terms of FWHM.
    fc_rad_sep : int optional
        Radial separation between the injected companions (in each of the
        patterns) in FWHM. Must be large enough to avoid overlapping. With the
        maximum possible value, a single fake companion will be injected per
        cube and algorithm post-processing (which greatly affects computation
        time).
    fc_snr: float optional
        Signal to noise ratio of injected fake companions (w.r.t a Gaussian
        distribution).
    frame_nofc : 2d numpy ndarray, optional
        Reduced frame without fake companions. Computed with ``algo`` if not
        provided.
    nproc : None or int, optional
        Number of processes for the (branch, pattern) loop. The algorithm
        itself then runs single-process.
    full_output : bool, optional
        If True returns intermediate arrays.
    verbose : bool, optional
        If True prints out timing and information.
    **algo_dict
        Parameters of the post-processing algorithm.

    Returns
    -------
    thruput_arr : numpy ndarray
        2d array whose rows are the annulus-wise throughput values for each
        branch.
    vector_radd : numpy ndarray
        1d array with the distances where the throughput was computed.
    noise : numpy ndarray
        [full_output=True] Noise at each distance, measured in
        ``frame_nofc``.
    frame_fc_all : numpy ndarray
        [full_output=True] 3d array with the reduced frames with fake
        companions, indexed by ``branch*fc_rad_sep + pattern``.
    frame_nofc : numpy ndarray
        [full_output=True] 2d array, reduced frame without fake companions.
    fc_map_all : numpy ndarray
        [full_output=True] 3d array with the fake companion maps.

    """
    check_array(cube, 3, msg='cube')
    check_array(psf_template, 2, msg='psf_template')
    if psf_template.shape[0] % 2 == 0:
        raise ValueError('`psf_template` must be an odd-sized frame')
    if not callable(algo):
        raise TypeError('`algo` must be a callable')
    n, y, x = cube.shape
    if len(angle_list) != n:
        raise TypeError('Input vector or parallactic angles has wrong length')

    maxfcsep = int(x / (2 * fwhm)) - 1
    if fc_rad_sep < 3 or fc_rad_sep > maxfcsep:
        msg = 'Too large separation between companions in the radial '
        msg += 'patterns. Should lie between 3 and {}'
        raise ValueError(msg.format(maxfcsep))

    if verbose:
        start_time = time_ini()

    algo_single, algo_kwargs = _algo_kwargs(algo, algo_dict, nproc)
    if frame_nofc is None:
        frame_nofc = algo_single(cube, angle_list, **algo_kwargs)
        if verbose:
            msg1 = 'Cube without fake companions processed with {}'
            print(msg1.format(_algo_name(algo)))
            timing(start_time)
    check_array(frame_nofc, 2, msg='frame_nofc')

    cy, cx = frame_center(frame_nofc)
    n_annuli = int(np.floor((cy - fwhm) / fwhm)) - 1
    vector_radd = fwhm * np.arange(inner_rad, n_annuli + 1)
    if vector_radd.shape[0] == 0:
        raise ValueError('No separation between `inner_rad` and the frame '
                         'edge')
    noise_radd = np.array([annulus_noise(frame_nofc, fwhm, r, theta)
                           for r in vector_radd])
    if verbose:
        print('Measured annulus-wise noise in resulting frame')
        timing(start_time)

    psf_template = normalize_psf(psf_template, fwhm, verbose=verbose)

    angle_branch = 360 / nbranch
    jobs = []
    for br in range(nbranch):
        # each pattern holds companions separated by fc_rad_sep*fwhm
        for irad in range(fc_rad_sep):
            radvec = vector_radd[irad::fc_rad_sep]
            if radvec.shape[0] > 0:
                jobs.append((br, irad))

    res = pool_map(nproc, _throughput_pattern, algo_single, cube, angle_list,
                   psf_template,
                   iterable([vector_radd[irad::fc_rad_sep]
                             for _, irad in jobs]),
                   iterable([fc_snr * noise_radd[irad::fc_rad_sep]
                             for _, irad in jobs]),
                   iterable([theta + br * angle_branch for br, _ in jobs]),
                   algo_kwargs, msg='Injecting fake companions',
                   verbose=verbose)

    thruput_arr = np.zeros((nbranch, vector_radd.shape[0]))
    fc_map_all = np.zeros((nbranch * fc_rad_sep, y, x))
    frame_fc_all = np.zeros((nbranch * fc_rad_sep, y, x))
    for (br, irad), (frame_fc, fc_map) in zip(jobs, res):
        radvec = vector_radd[irad::fc_rad_sep]
        fcy, fcx = pol_to_cart(radvec, theta + br * angle_branch, cy, cx)
        injected_flux = aperture_flux(fc_map, fcy, fcx, fwhm)
        recovered_flux = aperture_flux(frame_fc - frame_nofc, fcy, fcx, fwhm)
        thruput = recovered_flux / injected_flux
        thruput[np.where(thruput < 0)] = 0

        thruput_arr[br, irad::fc_rad_sep] = thruput
        fc_map_all[br * fc_rad_sep + irad] = fc_map
        frame_fc_all[br * fc_rad_sep + irad] = frame_fc

        if verbose:
            msg2 = 'Fake companions injected in branch {} (pattern {}/{})'
            print(msg2.format(br + 1, irad + 1, fc_rad_sep))

    if verbose:
        msg = 'Finished measuring the throughput in {} branches'
        print(msg.format(nbranch))
        timing(start_time)

    if full_output:
        return (thruput_arr, vector_radd, noise_radd, frame_fc_all,
                frame_nofc, fc_map_all)
    return thruput_arr, vector_radd


def subsample_contrast(frame_nofc, distance, throughput, fwhm, starphot,
                       sigma=5, theta=0, smooth=True, interp_order=2):
    """
    Contrast curve sampled at every pixel between the first and the last
    distance of a throughput measurement.

    The throughput is interpolated with a spline of order ``interp_order``
    (boundary values are kept outside the measured range), while the noise is
    measured again in ``frame_nofc`` at each distance and optionally smoothed
    with a quadratic Savitzky-Golay filter.

    Returns
    -------
    datafr : pandas.DataFrame
        Columns ``distance``, ``throughput``, ``contrast``, ``contrast_corr``
        and ``noise``.
    """
    check_array(frame_nofc, 2, msg='frame_nofc')
    distance = np.asarray(distance, dtype=float)
    throughput = np.asarray(throughput, dtype=float)
    rad_samp = np.arange(distance[0], distance[-1] + 1)

    if distance.shape[0] > 1:
        k = int(min(interp_order, distance.shape[0] - 1))
        f = InterpolatedUnivariateSpline(distance, throughput, k=k, ext=3)
        thruput_interp = f(rad_samp)
    else:
        thruput_interp = np.full(rad_samp.shape, throughput[0])

    noise_samp = np.array([annulus_noise(frame_nofc, fwhm, r, theta)
                           for r in rad_samp])
    if smooth:
        win = min(noise_samp.shape[0] - 2, int(round(2 * fwhm)))
        if win % 2 == 0:
            win += 1
        # a quadratic filter needs at least 3 points
        if win >= 3:
            noise_samp = savgol_filter(noise_samp, polyorder=2,
                                       mode='nearest', window_length=win)

    unit_contrast = noise_samp / (thruput_interp * starphot)
    sigma_corr = correction_factor(rad_samp, fwhm, sigma)
    datafr = pd.DataFrame({
        'distance': rad_samp,
        'throughput': thruput_interp,
        'contrast': calculate_contrast(sigma, unit_contrast),
        'contrast_corr': calculate_contrast(sigma_corr, unit_contrast),
        'noise': noise_samp})
    return datafr


def calculate_contrast(k, unit_contrast):
    """ ``k*unit_contrast`` where it lies in [0, 1], ``nan`` elsewhere. """
    with np.errstate(invalid='ignore'):
        contrast = np.asarray(k * np.asarray(unit_contrast, dtype=float))
        contrast = np.where((contrast >= 0) & (contrast <= 1), contrast,
                            np.nan)
    if contrast.ndim == 0:
        return float(contrast)
    return contrast


def correction_factor(r, fwhm, sigma):
    """
    Sigma level corrected for small sample statistics at separation ``r``
    (Mawet et al. 2014): the Student-t quantile with ``floor(2*pi*r/fwhm)``
    degrees of freedom matching the confidence of a gaussian ``sigma``,
    times the ``sqrt(1 + 1/(nu-1))`` penalty.
    """
    n_res_els = np.floor(2 * np.pi * np.asarray(r, dtype=float) / fwhm)
    with np.errstate(divide='ignore', invalid='ignore'):
        ss_corr = np.sqrt(1 + 1 / (n_res_els - 1))
        sigma_corr = t.isf(norm.sf(sigma), n_res_els) * ss_corr
    if np.ndim(sigma_corr) == 0:
        return float(sigma_corr)
    return sigma_corr


def aperture_flux(array, yc, xc, fwhm, ap_factor=1):
    """ Returns the sum of pixel values in circular apertures centered on the
    input coordinates. The radius of the apertures is (ap_factor*fwhm)/2.

    Parameters
    ----------
    array : numpy ndarray
        Input frame.
    yc, xc : list or 1d arrays
        List of y and x coordinates of sources.
    fwhm : float
        FWHM in pixels.
    ap_factor : int, optional
        Diameter of aperture in terms of the FWHM.

    Returns
    -------
    flux : numpy ndarray
        1d array of fluxes.

    Note
    ----
    The exact overlap between the aperture and each pixel is used.

    """
    positions = np.column_stack((np.atleast_1d(xc), np.atleast_1d(yc)))
    aper = CircularAperture(positions, r=(ap_factor * fwhm) / 2)
    obj_flux = aperture_photometry(array, aper, method='exact')
    return np.array(obj_flux['aperture_sum'], dtype=float)


def annulus_noise(frame, fwhm, r, theta=0):
    """ Noise in the ring of radius ``r``, measured from the aperture placed
    at position angle ``theta``. See ``adikit.metrics.noise``. """
    cy, cx = frame_center(frame)
    y, x = pol_to_cart(r, theta, cy, cx)
    return noise(frame, (x, y), fwhm)


def estimate_starphot(array, fwhm):
    """ Integrated flux in an aperture of diameter ``fwhm`` at the center of
    a frame, or of the median frame of a cube. """
    check_array(array, (2, 3), msg='array')
    if array.ndim == 3:
        array = cube_collapse(array, mode='median')
    cy, cx = frame_center(array)
    return aperture_flux(array, [cy], [cx], fwhm)[0]
