#! /usr/bin/env python
"""
Module with the frame de-rotation routines for ADI and the annulus geometry
used to reject insufficiently rotated frames from the PSF reference library.
"""

__all__ = ['cube_derotate',
           'frame_rotate',
           'compute_pa_thresh',
           'define_annuli',
           'find_indices_adi']

import numpy as np
from skimage.transform import rotate

from ..config.paramenum import INTERP_ORDER, Imlib, Interpolation
from ..config.utils_conf import iterable, pool_map
from ..var import frame_center


def frame_rotate(array, angle, imlib='skimage', interpolation='biquartic',
                 cxy=None, border_mode='constant'):
    """Rotate a frame or 2D array.

    Parameters
    ----------
    array : numpy ndarray
        Input image, 2d array.
    angle : float
        Rotation angle, in degrees. A feature at position angle ``a`` ends at
        ``a - angle`` (position angles counted counterclockwise from the
        positive x axis).
    imlib : {'skimage'}, str optional
        Library used for image transformations.
    interpolation : str, optional
        One of ``nearneig``, ``bilinear``, ``biquadratic``, ``bicubic``,
        ``biquartic`` or ``biquintic``, i.e. spline orders 0 to 5.
    cxy : tuple of float, optional
        Coordinates X,Y of the point with respect to which the rotation will be
        performed. By default the rotation is done with respect to the center
        of the frame, as returned by ``adikit.var.frame_center``.
    border_mode : {'constant', 'edge', 'symmetric', 'reflect', 'wrap'}, str
        Pixel extrapolation method for handling the borders. 'constant' pads
        with zeros.

    Returns
    -------
    array_out : numpy ndarray
        Resulting frame.

    """
    if array.ndim != 2:
        raise TypeError('Input array is not a frame or 2d array')
    if imlib != Imlib.SKIMAGE:
        raise ValueError('Imlib `{}` not recognized for rotation'.format(imlib))
    try:
        order = INTERP_ORDER[Interpolation(interpolation)]
    except ValueError:
        raise ValueError('Skimage interpolation method not recognized')
    if border_mode not in ['constant', 'edge', 'symmetric', 'reflect',
                           'wrap']:
        raise ValueError('Skimage `border_mode` not recognized.')

    if cxy is None:
        cy, cx = frame_center(array)
    else:
        cx, cy = cxy

    # residual nans would propagate through the spline interpolation
    array_prep = np.nan_to_num(array, copy=True)
    array_out = rotate(array_prep, angle, order=order, center=(cx, cy),
                       cval=0, mode=border_mode, preserve_range=True)
    return array_out


def cube_derotate(array, angle_list, imlib='skimage', interpolation='biquartic',
                  cxy=None, nproc=1, border_mode='constant'):
    """Rotate a cube (3d array or image sequence) providing a vector or\
    corresponding angles.

    Serves for rotating an ADI sequence to a common north given a vector with
    the corresponding parallactic angles for each frame. Frame ``i`` is
    rotated by ``-angle_list[i]``.

    Parameters
    ----------
    array : numpy.ndarray
        Input 3d array, cube.
    angle_list : list or 1D numpy.ndarray
        Vector containing the parallactic angles.
    imlib : str, optional
        See the documentation of the ``adikit.preproc.frame_rotate`` function.
    interpolation : str, optional
        See the documentation of the ``adikit.preproc.frame_rotate`` function.
    cxy : tuple of int, optional
        Coordinates X,Y of the point with respect to which the rotation will be
        performed.
    nproc : int, optional
        Number of processes used to rotate the frames. Only useful for large
        cubes.
    border_mode : str, optional
        See the documentation of the ``adikit.preproc.frame_rotate`` function.

    Returns
    -------
    array_der : numpy ndarray
        Resulting cube with de-rotated frames.

    """
    if array.ndim != 3:
        raise TypeError('Input array is not a cube or 3d array.')
    angle_list = np.asarray(angle_list)

    res = pool_map(nproc, frame_rotate, iterable(array), iterable(-angle_list),
                   imlib, interpolation, cxy, border_mode)
    return np.array(res, dtype=array.dtype)


def compute_pa_thresh(ann_center, fwhm, delta_rot=1):
    """Compute the parallactic angle threshold [degrees].

    Replacing approximation: delta_rot * (fwhm/ann_center) / np.pi * 180
    """
    return np.rad2deg(2 * np.arctan(delta_rot * fwhm / (2 * ann_center)))


def define_annuli(angle_list, ann, n_annuli, fwhm, radius_int, annulus_width,
                  delta_rot=1, verbose=False):
    """Define and return the requested annuli geometry: parallactic angle\
    threshold, inner radius and annulus center for each annulus.

    The last annulus starts one pixel further in, so that the region covered
    by the annuli has no gap at its outer edge. The threshold is capped at
    90% of half the total rotation of ``angle_list``, otherwise the innermost
    annuli would reject every frame.

    Parameters
    ----------
    angle_list : numpy ndarray, 1d
        Vector of parallactic angles.
    ann : int or array of int
        Annulus index (or indices), starting at zero.
    n_annuli : int
        Total number of annuli.
    fwhm : float
        FWHM in pixels.
    radius_int : int
        Inner radius of the first annulus.
    annulus_width : int
        Width of the annuli, in pixels.
    delta_rot : float, optional
        Rotation threshold expressed in FWHM at the annulus center.
    verbose : bool, optional
        Print the geometry of each annulus.

    Returns
    -------
    pa_threshold, inner_radius, ann_center : float or numpy ndarray
        Same shape as ``ann``.

    """
    ann = np.asarray(ann)
    inner_radius = radius_int + ann * annulus_width
    inner_radius = np.where(ann == n_annuli - 1, inner_radius - 1,
                            inner_radius)
    ann_center = inner_radius + annulus_width / 2
    pa_threshold = compute_pa_thresh(ann_center, fwhm, delta_rot)

    mid_range = np.abs(np.amax(angle_list) - np.amin(angle_list)) / 2
    max_pa_threshold = 0.9 * mid_range
    pa_threshold = np.where(pa_threshold >= max_pa_threshold,
                            max_pa_threshold, pa_threshold)

    if verbose:
        for a, thr, cen in zip(np.atleast_1d(ann), np.atleast_1d(pa_threshold),
                               np.atleast_1d(ann_center)):
            print('Ann {}    PA thresh: {:5.2f}    Ann center: '
                  '{:3.0f}'.format(a + 1, thr, cen))

    if ann.ndim == 0:
        return float(pa_threshold), float(inner_radius), float(ann_center)
    return pa_threshold, inner_radius, ann_center


def find_indices_adi(angle_list, frame, thr, nframes=None):
    """Return the indices of the frames left in the PSF reference library of\
    ``frame`` after the parallactic angle exclusion.

    Parameters
    ----------
    angle_list : numpy ndarray, 1d
        Vector of parallactic angle (PA) for each frame.
    frame : int
        Index of the current frame for which we are applying the PA threshold.
    thr : float
        PA threshold.
    nframes : int or None, optional
        Number of indices to be left, the ``nframes//2`` closest frames on
        each side of the exclusion zone. If None then all the indices outside
        the exclusion zone are returned.

    Returns
    -------
    indices : numpy ndarray, 1d
        Sorted vector with the indices left. Never empty when the sequence
        has more than one frame: if every other frame lies inside the
        exclusion zone, the most rotated frames are used instead.

    """
    angle_list = np.asarray(angle_list)
    n = angle_list.shape[0]
    dpa = np.abs(angle_list - angle_list[frame])

    inside_prev = np.flatnonzero(dpa[:frame] < thr)
    index_prev = inside_prev[0] if inside_prev.size else frame
    outside_foll = np.flatnonzero(dpa[frame:] > thr)
    index_foll = frame + outside_foll[0] if outside_foll.size else n

    if nframes is not None:
        window = nframes // 2
        half1 = np.arange(max(index_prev - window, 0), index_prev)
        half2 = np.arange(index_foll, min(index_foll + window, n))
    else:
        half1 = np.arange(0, index_prev)
        half2 = np.arange(index_foll, n)
    indices = np.concatenate([half1, half2]).astype(int)

    if indices.size == 0 and n > 1:
        nkeep = min(max(nframes or 2, 2), n - 1)
        others = np.delete(np.arange(n), frame)
        farthest = others[np.argsort(-dpa[others], kind='stable')[:nkeep]]
        indices = np.sort(farthest)

    return indices
