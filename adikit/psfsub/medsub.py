#! /usr/bin/env python
"""
Implementation of a median subtraction algorithm for model PSF subtraction in
high-contrast imaging sequences. Median-ADI was originally proposed in [MAR06]_.

.. [MAR06]
   | Marois et al. 2006
   | **Angular Differential Imaging: A Powerful High-Contrast Imaging
     Technique**
   | *The Astrophysical Journal, Volume 641, Issue 1, pp. 556-564*
   | `https://arxiv.org/abs/astro-ph/0512335
     <https://arxiv.org/abs/astro-ph/0512335>`_

"""

__all__ = ["median_sub", "MedianSub", "MEDIAN_SUB_Params"]

from dataclasses import dataclass
from enum import Enum
from typing import List

import numpy as np

from ..config import time_ini, timing
from ..config.paramenum import Collapse, Imlib, Interpolation, Mode
from ..config.utils_conf import check_array
from ..config.utils_param import build_params
from ..preproc import (check_pa_vector, cube_collapse, cube_derotate,
                       find_indices_adi)
from .adi_algo import ADIAlgorithm
from .annular import Annular


@dataclass
class MedianSub(ADIAlgorithm):
    """
    Median subtraction. On full frames, the temporal median frame is
    subtracted. Inside ``Annular``, each frame gets the median of its
    ``nframes`` closest frames outside the exclusion zone subtracted.
    """

    def reduce(self, matrix, angle_list, pa_threshold=0, nframes=None):
        if pa_threshold == 0:
            return matrix - np.nanmedian(matrix, axis=0)

        matrix_res = np.zeros_like(matrix)
        # For each frame we find ``nframes``, depending on the PA threshold,
        # to construct the optimized psf reference
        for frame in range(matrix.shape[0]):
            indices_left = find_indices_adi(angle_list, frame, pa_threshold,
                                            nframes)
            ref_psf_opt = np.nanmedian(matrix[indices_left], axis=0)
            matrix_res[frame] = matrix[frame] - ref_psf_opt
        return matrix_res


@dataclass
class MEDIAN_SUB_Params:
    """
    Set of parameters for the median subtraction module.

    See function `median_sub` for documentation.
    """

    cube: np.ndarray = None
    angle_list: np.ndarray = None
    fwhm: float = 4
    radius_int: int = 0
    asize: int = 4
    delta_rot: float = 1
    mode: Enum = Mode.FULLFR
    nframes: int = 4
    imlib: Enum = Imlib.SKIMAGE
    interpolation: Enum = Interpolation.BIQUARTIC
    collapse: Enum = Collapse.MEDIAN
    nproc: int = 1
    full_output: bool = False
    verbose: bool = True


def median_sub(*all_args: List, **all_kwargs: dict):
    """Perform (smart) median-ADI, see [MAR06]_.

    Parameters
    ----------
    all_args: list, optional
        Positionnal arguments for the median_sub algorithm. Full list of
        parameters is provided below.
    all_kwargs: dictionary, optional
        Keyword arguments that can initialize a MEDIAN_SUB_Params. Can also
        contain a MEDIAN_SUB_Params object/dictionary named ``algo_params``.

    Parameters
    ----------
    cube : numpy ndarray, 3d
        Input cube.
    angle_list : numpy ndarray, 1d
        Corresponding parallactic angle for each frame.
    fwhm : float
        Known size of the FWHM in pixels to be used. Default is 4.
    radius_int : int, optional
        The radius of the innermost annulus. By default is 0, if >0 then the
        central circular area is discarded.
    asize : int, optional
        The size of the annuli, in pixels.
    delta_rot : float, optional
        Factor for increasing the parallactic angle threshold, expressed in
        FWHM. Default is 1 (excludes 1 FWHM on each side of the considered
        frame).
    mode : {'fullfr', 'annular'}, str optional
        In ``fullfr`` mode only the median frame is subtracted, in ``annular``
        mode also the median of the ``nframes`` closest frames given a PA
        threshold (annulus-wise) is subtracted.
    nframes : int or None, optional
        Number of frames (even value) to be used for building the optimized
        reference PSF when working in ``annular`` mode. None means that all
        frames, excluding the thresholded ones, are used.
    imlib : Enum, see `adikit.config.paramenum.Imlib`
        See the documentation of ``adikit.preproc.frame_rotate``.
    interpolation : Enum, see `adikit.config.paramenum.Interpolation`
        See the documentation of the ``adikit.preproc.frame_rotate`` function.
    collapse : Enum, see `adikit.config.paramenum.Collapse`
        Sets how temporal residual frames should be combined to produce an
        ADI image.
    nproc : None or int, optional
        Number of processes for parallel computing. If None the number of
        processes will be set to cpu_count()/2. By default the algorithm works
        in single-process mode.
    full_output: bool, optional
        Whether to return the final median combined image only or with other
        intermediate arrays.
    verbose : bool, optional
        If True prints to stdout intermediate info.

    Returns
    -------
    cube_out : numpy ndarray, 3d
        [full_output=True] The cube of residuals.
    cube_der : numpy ndarray, 3d
        [full_output=True] The derotated cube of residuals.
    frame : numpy ndarray, 2d
        Median combination of the de-rotated cube.

    """
    algo_params, _ = build_params(MEDIAN_SUB_Params, all_args, all_kwargs)

    check_array(algo_params.cube, 3, msg='cube')
    array = algo_params.cube.copy()
    if array.shape[0] != len(algo_params.angle_list):
        raise TypeError('Input vector or parallactic angles has wrong length')
    if algo_params.nframes is not None and algo_params.nframes % 2 != 0:
        raise ValueError('`nframes` argument must be even value')
    if algo_params.mode not in (Mode.FULLFR, Mode.ANNULAR):
        raise ValueError("Mode `{}` not recognized".format(algo_params.mode))

    if algo_params.verbose:
        start_time = time_ini()

    angle_list = check_pa_vector(algo_params.angle_list)
    array = array - np.median(array, axis=0)

    if algo_params.mode == Mode.ANNULAR:
        annular = Annular(MedianSub(), fwhm=algo_params.fwhm,
                          asize=algo_params.asize,
                          radius_int=algo_params.radius_int,
                          nframes=algo_params.nframes,
                          delta_rot=algo_params.delta_rot,
                          nproc=algo_params.nproc,
                          verbose=algo_params.verbose)
        cube_out = annular.residuals(array, angle_list)
        if algo_params.verbose:
            print('Optimized median psf reference subtracted')
    else:
        cube_out = array
        if algo_params.verbose:
            print('Median psf reference subtracted')

    cube_der = cube_derotate(cube_out, angle_list, imlib=algo_params.imlib,
                             interpolation=algo_params.interpolation,
                             nproc=algo_params.nproc)
    frame = cube_collapse(cube_der, mode=algo_params.collapse)

    if algo_params.verbose:
        print('Done derotating and combining')
        timing(start_time)
    if algo_params.full_output:
        return cube_out, cube_der, frame
    return frame
