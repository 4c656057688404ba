#! /usr/bin/env python

"""
Module with the common interface of the ADI reduction algorithms.

Every algorithm turns a data matrix [n_frames x n_pixels] into a residual
matrix of the same shape through its ``reduce`` method. Calling the algorithm
on a cube applies ``reduce`` to the full frames, de-rotates the residuals and
collapses them into the final frame.
"""

__all__ = ['ADIAlgorithm',
           'MatrixFunction']

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

import numpy as np

from ..config import time_ini, timing
from ..config.paramenum import Collapse, Imlib, Interpolation
from ..config.utils_conf import check_array
from ..preproc import check_pa_vector, cube_collapse, cube_derotate


@dataclass(kw_only=True)
class ADIAlgorithm:
    """
    Base class of the ADI reduction algorithms.

    Parameters
    ----------
    collapse : Enum, see `adikit.config.paramenum.Collapse`
        Sets how temporal residual frames should be combined to produce an
        ADI image.
    imlib : Enum, see `adikit.config.paramenum.Imlib`
        See the documentation of ``adikit.preproc.frame_rotate``.
    interpolation : Enum, see `adikit.config.paramenum.Interpolation`
        See the documentation of ``adikit.preproc.frame_rotate``.
    nproc : None or int, optional
        Number of processes for parallel computing. If None the number of
        processes will be set to cpu_count()/2.
    dtype : numpy dtype, optional
        Floating point precision of the whole reduction. The input cube is
        cast once when the algorithm is called.
    verbose : bool or int, optional
        If True prints to stdout intermediate info. 2 for more details.
    """

    collapse: Enum = Collapse.MEDIAN
    imlib: Enum = Imlib.SKIMAGE
    interpolation: Enum = Interpolation.BIQUARTIC
    nproc: int = 1
    dtype: type = np.float64
    verbose: bool = True

    def reduce(self, matrix, angle_list, pa_threshold=0, nframes=None):
        """
        Residuals of a data matrix [n_frames x n_pixels].

        Parameters
        ----------
        matrix : numpy ndarray, 2d
            Data matrix, one row per frame.
        angle_list : numpy ndarray, 1d
            Parallactic angles, one per row of ``matrix``.
        pa_threshold : float, optional
            Parallactic angle threshold for the reference frame selection.
            0 means that every frame is a reference.
        nframes : int or None, optional
            Number of reference frames to keep after the threshold.

        Returns
        -------
        residuals : numpy ndarray, 2d
            Same shape as ``matrix``.
        """
        raise NotImplementedError

    def residuals(self, cube, angle_list):
        """ Residual cube of the full-frame reduction (not de-rotated). """
        n, y, x = cube.shape
        matrix = cube.reshape(n, -1)
        res = self.reduce(matrix, angle_list)
        return res.reshape(n, y, x)

    def __call__(self, cube, angle_list, full_output=False, verbose=None):
        """
        Reduce an ADI cube into a final frame.

        Parameters
        ----------
        cube : numpy ndarray, 3d
            Input cube.
        angle_list : numpy ndarray, 1d
            Corresponding parallactic angle for each frame.
        full_output: bool, optional
            Whether to return the final frame only or with the intermediate
            arrays.
        verbose : bool or None, optional
            Overrides the ``verbose`` attribute for this call, on a copy of
            the algorithm.

        Returns
        -------
        cube_res : numpy ndarray, 3d
            [full_output=True] The cube of residuals.
        cube_der : numpy ndarray, 3d
            [full_output=True] The derotated cube of residuals.
        frame : numpy ndarray, 2d
            Combination of the de-rotated cube.
        """
        algo = self if verbose is None else replace(self, verbose=verbose)
        return algo._run(cube, angle_list, full_output)

    def _run(self, cube, angle_list, full_output):
        check_array(cube, 3, msg='cube')
        check_array(angle_list, 1, msg='angle_list')
        if cube.shape[0] != len(angle_list):
            raise TypeError('Input vector or parallactic angles has wrong '
                            'length')

        if self.verbose:
            start_time = time_ini()

        cube = np.asarray(cube, dtype=self.dtype)
        angle_list = check_pa_vector(angle_list)

        cube_res = self.residuals(cube, angle_list).astype(self.dtype,
                                                            copy=False)
        cube_der = cube_derotate(cube_res, angle_list, imlib=self.imlib,
                                 interpolation=self.interpolation,
                                 nproc=self.nproc)
        frame = cube_collapse(cube_der, mode=self.collapse)

        if self.verbose:
            print('Done derotating and combining')
            timing(start_time)

        if full_output:
            return cube_res, cube_der, frame
        return frame


@dataclass
class MatrixFunction(ADIAlgorithm):
    """
    Wraps a plain function ``fkt(matrix, angle_list) -> residuals`` into an
    ADI algorithm. The threshold arguments of ``reduce`` are not forwarded.
    ``fkt`` must be picklable (a module-level function) when the algorithm is
    run by ``Annular`` with ``nproc`` > 1.
    """

    fkt: Callable = None

    def __post_init__(self):
        if not callable(self.fkt):
            raise TypeError('`fkt` must be callable')

    def reduce(self, matrix, angle_list, pa_threshold=0, nframes=None):
        res = np.asarray(self.fkt(matrix, angle_list))
        if res.shape != matrix.shape:
            raise ValueError('The residuals of `{}` do not have the shape of '
                             'the input matrix'.format(self.fkt.__name__))
        return res
