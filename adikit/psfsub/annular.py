#! /usr/bin/env python

"""
Annular ADI reduction: the frames are split in concentric annuli, each one
reduced independently by an ADI algorithm with its own parallactic angle
threshold, and the residuals are assembled back into full frames.
"""

__all__ = ['Annular']

from dataclasses import dataclass
from typing import Callable, List, Union

import numpy as np

from ..config.utils_conf import iterable, pool_map
from ..preproc import define_annuli
from ..var import get_annulus_segments
from .adi_algo import ADIAlgorithm, MatrixFunction


def _as_algorithm(algo):
    if isinstance(algo, ADIAlgorithm):
        return algo
    if callable(algo):
        return MatrixFunction(algo)
    raise TypeError('`algo` must be an ADIAlgorithm or a callable')


def _reduce_annulus(algo, matrix, angle_list, pa_threshold, nframes):
    return algo.reduce(matrix, angle_list, pa_threshold=pa_threshold,
                       nframes=nframes)


@dataclass
class Annular(ADIAlgorithm):
    """
    Annulus-wise ADI reduction.

    Parameters
    ----------
    algo : ADIAlgorithm, callable or list of them
        Algorithm applied to every annulus, or one algorithm per annulus.
        Plain functions ``f(matrix, angle_list) -> residuals`` are accepted.
        With ``nproc`` > 1 the algorithms are sent to worker processes, so
        plain functions must be defined at module level (no lambdas or
        nested functions).
    fwhm : float, optional
        Known size of the FWHM in pixels to be used.
    asize : int, optional
        The size of the annuli, in pixels.
    radius_int : int, optional
        The radius of the innermost annulus. By default is 0, if >0 then the
        central circular area is discarded.
    nframes : int or None, optional
        Number of reference frames passed to the per-annulus algorithm (used
        by ``MedianSub``).
    delta_rot : float, optional
        Factor for tuning the parallactic angle threshold, expressed in FWHM.
        Default is 1 (excludes 1 FWHM on each side of the considered frame).

    Examples
    --------
    .. code:: python

        from adikit.psfsub import Annular, PCA
        frame = Annular(PCA(ncomp=5), fwhm=4.2)(cube, angle_list)

    """

    algo: Union[ADIAlgorithm, Callable, List] = None
    fwhm: float = 4
    asize: int = 4
    radius_int: int = 0
    nframes: int = 4
    delta_rot: float = 1

    def __post_init__(self):
        if self.algo is None:
            raise TypeError('`algo` must be provided')
        if isinstance(self.algo, (list, tuple)):
            self.algo = [_as_algorithm(a) for a in self.algo]
        else:
            self.algo = _as_algorithm(self.algo)

    def n_annuli(self, shape):
        """ Number of annuli fitting in frames of the given shape. """
        return int(round((shape[0] / 2 - self.radius_int) / self.asize))

    def annuli_indices(self, shape):
        """
        Pixel coordinates of each annulus.

        The last annulus starts one pixel further in, so the pixels it shares
        with the previous one are assigned to it only: every pixel between
        ``radius_int`` and the outer edge belongs to exactly one annulus.

        Returns
        -------
        indices : list of tuple of numpy ndarray
            ``(yy, xx)`` for each annulus.
        """
        n_annuli = self.n_annuli(shape)
        if n_annuli < 1:
            raise ValueError('No annulus fits between `radius_int` and the '
                             'frame edge')
        # the thresholds are not needed here
        _, inner_radius, _ = define_annuli(np.zeros(1), np.arange(n_annuli),
                                           n_annuli, self.fwhm,
                                           self.radius_int, self.asize)
        labels = np.full(shape, -1)
        for ann in range(n_annuli):
            yy, xx = get_annulus_segments(shape, inner_radius[ann],
                                          self.asize)[0]
            labels[yy, xx] = ann
        return [np.where(labels == ann) for ann in range(n_annuli)]

    def residuals(self, cube, angle_list):
        n, y, x = cube.shape
        n_annuli = self.n_annuli((y, x))
        if isinstance(self.algo, list):
            if len(self.algo) != n_annuli:
                raise ValueError('{} algorithms given for {} annuli'
                                 ''.format(len(self.algo), n_annuli))
            algos = self.algo
        else:
            algos = [self.algo] * n_annuli

        if self.verbose:
            print('N annuli = {}, FWHM = {:.3f}'.format(n_annuli, self.fwhm))

        pa_thr, _, _ = define_annuli(angle_list, np.arange(n_annuli),
                                     n_annuli, self.fwhm, self.radius_int,
                                     self.asize, self.delta_rot,
                                     verbose=self.verbose == 2)
        indices = self.annuli_indices((y, x))
        jobs = [ann for ann in range(n_annuli) if indices[ann][0].size > 0]

        res = pool_map(self.nproc, _reduce_annulus,
                       iterable([algos[ann] for ann in jobs]),
                       iterable([cube[:, indices[ann][0], indices[ann][1]]
                                 for ann in jobs]),
                       angle_list, iterable(pa_thr[jobs]), self.nframes,
                       msg='Processing annuli', progressbar_single=True,
                       verbose=self.verbose)

        cube_out = np.zeros_like(cube)
        for ann, matrix_res in zip(jobs, res):
            yy, xx = indices[ann]
            cube_out[:, yy, xx] = matrix_res
        return cube_out
