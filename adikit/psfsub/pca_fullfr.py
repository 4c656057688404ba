#! /usr/bin/env python

"""
PCA based model PSF subtraction for ADI sequences, see [AMA12]_ and [SOU12]_.
The principal components are computed either with a full (deterministic) SVD
or with a randomized truncated SVD.

.. [AMA12]
   | Amara & Quanz 2012
   | **PYNPOINT: an image processing package for finding exoplanets**
   | *MNRAS, Volume 427, Issue 1, pp. 948-955*
   | `https://arxiv.org/abs/1207.6637
     <https://arxiv.org/abs/1207.6637>`_

.. [SOU12]
   | Soummer, Pueyo & Larkin 2012
   | **Detection and Characterization of Exoplanets and Disks Using
     Projections on Karhunen-Loève Eigenimages**
   | *The Astrophysical Journal Letters, Volume 755, Issue 2, p. 28*
   | `https://arxiv.org/abs/1207.4197
     <https://arxiv.org/abs/1207.4197>`_

"""

__all__ = ['PCA',
           'TPCA']

from dataclasses import dataclass

import numpy as np

from ..config.paramenum import SvdMode
from ..preproc import find_indices_adi
from .adi_algo import ADIAlgorithm
from .svd import decompose


class _LinearAlgorithm(ADIAlgorithm):
    """ Shared ``reduce`` of the subspace projection algorithms. """

    def _decompose(self, matrix, matrix_ref, ncomp, verbose):
        raise NotImplementedError

    def decompose(self, matrix, matrix_ref=None):
        """
        Principal components of ``matrix_ref`` (``matrix`` by default) and
        the projection weights of ``matrix``.

        Returns
        -------
        basis : numpy ndarray, 2d
            [k x n_pixels] components.
        weights : numpy ndarray, 2d
            [n_frames x k] weights.
        """
        return self._decompose(matrix, matrix_ref, self.ncomp, self.verbose)

    def reconstruct(self, matrix, matrix_ref=None):
        """ Low-rank model of ``matrix``. """
        basis, weights = self.decompose(matrix, matrix_ref)
        return np.dot(weights, basis)

    def reduce(self, matrix, angle_list, pa_threshold=0, nframes=None):
        """
        Subtract the low-rank model from each frame.

        With ``pa_threshold`` > 0 the components are learned separately for
        every frame, on all the frames outside its exclusion zone, and
        ``ncomp`` is clipped to the size of this library. ``nframes`` is not
        used: the library is never truncated.
        """
        if pa_threshold == 0:
            return matrix - self.reconstruct(matrix)

        if self.ncomp is not None and self.ncomp > matrix.shape[0]:
            raise ValueError('ncomp ({}) cannot be larger than the number of '
                             'frames ({})'.format(self.ncomp, matrix.shape[0]))

        residuals = np.empty_like(matrix)
        for fr in range(matrix.shape[0]):
            ind = find_indices_adi(angle_list, fr, pa_threshold)
            matrix_ref = matrix[ind]
            ncomp = matrix_ref.shape[0] if self.ncomp is None else \
                min(self.ncomp, matrix_ref.shape[0])
            basis, weights = self._decompose(matrix[fr:fr + 1], matrix_ref,
                                             ncomp, self.verbose)
            residuals[fr] = matrix[fr] - np.dot(weights, basis)[0]
        return residuals


@dataclass
class PCA(_LinearAlgorithm):
    """
    PCA with a full SVD.

    Parameters
    ----------
    ncomp : int or None, optional
        Number of principal components. None means as many as reference
        frames.
    pratio : float, optional
        Target ratio of the cumulative normalized singular value sum, the
        basis is truncated as soon as it is reached. 1.0 disables the cutoff.

    Examples
    --------
    .. code:: python

        from adikit.psfsub import PCA
        frame = PCA(ncomp=5)(cube, angle_list)

    """

    ncomp: int = None
    pratio: float = 1.0

    def _decompose(self, matrix, matrix_ref, ncomp, verbose):
        return decompose(matrix, ncomp=ncomp, pratio=self.pratio,
                         svd_mode=SvdMode.LAPACK, matrix_ref=matrix_ref,
                         verbose=verbose)


@dataclass
class TPCA(_LinearAlgorithm):
    """
    PCA with a randomized truncated SVD ([HAL09]_), faster for large
    matrices. The rank is always ``ncomp`` and the result varies slightly
    between runs unless ``random_state`` is fixed.

    Parameters
    ----------
    ncomp : int or None, optional
        Number of principal components.
    random_state : int, RandomState instance or None, optional
        Seed of the randomized SVD.

    """

    ncomp: int = None
    random_state: int = None

    def _decompose(self, matrix, matrix_ref, ncomp, verbose):
        return decompose(matrix, ncomp=ncomp, svd_mode=SvdMode.RANDSVD,
                         matrix_ref=matrix_ref, random_state=self.random_state,
                         verbose=verbose)
