#! /usr/bin/env python

"""
Module with functions for computing SVDs and the low-rank decomposition used
to model the stellar PSF.

.. [HAL09]
   | Halko et al. 2009
   | **Finding structure with randomness: Probabilistic algorithms for
     constructing approximate matrix decompositions**
   | *arXiv e-prints*
   | `https://arxiv.org/abs/0909.4061 <https://arxiv.org/abs/0909.4061>`_

"""

__all__ = ['svd_wrapper',
           'decompose']

import numpy as np
from numpy import linalg
from sklearn.utils.extmath import randomized_svd

from ..config.paramenum import SvdMode


def svd_wrapper(matrix, mode, ncomp, verbose=False, full_output=False,
                random_state=None):
    """ Wrapper for the SVD libraries.

    Parameters
    ----------
    matrix : numpy ndarray, 2d
        2d input matrix, shape [n_frames x n_pixels].
    mode : {'lapack', 'randsvd'}, str
        Switch for the SVD method/library to be used.

        ``lapack``: uses the LAPACK linear algebra library through Numpy
        and it is the most conventional way of computing the SVD
        (deterministic result).

        ``randsvd``: uses the randomized_svd algorithm implemented in
        Sklearn, see [HAL09]_. Only the first ``ncomp`` singular triplets are
        computed.

    ncomp : int
        Number of singular vectors to be obtained. In ``lapack`` mode the full
        SVD is computed and then truncated.
    verbose: bool
        If True intermediate information is printed out.
    full_output : bool optional
        If True the 3 terms of the SVD factorization are returned.
    random_state : int, RandomState instance or None, optional
        Seed or random number generator for ``randsvd`` mode. If None the
        result varies slightly between calls.

    Returns
    -------
    V : numpy ndarray
        The right singular vectors of the input matrix, shape
        [ncomp x n_pixels]. If ``full_output`` is True it returns the left
        singular vectors, the singular values and the right singular vectors.

    """
    if matrix.ndim != 2:
        raise TypeError('Input matrix is not a 2d array')

    if ncomp > min(matrix.shape[0], matrix.shape[1]):
        msg = '{} PCs cannot be obtained from a matrix with size [{},{}].'
        msg += ' Request less PCs'
        raise ValueError(msg.format(ncomp, matrix.shape[0], matrix.shape[1]))

    if mode == SvdMode.LAPACK:
        # n_frames is usually smaller than n_pixels. In this setting taking
        # the SVD of M' and keeping the left (transposed) SVs is faster than
        # taking the SVD of M (right SVs)
        V, S, U = linalg.svd(matrix.T, full_matrices=False)
        U = U[:ncomp].T
        S = S[:ncomp]
        V = V[:, :ncomp].T
        if verbose:
            print('Done SVD/PCA with numpy SVD (LAPACK)')

    elif mode == SvdMode.RANDSVD:
        U, S, V = randomized_svd(matrix, n_components=ncomp, n_iter=2,
                                 transpose='auto', random_state=random_state)
        if verbose:
            print('Done SVD/PCA with randomized SVD')

    else:
        raise ValueError('The SVD `mode` is not recognized')

    if full_output:
        return U, S, V
    return V


def _explained_ratio_rank(S, pratio):
    """ Smallest number of components whose cumulative normalized singular
    value sum reaches ``pratio``. """
    ratio = np.cumsum(S) / np.sum(S)
    reached = np.flatnonzero(ratio >= pratio)
    return reached[0] + 1 if reached.size else S.shape[0]


def decompose(matrix, ncomp=None, pratio=1.0, svd_mode='lapack',
              matrix_ref=None, random_state=None, verbose=False):
    """ Low-rank decomposition of a data matrix on the principal components of
    a reference matrix.

    Parameters
    ----------
    matrix : numpy ndarray, 2d
        Data matrix [n_frames x n_pixels] to be projected.
    ncomp : int or None, optional
        Requested number of principal components. If None, as many components
        as reference frames.
    pratio : float, optional
        Target ratio of the cumulative normalized singular value sum. The rank
        is reduced to the smallest number of components reaching it. 1.0 (the
        default) disables the cutoff. Only for ``lapack`` mode.
    svd_mode : {'lapack', 'randsvd'}, str optional
        See ``svd_wrapper``.
    matrix_ref : numpy ndarray, 2d, optional
        Reference matrix [n_ref x n_pixels] on which the components are
        learned. By default ``matrix`` itself.
    random_state : int, RandomState instance or None, optional
        See ``svd_wrapper``.
    verbose : bool, optional
        Print a note when the explained ratio cutoff truncates the basis.

    Returns
    -------
    basis : numpy ndarray, 2d
        Orthonormal principal components [k x n_pixels], with
        ``k <= min(ncomp, n_ref)``.
    weights : numpy ndarray, 2d
        Projection of ``matrix`` on the components [n_frames x k].

    """
    if matrix_ref is None:
        matrix_ref = matrix
    n_ref = matrix_ref.shape[0]
    if ncomp is None:
        ncomp = n_ref
    if ncomp > n_ref:
        raise ValueError('ncomp ({}) cannot be larger than the number of '
                         'reference frames ({})'.format(ncomp, n_ref))

    if svd_mode == SvdMode.LAPACK:
        max_rank = min(matrix_ref.shape)
        _, S, V = svd_wrapper(matrix_ref, svd_mode, max_rank, full_output=True)
        nc = min(ncomp, max_rank)
        if pratio < 1:
            nc = min(nc, _explained_ratio_rank(S, pratio))
            if nc < ncomp and verbose:
                print('Explained ratio {} reached with {} components (out of '
                      '{} requested)'.format(pratio, nc, ncomp))
        basis = V[:nc]
    elif svd_mode == SvdMode.RANDSVD:
        if pratio < 1:
            raise ValueError('`pratio` cutoff is not supported in randsvd mode')
        basis = svd_wrapper(matrix_ref, svd_mode, min(ncomp, *matrix_ref.shape),
                            random_state=random_state)
    else:
        raise ValueError('The SVD `mode` is not recognized')

    weights = np.dot(matrix, basis.T)
    return basis, weights
