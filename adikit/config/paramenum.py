"""Module containing enums for parameters of the algorithms and literal constants."""
from enum import Enum

ALGO_KEY = "algo_params"


class SvdMode(str, Enum):
    """
    Define the modes used to compute the SVD in PCA as constant strings.

    Modes
    -----
    * ``LAPACK``: uses the LAPACK linear algebra library through Numpy. Full
    decomposition, deterministic result.

    * ``RANDSVD``: uses the randomized_svd algorithm implemented in Sklearn,
    proposed in [HAL09]_. Only the leading singular triplets are computed,
    results differ slightly between runs unless a random state is fixed.

    """

    LAPACK = "lapack"
    RANDSVD = "randsvd"


class Imlib(str, Enum):
    """
    Define the libraries used for image transformations.

    Modes
    -----
    * ``SKIMAGE``: uses scikit-image for the rotation (supports every
    ``Interpolation`` order).

    * ``NDIMAGEFOURIER``: sub-pixel shifts in the Fourier plane with Scipy.

    * ``NDIMAGEINTERP``: sub-pixel shifts with Scipy spline interpolation.
    """

    SKIMAGE = "skimage"
    NDIMAGEFOURIER = "ndimage-fourier"
    NDIMAGEINTERP = "ndimage-interp"


class Interpolation(str, Enum):
    """
    Define the interpolation orders used for image transformations.

    Modes
    -----
    * ``NEARNEIG``: nearest neighbour (order 0).

    * ``BILINEAR``: order 1.

    * ``BIQUADRATIC``: order 2.

    * ``BICUBIC``: order 3.

    * ``BIQUARTIC``: order 4.

    * ``BIQUINTIC``: order 5.
    """

    NEARNEIG = "nearneig"
    BILINEAR = "bilinear"
    BIQUADRATIC = "biquadratic"
    BICUBIC = "bicubic"
    BIQUARTIC = "biquartic"
    BIQUINTIC = "biquintic"


INTERP_ORDER = {
    Interpolation.NEARNEIG: 0,
    Interpolation.BILINEAR: 1,
    Interpolation.BIQUADRATIC: 2,
    Interpolation.BICUBIC: 3,
    Interpolation.BIQUARTIC: 4,
    Interpolation.BIQUINTIC: 5,
}


class Collapse(str, Enum):
    """
    Define modes for combining the frames of a residual cube.

    Modes
    -----
    * ``MEDIAN``: pixel-wise median (NaN-aware).

    * ``MEAN``: pixel-wise mean (NaN-aware).

    * ``SUM``: pixel-wise sum (NaN-aware).

    * ``MAX``: pixel-wise maximum (NaN-aware).

    * ``WMEAN``: weighted mean, weights provided by the caller.
    """

    MEDIAN = "median"
    MEAN = "mean"
    SUM = "sum"
    MAX = "max"
    WMEAN = "wmean"


class Mode(str, Enum):
    """
    Define the geometries of the median subtraction.

    Modes
    -----
    * ``FULLFR``: only the temporal median frame is subtracted.

    * ``ANNULAR``: the median frame is subtracted, then an optimized reference
    built from the closest frames outside the exclusion zone of each annulus.
    """

    FULLFR = "fullfr"
    ANNULAR = "annular"
