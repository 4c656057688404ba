"""Helper functions for tests"""

__all__ = ["aarc", "parametrize", "fixture", "raises", "param", "np",
           "gaussian_psf"]

from pytest import mark, param, raises, fixture
import numpy as np

filterwarnings = mark.filterwarnings
parametrize = mark.parametrize


def aarc(actual, desired, rtol=1e-5, atol=1e-6):
    """
    Assert array-compare. Like ``np.allclose``, but with different defaults.

    Notes
    -----
    Default values for
    - ``np.allclose``: ``atol=1e-8, rtol=1e-5``
    - ``np.testing.assert_allclose``: ``atol=0, rtol=1e-7``

    """
    __tracebackhide__ = True  # Hide traceback for pytest
    np.testing.assert_allclose(actual, desired, rtol=rtol, atol=atol)


def gaussian_psf(size, fwhm):
    """
    Centered, odd-sized 2d gaussian of unit peak.

    Parameters
    ----------
    size : int
        Odd frame size.
    fwhm : float
        FWHM in pixels.

    """
    sigma = fwhm / (2 * np.sqrt(2 * np.log(2)))
    yy, xx = np.mgrid[:size, :size]
    c = size // 2
    return np.exp(-((yy - c) ** 2 + (xx - c) ** 2) / (2 * sigma ** 2))
