"""
Configuration file for pytest, containing global ("session-level") fixtures.

"""
import time

import numpy as np
import pytest

from adikit.config import Progressbar
from .helpers import gaussian_psf


@pytest.fixture(scope="session")
def example_cube_adi():
    """
    Small synthetic ADI sequence: 10 frames of 64x64 pixels of gaussian noise,
    with parallactic angles linearly spaced between 0 and 20 degrees.

    Returns
    -------
    cube : 3d numpy ndarray
    angles : 1d numpy ndarray

    """
    rng = np.random.default_rng(12345)
    cube = rng.normal(0, 1, size=(10, 64, 64))
    angles = np.linspace(0, 20, 10)
    return cube, angles


@pytest.fixture(scope="session")
def example_psf():
    """
    Odd-sized gaussian PSF of FWHM 4 pixels.

    Returns
    -------
    psf : 2d numpy ndarray
    fwhm : float

    """
    fwhm = 4.
    return gaussian_psf(13, fwhm), fwhm


@pytest.fixture(scope="session")
def example_cube_speckles():
    """
    ADI sequence dominated by a static, slowly varying stellar halo plus
    noise, with 40 degrees of field rotation.

    Returns
    -------
    cube : 3d numpy ndarray
    angles : 1d numpy ndarray

    """
    rng = np.random.default_rng(2024)
    nfr, size = 20, 48
    yy, xx = np.mgrid[:size, :size]
    rad = np.hypot(yy - size // 2, xx - size // 2)
    halo = 100 * np.exp(-rad / 6) + 5 * np.cos(xx / 3.) * np.sin(yy / 5.)
    amplitude = 1 + 0.05 * rng.normal(size=nfr)
    cube = amplitude[:, None, None] * halo[None] + \
        rng.normal(0, 0.1, size=(nfr, size, size))
    angles = np.linspace(-20, 20, nfr)
    return cube, angles


@pytest.fixture(scope="session", autouse=True)
def hide_progressbars():
    Progressbar.set("hide")


@pytest.fixture(autouse=True)
def time_test():
    """Time a single test"""
    before = time.time()
    yield
    after = time.time()
    print(f"Test took {after - before:.02f} seconds!")


@pytest.fixture(autouse=True, scope="session")
def time_all_tests():
    """Time all tests"""
    before = time.time()
    yield
    after = time.time()
    print(f"Total test time: {after - before:.02f} seconds!")
