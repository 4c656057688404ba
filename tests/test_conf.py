"""
Tests for the config submodule.
"""

from .helpers import np, raises
from adikit.config import Progressbar, check_array, iterable, pool_map
from adikit.config.utils_param import build_params, separate_kwargs_dict
from adikit.psfsub import MEDIAN_SUB_Params


def _add(a, b):
    return a + b


def test_check_array():
    a1 = np.zeros((1))
    a2 = np.zeros((1, 1))
    a3 = np.zeros((1, 1, 1))

    check_array([2, 3], dim=1)
    check_array((2, 3), dim=1)
    check_array(a1, dim=1)
    check_array(a2, dim=2)
    check_array(a3, dim=3)
    check_array(a3, dim=(2, 3))

    with raises(TypeError):
        check_array(a1, dim=2)
    with raises(TypeError):
        check_array(a2, dim=3)
    with raises(TypeError):
        check_array([2, 3], dim=2)
    with raises(TypeError):
        check_array(a1, dim=(2, 3))
    with raises(TypeError):
        check_array(3, dim=1)
    with raises(ValueError):
        check_array(a3, dim=4)


def test_pool_map():
    res = pool_map(1, _add, iterable([1, 2, 3]), 10)
    assert res == [11, 12, 13]

    res = pool_map(2, _add, iterable([1, 2, 3]), iterable([1, 1, 1]),
                   msg="adding", verbose=False)
    assert res == [2, 3, 4]


def test_progressbar():
    Progressbar.set("hide")
    assert list(Progressbar(range(3))) == [0, 1, 2]
    with raises(NotImplementedError):
        Progressbar(range(3), backend="pyprind")
    with raises(NotImplementedError):
        Progressbar(range(3), backend="tqdm_notebook")
    # the tqdm backend is a regular iterator
    assert list(Progressbar(range(3), backend="tqdm", leave=False)) == [0, 1, 2]


def test_separate_kwargs_dict():
    params, more = separate_kwargs_dict({'fwhm': 5, 'ncomp': 3,
                                         'algo_params': None},
                                        MEDIAN_SUB_Params)
    assert params == {'fwhm': 5}
    assert more == {'ncomp': 3, 'algo_params': None}


def test_build_params():
    cube = np.zeros((2, 4, 4))
    angles = np.zeros(2)
    params, more = build_params(MEDIAN_SUB_Params, [cube, angles],
                                {'asize': 3, 'foo': 'bar'})
    assert params.asize == 3
    assert params.angle_list is angles
    assert more == {'foo': 'bar'}

    params, _ = build_params(MEDIAN_SUB_Params, [],
                             {'algo_params': {'cube': cube, 'nframes': 6}})
    assert params.nframes == 6

    ready = MEDIAN_SUB_Params(cube=cube, angle_list=angles)
    params, _ = build_params(MEDIAN_SUB_Params, [],
                             {'algo_params': ready, 'asize': 10})
    assert params is ready
