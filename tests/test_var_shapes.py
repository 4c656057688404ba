"""
Tests for var/shapes.py and var/coords.py

"""

from .helpers import aarc, np, parametrize, raises
from adikit.var import dist, frame_center, get_annulus_segments, pol_to_cart


PRETTY_EVEN = np.array([
    [1, 1, 1, 1, 1, 1],
    [1, 2, 2, 2, 2, 1],
    [1, 2, 3, 3, 2, 1],
    [1, 2, 3, 3, 2, 1],
    [1, 2, 2, 2, 2, 1],
    [1, 1, 1, 1, 1, 1]
])


def test_frame_center():
    frames = 39

    res44 = (2, 2)
    res55 = (2, 2)

    # 2D
    assert frame_center(np.zeros((4, 4))) == res44
    assert frame_center(np.zeros((5, 5))) == res55

    # 3D
    assert frame_center(np.zeros((frames, 4, 4))) == res44
    assert frame_center(np.zeros((frames, 5, 5))) == res55

    with raises(ValueError):
        frame_center(np.zeros((2, frames, 4, 4)))


def test_dist():
    assert dist(0, 0, 3, 4) == 5
    aarc(dist(np.array([0, 3]), np.array([0, 4]), 0, 0), [0, 5])


@parametrize("theta,expected",
             [(0, (0, 10)), (90, (10, 0)), (180, (0, -10)), (270, (-10, 0))])
def test_pol_to_cart(theta, expected):
    aarc(pol_to_cart(10, theta), expected, atol=1e-9)


def test_get_annulus_segments():
    arr = PRETTY_EVEN.copy()
    # center at (3, 3): only (0, 3) and (3, 0) lie at radius 3
    res = get_annulus_segments(arr, 2.9, 0.2, mode="val")[0]
    aarc(res, np.ones(2))

    res = get_annulus_segments(arr, 0, 1, mode="ind")[0]
    assert list(zip(*res)) == [(3, 3)]

    masked = get_annulus_segments(arr, 0, 1.5, mode="mask")[0]
    assert masked.sum() == 22


def test_get_annulus_segments_shape():
    shape = (20, 20)
    segm = get_annulus_segments(shape, 3, 5, nsegm=4)
    full = get_annulus_segments(shape, 3, 5)[0]
    assert len(segm) == 4
    assert sum(s[0].size for s in segm) == full[0].size

    # segments are disjoint
    pixels = [set(zip(*s)) for s in segm]
    for i in range(4):
        for j in range(i + 1, 4):
            assert not pixels[i] & pixels[j]


def test_get_annulus_segments_radii():
    shape = (31, 31)
    yy, xx = get_annulus_segments(shape, 4, 3)[0]
    rad = dist(15, 15, yy, xx)
    assert rad.min() >= 4
    assert rad.max() < 7


def test_get_annulus_segments_errors():
    with raises(ValueError):
        get_annulus_segments((10, 10), 2, 0)
    with raises(TypeError):
        get_annulus_segments((10, 10), 2, 3, nsegm=2.5)
    with raises(TypeError):
        get_annulus_segments(np.zeros((2, 10, 10)), 2, 3)
    with raises(ValueError):
        get_annulus_segments((10, 10), 2, 3, mode="unknown")
