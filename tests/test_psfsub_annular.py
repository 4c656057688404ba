"""
Tests for psfsub/annular.py, psfsub/medsub.py and psfsub/adi_algo.py

"""

from .helpers import aarc, np, parametrize, raises
from adikit.psfsub import (Annular, MatrixFunction, MEDIAN_SUB_Params,
                           MedianSub, PCA, median_sub)
from adikit.var import dist


def _mean_sub(matrix, angle_list):
    return matrix - matrix.mean(axis=0)


@parametrize("shape,radius_int", [((64, 64), 0), ((64, 64), 5),
                                  ((49, 49), 0), ((40, 40), 3)])
def test_annuli_cover_once(shape, radius_int):
    annular = Annular(PCA(ncomp=1), fwhm=4, asize=4, radius_int=radius_int)
    indices = annular.annuli_indices(shape)
    assert len(indices) == annular.n_annuli(shape)

    counts = np.zeros(shape, dtype=int)
    for yy, xx in indices:
        counts[yy, xx] += 1
    assert counts.max() == 1

    # everything between radius_int and the outer edge of the last annulus
    n_annuli = annular.n_annuli(shape)
    outer = radius_int + n_annuli * 4 - 1
    yy, xx = np.mgrid[:shape[0], :shape[1]]
    rad = dist(shape[0] // 2, shape[1] // 2, yy, xx)
    inside = (rad >= radius_int) & (rad < outer)
    assert np.all(counts[inside] == 1)
    assert np.all(counts[rad < radius_int] == 0)


def test_annular_pca(example_cube_adi):
    cube, angles = example_cube_adi
    annular = Annular(PCA(ncomp=2, verbose=False), fwhm=4, verbose=False)
    cube_res, cube_der, frame = annular(cube, angles, full_output=True)

    assert frame.shape == (64, 64)
    assert np.all(np.isfinite(frame))
    assert np.all(np.isfinite(frame[31:33, 31:33]))

    # every pixel of the annuli holds a residual
    shape = cube.shape[1:]
    for yy, xx in annular.annuli_indices(shape):
        assert np.all(cube_res[:, yy, xx] != 0)


def test_annular_pca_too_many_components(example_cube_adi):
    cube, angles = example_cube_adi
    annular = Annular(PCA(ncomp=50, verbose=False), fwhm=4, verbose=False)
    with raises(ValueError):
        annular(cube, angles)


def test_annular_algorithm_list(example_cube_adi):
    cube, angles = example_cube_adi
    n_annuli = Annular(MedianSub()).n_annuli(cube.shape[1:])
    algos = [PCA(ncomp=1)] * (n_annuli - 1) + [MedianSub()]
    frame = Annular(algos, fwhm=4, verbose=False)(cube, angles)
    assert frame.shape == (64, 64)

    with raises(ValueError):
        Annular(algos[:-1], fwhm=4, verbose=False)(cube, angles)


def test_annular_errors():
    with raises(TypeError):
        Annular()
    with raises(TypeError):
        Annular(algo=3)
    with raises(ValueError):
        Annular(MedianSub(), radius_int=40).annuli_indices((64, 64))


def test_annular_nproc(example_cube_adi):
    cube, angles = example_cube_adi
    res1 = Annular(MedianSub(), fwhm=4, nproc=1, verbose=False)(cube, angles)
    res2 = Annular(MedianSub(), fwhm=4, nproc=2, verbose=False)(cube, angles)
    aarc(res1, res2)


def test_matrix_function(example_cube_adi):
    cube, angles = example_cube_adi
    frame = Annular(_mean_sub, fwhm=4, verbose=False)(cube, angles)
    assert np.all(np.isfinite(frame))

    algo = MatrixFunction(_mean_sub, verbose=False)
    res = algo.residuals(cube, angles)
    aarc(res.mean(axis=0), np.zeros(cube.shape[1:]), atol=1e-10)

    def wrong(matrix, angle_list):
        return matrix[1:]

    with raises(ValueError):
        MatrixFunction(wrong, verbose=False)(cube, angles)
    with raises(TypeError):
        MatrixFunction(None)


def test_matrix_function_nproc(example_cube_adi):
    cube, angles = example_cube_adi
    # the wrapped function is sent to the workers, it must be module-level
    res1 = Annular(_mean_sub, fwhm=4, nproc=1, verbose=False)(cube, angles)
    res2 = Annular(_mean_sub, fwhm=4, nproc=2, verbose=False)(cube, angles)
    aarc(res1, res2)


def test_call_verbose_override(example_cube_adi, capsys):
    cube, angles = example_cube_adi
    algo = Annular(MedianSub(verbose=False), fwhm=4)
    algo(cube, angles, verbose=False)
    assert capsys.readouterr().out == ""
    assert algo.verbose is True

    algo = Annular(MedianSub(verbose=False), fwhm=4, verbose=False)
    algo(cube, angles, verbose=True)
    assert "N annuli" in capsys.readouterr().out
    assert algo.verbose is False


def test_medsub_static():
    rng = np.random.default_rng(3)
    frame = rng.normal(size=(10, 10))
    cube = np.repeat(frame[None], 6, axis=0)
    matrix = cube.reshape(6, -1)
    angles = np.linspace(0, 50, 6)

    aarc(MedianSub().reduce(matrix, angles), np.zeros_like(matrix))
    aarc(MedianSub().reduce(matrix, angles, pa_threshold=15, nframes=2),
         np.zeros_like(matrix))
    aarc(MedianSub(verbose=False).residuals(cube, angles),
         np.zeros_like(cube))


@parametrize("mode", ["fullfr", "annular"])
def test_median_sub(example_cube_adi, mode):
    cube, angles = example_cube_adi
    cube_in = cube.copy()
    cube_out, cube_der, frame = median_sub(cube, angles, fwhm=4, mode=mode,
                                           full_output=True, verbose=False)
    assert cube_out.shape == cube.shape
    assert cube_der.shape == cube.shape
    assert frame.shape == cube.shape[1:]
    assert np.all(np.isfinite(frame))
    # the input cube is not modified
    aarc(cube, cube_in, rtol=0, atol=0)


def test_median_sub_params(example_cube_adi):
    cube, angles = example_cube_adi
    params = MEDIAN_SUB_Params(cube=cube, angle_list=angles, fwhm=4,
                               mode="annular", verbose=False)
    frame1 = median_sub(algo_params=params)
    frame2 = median_sub(cube, angles, fwhm=4, mode="annular", verbose=False)
    aarc(frame1, frame2)


def test_median_sub_errors(example_cube_adi):
    cube, angles = example_cube_adi
    with raises(ValueError):
        median_sub(cube, angles, mode="annular", nframes=3, verbose=False)
    with raises(ValueError):
        median_sub(cube, angles, mode="segments", verbose=False)
    with raises(TypeError):
        median_sub(cube, angles[1:], verbose=False)
