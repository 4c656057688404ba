"""
Tests for psfsub/svd.py and psfsub/pca_fullfr.py

"""

from .helpers import aarc, fixture, np, parametrize, raises
from adikit.psfsub import PCA, TPCA, decompose, svd_wrapper


@fixture(scope="module")
def matrix():
    rng = np.random.default_rng(7)
    # low-rank structure plus noise: 12 frames, 100 pixels
    base = rng.normal(size=(3, 100))
    coefs = rng.normal(size=(12, 3)) * [10, 5, 2]
    return coefs @ base + 0.01 * rng.normal(size=(12, 100))


@parametrize("mode", ["lapack", "randsvd"])
def test_svd_wrapper(matrix, mode):
    V = svd_wrapper(matrix, mode, 4, random_state=0)
    assert V.shape == (4, 100)
    aarc(V @ V.T, np.eye(4), atol=1e-8)


def test_svd_wrapper_modes_agree(matrix):
    U1, S1, _ = svd_wrapper(matrix, "lapack", 3, full_output=True)
    U2, S2, _ = svd_wrapper(matrix, "randsvd", 3, full_output=True,
                            random_state=0)
    assert U1.shape == (12, 3)
    aarc(S1, S2, rtol=1e-3)


def test_svd_wrapper_errors(matrix):
    with raises(TypeError):
        svd_wrapper(matrix[None], "lapack", 2)
    with raises(ValueError):
        svd_wrapper(matrix, "lapack", 13)
    with raises(ValueError):
        svd_wrapper(matrix, "eigen", 2)


@parametrize("ncomp", [1, 3, 6, 12])
def test_decompose_rank(matrix, ncomp):
    basis, weights = decompose(matrix, ncomp=ncomp)
    assert basis.shape == (ncomp, 100)
    assert weights.shape == (12, ncomp)
    aarc(basis @ basis.T, np.eye(ncomp), atol=1e-8)


def test_decompose_full_rank(matrix):
    basis, weights = decompose(matrix)
    assert basis.shape[0] == matrix.shape[0]
    aarc(weights @ basis, matrix, atol=1e-8)


def test_decompose_too_many_components(matrix):
    with raises(ValueError):
        decompose(matrix, ncomp=13)
    with raises(ValueError):
        decompose(matrix, ncomp=5, matrix_ref=matrix[:4])


def test_decompose_pratio(matrix):
    basis, _ = decompose(matrix, ncomp=10, pratio=1.0)
    assert basis.shape[0] == 10
    basis, _ = decompose(matrix, ncomp=10, pratio=0.5)
    assert 1 <= basis.shape[0] < 10
    basis_all, _ = decompose(matrix, ncomp=10, pratio=0.999999)
    assert basis_all.shape[0] <= 10

    with raises(ValueError):
        decompose(matrix, ncomp=3, pratio=0.5, svd_mode="randsvd")


def test_decompose_deterministic(matrix):
    b1, w1 = decompose(matrix, ncomp=4)
    b2, w2 = decompose(matrix, ncomp=4)
    aarc(b1, b2, rtol=1e-12, atol=1e-12)
    aarc(w1, w2, rtol=1e-12, atol=1e-12)

    b1, _ = decompose(matrix, ncomp=4, svd_mode="randsvd", random_state=3)
    b2, _ = decompose(matrix, ncomp=4, svd_mode="randsvd", random_state=3)
    aarc(b1, b2)


def test_decompose_matrix_ref(matrix):
    ref = matrix[:8]
    basis, weights = decompose(matrix[8:], ncomp=3, matrix_ref=ref)
    assert basis.shape == (3, 100)
    assert weights.shape == (4, 3)
    # the frames follow the same low-rank model as the references
    resid = matrix[8:] - weights @ basis
    assert np.std(resid) < 0.05


def test_pca_reduce_rank_one():
    rng = np.random.default_rng(1)
    pattern = rng.normal(size=50)
    matrix = np.outer(rng.uniform(1, 2, size=8), pattern)
    res = PCA(ncomp=1, verbose=False).reduce(matrix, np.linspace(0, 30, 8))
    aarc(res, np.zeros_like(matrix), atol=1e-9)


def test_pca_reduce_threshold(matrix):
    angles = np.linspace(0, 60, 12)
    res = PCA(ncomp=5, verbose=False).reduce(matrix, angles,
                                             pa_threshold=10)
    assert res.shape == matrix.shape
    assert np.all(np.isfinite(res))
    # the model of each frame does not include the frame itself
    assert np.std(res) > 0.001


def test_pca_reduce_threshold_too_many_components(matrix):
    angles = np.linspace(0, 60, 12)
    with raises(ValueError):
        PCA(ncomp=13, verbose=False).reduce(matrix, angles, pa_threshold=10)


def test_pca_reduce_threshold_pratio_note(matrix, capsys):
    angles = np.linspace(0, 60, 12)
    PCA(ncomp=5, pratio=0.5).reduce(matrix, angles, pa_threshold=10)
    assert "Explained ratio 0.5 reached" in capsys.readouterr().out

    PCA(ncomp=5, pratio=0.5, verbose=False).reduce(matrix, angles,
                                                   pa_threshold=10)
    assert capsys.readouterr().out == ""


def test_tpca_rank(matrix):
    algo = TPCA(ncomp=3, random_state=0, verbose=False)
    basis, weights = algo.decompose(matrix)
    assert basis.shape == (3, 100)
    aarc(algo.reconstruct(matrix), weights @ basis)


@parametrize("algo", [PCA(ncomp=2, verbose=False),
                      TPCA(ncomp=2, random_state=0, verbose=False)],
             ids=["PCA", "TPCA"])
def test_pca_full_frame(example_cube_speckles, algo):
    cube, angles = example_cube_speckles
    frame = algo(cube, angles)
    assert frame.shape == cube.shape[1:]
    assert np.all(np.isfinite(frame))
    # the static halo is removed
    assert np.abs(frame).max() < 0.1 * np.abs(cube).max()

    cube_res, cube_der, frame2 = algo(cube, angles, full_output=True)
    assert cube_res.shape == cube.shape
    assert cube_der.shape == cube.shape
    aarc(frame, frame2)


def test_pca_dtype(example_cube_adi):
    cube, angles = example_cube_adi
    frame = PCA(ncomp=2, dtype=np.float32, verbose=False)(cube, angles)
    assert frame.dtype == np.float32


def test_pca_wrong_angles(example_cube_adi):
    cube, angles = example_cube_adi
    with raises(TypeError):
        PCA(ncomp=2, verbose=False)(cube, angles[:-1])
    with raises(TypeError):
        PCA(ncomp=2, verbose=False)(cube[0], angles)
