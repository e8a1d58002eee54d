"""
Check whether basic functions runs without error
"""
import dask.array as da
import numpy as np
import pathopop


def test_dataset():
    dset = pathopop.dataset.load_toy()
    geno = dset.geno
    depth = dset.depth
    pos = dset.snp.POS

    # basic shape
    assert geno.ndim == 3
    assert depth.ndim == 2
    assert geno.shape[0:2] == depth.shape
    assert len(pos) == geno.shape[0]
    assert dset.ploidy == 2
    assert dset.n_snp == 20
    assert dset.n_indiv == 13
    assert {"Nursery", "Source", "Marker"}.issubset(dset.indiv.columns)


def test_dosage():
    geno = np.array(
        [
            [[0, 0], [0, 1], [1, 1], [-1, -1]],
            [[1, 0], [2, 0], [0, -1], [0, 0]],
        ]
    )
    dset = pathopop.Dataset(geno=da.from_array(geno))
    dosage = dset.dosage().compute()
    assert np.array_equal(dosage[0, 0:3], [0, 1, 2])
    assert np.isnan(dosage[0, 3])
    # any non-reference allele counts, partially missing calls are missing
    assert np.array_equal(dosage[1, [0, 1, 3]], [1, 1, 0])
    assert np.isnan(dosage[1, 2])
    assert np.array_equal(
        dset.missing().compute(), [[False, False, False, True], [False, False, True, False]]
    )


def test_impute_with_mean():
    mat = np.array([[0.0, np.nan, 2.0], [1.0, 1.0, np.nan]])
    imputed = pathopop.data.impute_with_mean(mat, axis=1)
    assert np.allclose(imputed, [[0.0, 1.0, 2.0], [1.0, 1.0, 1.0]])
    imputed = pathopop.data.impute_with_mean(mat, axis=0)
    assert np.allclose(imputed, [[0.0, 1.0, 2.0], [1.0, 1.0, 2.0]])
    # input is not modified
    assert np.isnan(mat[0, 1])


def test_allele_count():
    geno = np.array([[[0, 0], [0, 1], [2, 2], [-1, -1]], [[0, 0], [0, 0], [0, 0], [0, 1]]])
    ac = pathopop.data.allele_count(geno)
    assert np.array_equal(ac, [[3, 1, 2], [7, 1, 0]])
    mac, n_missing = pathopop.data.minor_allele_count(geno)
    # non-major alleles: 1 + 2 for the multi-allelic SNP
    assert np.array_equal(mac, [3, 1])
    assert np.array_equal(n_missing, [1, 0])
