import numpy as np
import warnings
from typing import Tuple


def impute_with_mean(mat, inplace=False, axis=1):
    """impute the each entry using the mean of the input matrix np.mean(mat, axis=axis)
    axis = 1 corresponds to row-wise imputation
    axis = 0 corresponds to column-wise imputation

    Parameters
    ----------
    mat : np.ndarray
        input matrix, e.g. the (n_snp, n_indiv) dosage matrix
    inplace : bool
        whether to return a new matrix or modify the input matrix
    axis : int
        axis to impute along

    Returns
    -------
    if inplace:
        None
    else:
        mat : np.ndarray
    """
    assert axis in [0, 1], "axis should be 0 or 1"
    if not inplace:
        mat = mat.copy()

    # rows / columns with all entries missing stay missing
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=RuntimeWarning)
        mean = np.nanmean(mat, axis=axis)
    nanidx = np.where(np.isnan(mat))

    # axis = 1, row-wise imputation, index the mean using the nanidx[0]
    # axis = 0, column-wise imputation, index the mean using the nanidx[1]
    mat[nanidx] = mean[nanidx[1 - axis]]

    if not inplace:
        return mat
    else:
        return None


def missing_rate(missing: np.ndarray, axis: int) -> np.ndarray:
    """
    Fraction of missing cells

    Parameters
    ----------
    missing : np.ndarray
        (n_snp, n_indiv) boolean matrix
    axis : int
        0 for per-individual rate (over SNPs), 1 for per-SNP rate (over individuals)

    Returns
    -------
    np.ndarray
    """
    assert axis in [0, 1], "axis should be 0 or 1"
    n = missing.shape[axis]
    assert n > 0, "cannot compute missing rate over an empty axis"
    return missing.sum(axis=axis) / n


def depth_quantile_mask(
    depth: np.ndarray, lower: float = 0.05, upper: float = 0.95
) -> np.ndarray:
    """
    Find the cells outside their individual's [lower, upper] depth quantile band

    Quantiles are computed per individual over the non-missing cells, with linear
    interpolation.

    Parameters
    ----------
    depth : np.ndarray
        (n_snp, n_indiv) read depth, NaN for missing
    lower : float
        lower quantile
    upper : float
        upper quantile

    Returns
    -------
    np.ndarray
        (n_snp, n_indiv) boolean matrix, True for cells strictly outside the band
    """
    assert 0 <= lower <= upper <= 1, "quantiles should satisfy 0 <= lower <= upper <= 1"
    with warnings.catch_warnings():
        # individuals with all cells missing give NaN bounds
        warnings.simplefilter("ignore", category=RuntimeWarning)
        q_lo, q_hi = np.nanquantile(depth, [lower, upper], axis=0)
    with np.errstate(invalid="ignore"):
        return (depth < q_lo[None, :]) | (depth > q_hi[None, :])


def allele_count(geno: np.ndarray) -> np.ndarray:
    """
    Count the called alleles per SNP

    Parameters
    ----------
    geno : np.ndarray
        (n_snp, n_indiv, ploidy) allele indices, -1 for missing

    Returns
    -------
    np.ndarray
        (n_snp, n_allele) allele counts
    """
    import allel

    max_allele = max(int(geno.max()), 1) if geno.size > 0 else 1
    return np.asarray(allel.GenotypeArray(geno).count_alleles(max_allele=max_allele))


def minor_allele_count(geno: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Minor allele count and number of missing genotypes per SNP

    The minor allele count is the number of called alleles that are not the most
    frequent allele (for bi-allelic SNPs, the count of the rarer allele).

    Parameters
    ----------
    geno : np.ndarray
        (n_snp, n_indiv, ploidy) allele indices, -1 for missing

    Returns
    -------
    mac : np.ndarray
        (n_snp, ) minor allele count
    n_missing : np.ndarray
        (n_snp, ) number of individuals with a missing genotype
    """
    ac = allele_count(geno)
    mac = ac.sum(axis=1) - ac.max(axis=1)
    n_missing = (geno < 0).any(axis=2).sum(axis=1)
    return mac, n_missing


def is_polymorphic(geno: np.ndarray) -> np.ndarray:
    """
    Whether any non-missing genotype call differs from the SNP's reference call,
    taken as the first non-missing call of the SNP. Allele order within a call is
    ignored (0/1 == 1/0). SNPs without any non-missing call are not polymorphic.

    Parameters
    ----------
    geno : np.ndarray
        (n_snp, n_indiv, ploidy) allele indices, -1 for missing

    Returns
    -------
    np.ndarray
        (n_snp, ) boolean
    """
    n_snp = geno.shape[0]
    called = ~(geno < 0).any(axis=2)
    calls = np.sort(geno, axis=2)
    first = np.argmax(called, axis=1)
    ref_call = calls[np.arange(n_snp), first, :]
    differ = (calls != ref_call[:, None, :]).any(axis=2) & called
    return differ.any(axis=1) & called.any(axis=1)
