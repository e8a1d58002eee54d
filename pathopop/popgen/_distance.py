import numpy as np
from scipy.spatial.distance import pdist, squareform
from .._errors import MissingGenotypeError
from ._popgeno import PopGeno


def allele_diff(dosage: np.ndarray) -> np.ndarray:
    """
    Number of differing alleles between every pair of individuals, summed over
    the SNPs called in both individuals.

    Parameters
    ----------
    dosage : np.ndarray
        (n_indiv, n_snp) dosage matrix, NaN for missing

    Returns
    -------
    np.ndarray
        (n_indiv, n_indiv) matrix
    """
    called = ~np.isnan(dosage)
    x = np.where(called, dosage, 0.0)
    n_indiv = x.shape[0]
    diff = np.zeros((n_indiv, n_indiv))
    for i in range(n_indiv):
        both = called[i] & called
        diff[i, :] = (np.abs(x[i] - x) * both).sum(axis=1)
    return diff


def bitwise_dist(pg: PopGeno, missing_match: bool = True) -> np.ndarray:
    """
    Proportion of differing alleles between every pair of individuals

    |dosage_i - dosage_j| / ploidy averaged over SNPs.

    Parameters
    ----------
    pg : PopGeno
    missing_match : bool
        If True, a missing call is treated as matching anything, i.e. the SNP
        adds no difference but counts in the denominator. If False, only SNPs
        called in both individuals count.

    Returns
    -------
    np.ndarray
        (n_indiv, n_indiv) distance matrix, NaN for pairs without shared SNPs
    """
    diff = allele_diff(pg.dosage)
    if missing_match:
        n_site = np.full(diff.shape, pg.n_snp, dtype=float)
    else:
        called = (~np.isnan(pg.dosage)).astype(float)
        n_site = called @ called.T
    with np.errstate(invalid="ignore", divide="ignore"):
        dist = diff / (n_site * pg.ploidy)
    dist[n_site == 0] = np.nan
    np.fill_diagonal(dist, 0.0)
    return dist


def sq_euclidean_dist(pg: PopGeno) -> np.ndarray:
    """
    Squared Euclidean distance between the dosage vectors

    Parameters
    ----------
    pg : PopGeno
        genotypes without missing calls

    Returns
    -------
    np.ndarray
        (n_indiv, n_indiv) matrix
    """
    if pg.has_missing:
        raise MissingGenotypeError(
            "Squared Euclidean distances require complete genotypes; "
            "remove SNPs with missing genotypes first (drop_missing=True)."
        )
    return squareform(pdist(pg.dosage, metric="sqeuclidean"))
