"""
Filter stages. Each stage takes a Dataset and returns a new Dataset, the input
is never modified.
"""
import numpy as np
import pathopop


def filter_depth(
    dset: pathopop.Dataset, min_depth: float, max_depth: float
) -> pathopop.Dataset:
    """
    Censor the cells with depth below `min_depth` or above `max_depth`

    Parameters
    ----------
    dset : pathopop.Dataset
        dataset with read depth
    min_depth : float
        minimum depth
    max_depth : float
        maximum depth

    Returns
    -------
    pathopop.Dataset
    """
    assert min_depth <= max_depth, "min_depth should not be larger than max_depth"
    depth = dset.depth.compute()
    with np.errstate(invalid="ignore"):
        mask = (depth < min_depth) | (depth > max_depth)
    pathopop.logger.info(
        f"filter_depth: {mask.sum()} calls outside [{min_depth}, {max_depth}] are censored"
    )
    return dset.mask_calls(mask)


def filter_depth_quantile(
    dset: pathopop.Dataset, lower: float = 0.05, upper: float = 0.95
) -> pathopop.Dataset:
    """
    Censor the cells outside their individual's [lower, upper] depth quantiles.
    The quantiles are computed from the input dataset.

    Parameters
    ----------
    dset : pathopop.Dataset
        dataset with read depth
    lower : float
        lower quantile, by default 0.05
    upper : float
        upper quantile, by default 0.95

    Returns
    -------
    pathopop.Dataset
    """
    mask = pathopop.data.depth_quantile_mask(
        dset.depth.compute(), lower=lower, upper=upper
    )
    pathopop.logger.info(
        f"filter_depth_quantile: {mask.sum()} calls outside the per-individual "
        f"[{lower}, {upper}] depth quantiles are censored"
    )
    return dset.mask_calls(mask)


def filter_indiv_missing(dset: pathopop.Dataset, max_missing: float) -> pathopop.Dataset:
    """
    Remove individuals with a fraction of missing calls larger than `max_missing`
    (a fraction equal to `max_missing` is kept)

    Parameters
    ----------
    dset : pathopop.Dataset
    max_missing : float
        maximum fraction of missing calls, in [0, 1]

    Returns
    -------
    pathopop.Dataset
    """
    assert 0 <= max_missing <= 1, "max_missing should be in [0, 1]"
    rate = pathopop.data.missing_rate(dset.missing().compute(), axis=0)
    keep = ~(rate > max_missing)
    pathopop.logger.info(
        f"filter_indiv_missing: {(~keep).sum()}/{dset.n_indiv} individuals with "
        f"missing rate > {max_missing} are removed"
    )
    return dset[:, keep]


def filter_snp_missing(dset: pathopop.Dataset, max_missing: float) -> pathopop.Dataset:
    """
    Remove SNPs with a fraction of missing calls larger than `max_missing`
    (a fraction equal to `max_missing` is kept)

    Parameters
    ----------
    dset : pathopop.Dataset
    max_missing : float
        maximum fraction of missing calls, in [0, 1]

    Returns
    -------
    pathopop.Dataset
    """
    assert 0 <= max_missing <= 1, "max_missing should be in [0, 1]"
    rate = pathopop.data.missing_rate(dset.missing().compute(), axis=1)
    keep = ~(rate > max_missing)
    pathopop.logger.info(
        f"filter_snp_missing: {(~keep).sum()}/{dset.n_snp} SNPs with "
        f"missing rate > {max_missing} are removed"
    )
    return dset[keep, :]


def filter_polymorphic(dset: pathopop.Dataset) -> pathopop.Dataset:
    """
    Remove SNPs where no genotype call differs from the SNP's first call
    (monomorphic among the remaining individuals, or all missing)

    Parameters
    ----------
    dset : pathopop.Dataset

    Returns
    -------
    pathopop.Dataset
    """
    keep = pathopop.data.is_polymorphic(dset.geno.compute())
    pathopop.logger.info(
        f"filter_polymorphic: {(~keep).sum()}/{dset.n_snp} non-polymorphic SNPs are removed"
    )
    return dset[keep, :]


def filter_mac(dset: pathopop.Dataset, min_mac: int) -> pathopop.Dataset:
    """
    Remove SNPs with a minor allele count smaller than `min_mac`

    Parameters
    ----------
    dset : pathopop.Dataset
    min_mac : int
        minimum minor allele count

    Returns
    -------
    pathopop.Dataset
    """
    mac, _ = pathopop.data.minor_allele_count(dset.geno.compute())
    keep = mac >= min_mac
    pathopop.logger.info(
        f"filter_mac: {(~keep).sum()}/{dset.n_snp} SNPs with minor allele count "
        f"< {min_mac} are removed"
    )
    return dset[keep, :]


def filter_missing_gt(dset: pathopop.Dataset) -> pathopop.Dataset:
    """Remove SNPs with any missing genotype"""
    keep = ~dset.missing().any(axis=1).compute()
    pathopop.logger.info(
        f"filter_missing_gt: {(~keep).sum()}/{dset.n_snp} SNPs with missing genotypes are removed"
    )
    return dset[keep, :]
