"""
Ordered filter chains. A chain is an explicit list of named stages; each stage
consumes the output of the previous one, so the order changes the result.
"""
from functools import partial
from typing import Callable, List, Tuple, Union
import numpy as np
import pandas as pd
import pathopop
from .._errors import EmptyDatasetError
from ._stages import (
    filter_depth,
    filter_depth_quantile,
    filter_indiv_missing,
    filter_snp_missing,
    filter_polymorphic,
    filter_mac,
    filter_missing_gt,
)

Stage = Tuple[str, Callable[[pathopop.Dataset], pathopop.Dataset]]


def depth_filter_stages(
    min_depth: float = 4,
    max_depth: float = 500,
    quantile: bool = True,
    max_indiv_missing_1: float = 0.5,
    max_snp_missing: float = 0.05,
    max_indiv_missing_2: float = 0.2,
    polymorphic: bool = True,
) -> List[Stage]:
    """
    Stages of the depth / missingness filter, in the order they are applied

    1. depth: censor calls with depth outside [min_depth, max_depth]
    2. depth_quantile: censor calls outside the per-individual 5% / 95% depth quantiles
    3. indiv_missing_1: remove individuals with missing rate > max_indiv_missing_1
    4. snp_missing: remove SNPs with missing rate > max_snp_missing
    5. indiv_missing_2: remove individuals with missing rate > max_indiv_missing_2
    6. polymorphic: remove SNPs without any call differing from the first call

    Parameters
    ----------
    min_depth : float
        minimum read depth of a call
    max_depth : float
        maximum read depth of a call
    quantile : bool
        whether to include the depth_quantile stage
    max_indiv_missing_1 : float
        maximum missing rate of an individual in the first pass
    max_snp_missing : float
        maximum missing rate of a SNP
    max_indiv_missing_2 : float
        maximum missing rate of an individual in the second pass
    polymorphic : bool
        whether to include the polymorphic stage

    Returns
    -------
    List[Stage]
        list of (name, function) pairs
    """
    stages: List[Stage] = [
        ("depth", partial(filter_depth, min_depth=min_depth, max_depth=max_depth))
    ]
    if quantile:
        stages.append(
            ("depth_quantile", partial(filter_depth_quantile, lower=0.05, upper=0.95))
        )
    stages += [
        (
            "indiv_missing_1",
            partial(filter_indiv_missing, max_missing=max_indiv_missing_1),
        ),
        ("snp_missing", partial(filter_snp_missing, max_missing=max_snp_missing)),
        (
            "indiv_missing_2",
            partial(filter_indiv_missing, max_missing=max_indiv_missing_2),
        ),
    ]
    if polymorphic:
        stages.append(("polymorphic", filter_polymorphic))
    return stages


def maf_filter_stages(min_mac: int = 2, drop_missing: bool = True) -> List[Stage]:
    """
    Stages of the minor allele filter

    1. mac: remove SNPs with minor allele count < min_mac
    2. missing_gt: remove SNPs with any missing genotype (if `drop_missing`)
    """
    stages: List[Stage] = [("mac", partial(filter_mac, min_mac=min_mac))]
    if drop_missing:
        stages.append(("missing_gt", filter_missing_gt))
    return stages


def summarize(dset: pathopop.Dataset) -> dict:
    """Shape, missing rate and mean depth of the dataset"""
    missing = dset.missing().compute()
    summary = {
        "n_snp": dset.n_snp,
        "n_indiv": dset.n_indiv,
        "missing_rate": missing.mean() if missing.size > 0 else np.nan,
    }
    if dset.has_depth:
        depth = dset.depth.compute()
        summary["mean_depth"] = np.nanmean(depth) if np.any(~np.isnan(depth)) else np.nan
    return summary


def run_stages(
    dset: pathopop.Dataset, stages: List[Stage], return_report: bool = False
) -> Union[pathopop.Dataset, Tuple[pathopop.Dataset, pd.DataFrame]]:
    """
    Apply the stages in order

    Parameters
    ----------
    dset : pathopop.Dataset
        input dataset, not modified
    stages : List[Stage]
        list of (name, function) pairs
    return_report : bool
        whether to return a table with the dataset summary after each stage

    Returns
    -------
    pathopop.Dataset
        filtered dataset
    pd.DataFrame
        if return_report, a table indexed by stage with n_snp, n_indiv,
        missing_rate (and mean_depth) after each stage

    Raises
    ------
    EmptyDatasetError
        if a stage leaves no SNP or no individual
    """
    names = [name for name, _ in stages]
    assert len(set(names)) == len(names), f"stage names are not unique: {names}"

    records = []
    if return_report:
        records.append({"stage": "input", **summarize(dset)})

    for name, func in stages:
        dset = func(dset)
        pathopop.logger.info(
            f"after stage `{name}`: {dset.n_snp} SNPs x {dset.n_indiv} individuals"
        )
        if dset.n_snp == 0 or dset.n_indiv == 0:
            raise EmptyDatasetError(
                f"No data remain after stage `{name}` "
                f"({dset.n_snp} SNPs x {dset.n_indiv} individuals)"
            )
        if return_report:
            records.append({"stage": name, **summarize(dset)})

    if return_report:
        return dset, pd.DataFrame(records).set_index("stage")
    else:
        return dset


def filter_vcf(
    dset: pathopop.Dataset,
    min_depth: float = 4,
    max_depth: float = 500,
    quantile: bool = True,
    max_indiv_missing_1: float = 0.5,
    max_snp_missing: float = 0.05,
    max_indiv_missing_2: float = 0.2,
    polymorphic: bool = True,
    return_report: bool = False,
):
    """
    Depth and missingness filter, see `depth_filter_stages` for the stages.

    Returns
    -------
    pathopop.Dataset (and the report if `return_report`)
    """
    stages = depth_filter_stages(
        min_depth=min_depth,
        max_depth=max_depth,
        quantile=quantile,
        max_indiv_missing_1=max_indiv_missing_1,
        max_snp_missing=max_snp_missing,
        max_indiv_missing_2=max_indiv_missing_2,
        polymorphic=polymorphic,
    )
    return run_stages(dset, stages, return_report=return_report)


def missing_gt_maf_filter(
    dset: pathopop.Dataset,
    min_mac: int = 2,
    drop_missing: bool = True,
    return_report: bool = False,
):
    """
    Minor allele count filter, optionally followed by removal of SNPs with
    missing genotypes, see `maf_filter_stages`.

    Returns
    -------
    pathopop.Dataset (and the report if `return_report`)
    """
    stages = maf_filter_stages(min_mac=min_mac, drop_missing=drop_missing)
    return run_stages(dset, stages, return_report=return_report)
