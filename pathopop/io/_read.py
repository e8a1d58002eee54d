import numpy as np
from typing import List
import xarray as xr
import pathopop
from ..dataset import SAMPLE_COL, REQUIRED_SNP_COLUMNS
import os
import pandas as pd


def read_vcf(path: str, samples: List[str] = None) -> pathopop.Dataset:
    """read (compressed) vcf file with genotype and read depth

    Calls with zero read depth or a missing genotype are censored, i.e. the depth
    becomes NaN and all allele calls of the cell become -1.

    Parameters
    ----------
    path : str
        path to vcf file, .vcf or .vcf.gz
    samples : List[str], optional
        subset of samples to read, passed to scikit-allel, by default None

    Returns
    -------
    pathopop.Dataset
    """
    import allel

    vcf = allel.read_vcf(
        path,
        samples=samples,
        fields=[
            "samples",
            "calldata/GT",
            "calldata/DP",
            "variants/CHROM",
            "variants/POS",
            "variants/ID",
            "variants/REF",
            "variants/ALT",
        ],
    )
    assert vcf is not None, f"No variants found in {path}"

    gt = vcf["calldata/GT"]
    censor = (gt < 0).any(axis=2)
    if "calldata/DP" in vcf:
        depth = vcf["calldata/DP"].astype(float)
        censor |= depth <= 0
        depth[censor] = np.nan
    else:
        pathopop.logger.warning(f"No FORMAT/DP in {path}, read depth is not available.")
        depth = None
    gt[censor, :] = -1

    df_snp = pd.DataFrame(
        {
            "CHROM": vcf["variants/CHROM"].astype(str),
            "POS": vcf["variants/POS"].astype(int),
            "REF": vcf["variants/REF"].astype(str),
            "ALT": [",".join(a for a in alt if a != "") for alt in vcf["variants/ALT"]],
        }
    )
    snp_id = pd.Series(vcf["variants/ID"]).astype(str)
    # synthesize CHROM:POS for missing IDs
    snp_id = snp_id.where(
        ~snp_id.isin([".", ""]), df_snp["CHROM"] + ":" + df_snp["POS"].astype(str)
    )
    df_snp.index = pd.Index(snp_id.values, name="snp")

    df_indiv = pd.DataFrame(index=pd.Index(vcf["samples"].astype(str), name="indiv"))

    n_censor = int(censor.sum())
    pathopop.logger.info(
        f"Read {len(df_snp)} variants x {len(df_indiv)} samples from {path}; "
        f"{n_censor} calls with zero depth or missing genotype are censored"
    )
    return pathopop.Dataset(geno=gt, depth=depth, snp=df_snp, indiv=df_indiv)


def read_metadata(path: str, sample_col: str = SAMPLE_COL) -> pd.DataFrame:
    """
    Read sample metadata (comma-separated), one row per sample.

    Parameters
    ----------
    path : str
        path to the csv file
    sample_col : str
        column containing the sample identifiers matching the VCF

    Returns
    -------
    pd.DataFrame
        metadata indexed by sample identifier
    """
    df = pd.read_csv(path, dtype={sample_col: str})
    assert sample_col in df.columns, f"`{sample_col}` is not a column of {path}"
    assert df[sample_col].is_unique, f"sample identifiers in {path} are not unique"
    return df.set_index(sample_col).rename_axis("indiv")


def read_calls(
    vcf: str, metadata: str = None, sample_col: str = SAMPLE_COL
) -> pathopop.Dataset:
    """
    Read a variant call file and join the sample metadata by sample identifier

    Parameters
    ----------
    vcf : str
        path to the vcf file
    metadata : str
        path to the sample metadata csv, by default None
    sample_col : str
        column in the metadata identifying the samples

    Returns
    -------
    pathopop.Dataset
    """
    dset = read_vcf(vcf)
    if metadata is not None:
        dset.append_indiv_info(read_metadata(metadata, sample_col=sample_col))
    return dset


def read_dataset(
    prefix: str,
    snp_info_file: str = None,
    indiv_info_file: str = None,
) -> pathopop.Dataset:
    """
    Read a dataset written by `pathopop.io.write_dataset`.

    <prefix>.zarr, <prefix>.snp_info and <prefix>.indiv_info will be read

    Parameters
    ----------
    prefix: str
        prefix of the dataset
    snp_info_file: str
        SNP info file, by default <prefix>.snp_info
    indiv_info_file: str
        individual info file, by default <prefix>.indiv_info

    Returns
    -------
    Dataset
    """
    if snp_info_file is None:
        snp_info_file = prefix + ".snp_info"
    if indiv_info_file is None:
        indiv_info_file = prefix + ".indiv_info"
    assert os.path.exists(prefix + ".zarr"), f"{prefix}.zarr does not exist"

    # raw values: -1 already marks missing alleles and NaN censored depth
    store = xr.open_zarr(prefix + ".zarr", mask_and_scale=False)
    df_snp = pd.read_csv(snp_info_file, sep="\t", index_col=0, keep_default_na=False)
    df_snp.index = df_snp.index.astype(str)
    missing_cols = [col for col in REQUIRED_SNP_COLUMNS if col not in df_snp.columns]
    assert len(missing_cols) == 0, f"{snp_info_file} lacks the columns {missing_cols}"
    df_indiv = pd.read_csv(indiv_info_file, sep="\t", index_col=0, low_memory=False)
    df_indiv.index = df_indiv.index.astype(str)

    depth = store["depth"].data if "depth" in store else None
    dset = pathopop.Dataset(
        geno=store["geno"].data, depth=depth, snp=df_snp, indiv=df_indiv
    )
    dset.xr.attrs["path"] = prefix
    return dset
