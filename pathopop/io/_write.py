import pandas as pd
import xarray as xr
import pathopop


def write_dataset(dset: pathopop.Dataset, out_prefix: str, snp_chunk: int = 1024) -> None:
    """
    Write a dataset to <out_prefix>.zarr, <out_prefix>.snp_info and
    <out_prefix>.indiv_info

    Parameters
    ----------
    dset : pathopop.Dataset
        dataset to write
    out_prefix : str
        output prefix
    snp_chunk : int
        number of SNPs per zarr chunk
    """
    data_vars = {
        "geno": (
            ("snp", "indiv", "ploidy"),
            dset.geno.rechunk((snp_chunk, -1, -1)),
        )
    }
    if dset.has_depth:
        data_vars["depth"] = (("snp", "indiv"), dset.depth.rechunk((snp_chunk, -1)))

    # annotations are kept in the tsv files
    xr.Dataset(data_vars=data_vars).to_zarr(out_prefix + ".zarr", mode="w")
    dset.snp.rename_axis("snp").to_csv(out_prefix + ".snp_info", sep="\t")
    dset.indiv.rename_axis("indiv").to_csv(
        out_prefix + ".indiv_info", sep="\t", na_rep="NA"
    )
    pathopop.logger.info(
        f"Dataset with {dset.n_snp} SNPs x {dset.n_indiv} individuals written to {out_prefix}.*"
    )


def write_table(df: pd.DataFrame, path: str, index: bool = True) -> None:
    """
    Write a result table as tab-separated values

    Parameters
    ----------
    df : pd.DataFrame
        table to write
    path : str
        output path
    index : bool
        whether to write the index
    """
    df.to_csv(path, sep="\t", float_format="%.6g", na_rep="NA", index=index)
    pathopop.logger.info(f"Table written to {path}")


def write_newick(newick: str, path: str) -> None:
    """Write a tree in Newick format"""
    with open(path, "w") as f:
        f.write(newick + "\n")
    pathopop.logger.info(f"Tree written to {path}")
