import pathopop
from ._utils import log_params


def filter_vcf(
    vcf: str,
    out: str,
    metadata: str = None,
    min_depth: float = 4,
    max_depth: float = 500,
    quantile: bool = True,
    max_indiv_missing_1: float = 0.5,
    max_snp_missing: float = 0.05,
    max_indiv_missing_2: float = 0.2,
    polymorphic: bool = True,
    min_mac: int = 2,
    drop_missing: bool = True,
    plot_depth: bool = True,
):
    """
    Filter a VCF by read depth, missingness and minor allele count.

    Parameters
    ----------
    vcf : str
        path to the (compressed) vcf file with GT and DP
    out : str
        output prefix. {out}.zarr, {out}.snp_info, {out}.indiv_info,
        {out}.filter_report.tsv (and {out}.depth.png) will be produced
    metadata : str
        csv file with Sample, Nursery, Source, Marker columns
    min_depth : float
        minimum read depth of a call
    max_depth : float
        maximum read depth of a call
    quantile : bool
        whether to censor calls outside the per-sample 5% / 95% depth quantiles
    max_indiv_missing_1 : float
        maximum missing rate of a sample in the first pass
    max_snp_missing : float
        maximum missing rate of a SNP
    max_indiv_missing_2 : float
        maximum missing rate of a sample in the second pass
    polymorphic : bool
        whether to remove monomorphic SNPs
    min_mac : int
        minimum minor allele count
    drop_missing : bool
        whether to remove SNPs with any missing genotype after the MAC filter
    plot_depth : bool
        whether to plot the per-sample depth of the input

    Examples
    --------
    .. code-block:: bash

        pathopop filter-vcf --vcf calls.vcf.gz --metadata samples.csv --out filtered
    """
    log_params("filter-vcf", locals())

    dset = pathopop.io.read_calls(vcf=vcf, metadata=metadata)
    if plot_depth and dset.has_depth:
        import matplotlib.pyplot as plt
        from ._utils import save_fig

        fig, ax = plt.subplots(figsize=(max(4, dset.n_indiv * 0.15), 3))
        pathopop.plot.depth(dset, min_depth=min_depth, max_depth=max_depth, ax=ax)
        save_fig(fig, f"{out}.depth.png")
        plt.close(fig)

    stages = pathopop.filter.depth_filter_stages(
        min_depth=min_depth,
        max_depth=max_depth,
        quantile=quantile,
        max_indiv_missing_1=max_indiv_missing_1,
        max_snp_missing=max_snp_missing,
        max_indiv_missing_2=max_indiv_missing_2,
        polymorphic=polymorphic,
    ) + pathopop.filter.maf_filter_stages(min_mac=min_mac, drop_missing=drop_missing)

    dset, df_report = pathopop.filter.run_stages(dset, stages, return_report=True)
    pathopop.io.write_dataset(dset, out)
    pathopop.io.write_table(df_report, f"{out}.filter_report.tsv")
