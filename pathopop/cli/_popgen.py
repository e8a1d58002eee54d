import os
import pathopop
import pandas as pd
from ._utils import log_params, parse_list, load_popgeno, save_fig


def pca(
    dset: str,
    out: str,
    pop: str = "Nursery",
    n_components: int = 10,
    x: str = "PC1",
    y: str = "PC2",
):
    """
    Principal component analysis of a filtered dataset

    Parameters
    ----------
    dset : str
        prefix of the filtered dataset written by `filter-vcf`
    out : str
        output prefix. {out}.pc.tsv, {out}.exp_var.tsv and {out}.png will be produced
    pop : str
        column of the sample metadata used to color the samples
    n_components : int
        number of principal components
    x, y : str
        components on the x- and y-axis

    Examples
    --------
    .. code-block:: bash

        pathopop pca --dset filtered --out filtered.pca
    """
    log_params("pca", locals())
    import matplotlib.pyplot as plt

    pg = load_popgeno(dset, pop=pop)
    df_pc, exp_var_ratio = pathopop.popgen.pca(pg, n_components=n_components)
    pathopop.io.write_table(df_pc, f"{out}.pc.tsv")
    pathopop.io.write_table(
        pd.DataFrame(
            {"exp_var_ratio": exp_var_ratio},
            index=pd.Index([f"PC{i + 1}" for i in range(len(exp_var_ratio))], name="PC"),
        ),
        f"{out}.exp_var.tsv",
    )

    fig, ax = plt.subplots(figsize=(4, 4))
    pathopop.plot.pca(df_pc, x=x, y=y, label_col=pop, exp_var_ratio=exp_var_ratio, ax=ax)
    save_fig(fig, f"{out}.png")
    plt.close(fig)


def msn(
    dset: str,
    out: str,
    pop: str = "Nursery",
    include_ties: bool = True,
    missing_match: bool = True,
):
    """
    Minimum spanning network of the multilocus genotypes

    Parameters
    ----------
    dset : str
        prefix of the filtered dataset written by `filter-vcf`
    out : str
        output prefix. {out}.nodes.tsv, {out}.edges.tsv, {out}.mlg.tsv and
        {out}.png will be produced
    pop : str
        column of the sample metadata used to color the nodes
    include_ties : bool
        whether to keep all edges tied in distance
    missing_match : bool
        whether a missing call matches any call in the bitwise distance
    """
    log_params("msn", locals())
    import matplotlib.pyplot as plt

    pg = load_popgeno(dset, pop=pop)
    nodes, edges = pathopop.popgen.msn(
        pg, include_ties=include_ties, missing_match=missing_match
    )
    pathopop.io.write_table(nodes, f"{out}.nodes.tsv")
    pathopop.io.write_table(edges, f"{out}.edges.tsv", index=False)
    pathopop.io.write_table(pg.mlg_table(), f"{out}.mlg.tsv")

    fig, ax = plt.subplots(figsize=(5, 5))
    pathopop.plot.msn(nodes, edges, ax=ax)
    save_fig(fig, f"{out}.png")
    plt.close(fig)


def fst(dset: str, out: str, pop: str = "Nursery"):
    """
    Pairwise Hudson's Fst between populations

    Parameters
    ----------
    dset : str
        prefix of the filtered dataset written by `filter-vcf`
    out : str
        output prefix. {out}.tsv and {out}.png will be produced
    pop : str
        column of the sample metadata defining the populations
    """
    log_params("fst", locals())
    import matplotlib.pyplot as plt

    pg = load_popgeno(dset, pop=pop)
    df_fst = pathopop.popgen.pairwise_fst(pg)
    pathopop.io.write_table(df_fst, f"{out}.tsv")

    n = len(df_fst)
    fig, ax = plt.subplots(figsize=(1.5 + 0.6 * n, 1 + 0.6 * n))
    pathopop.plot.fst(df_fst, ax=ax)
    save_fig(fig, f"{out}.png")
    plt.close(fig)


def tree(
    dset: str,
    out: str,
    pop: str = "Nursery",
    n_boot: int = 100,
    missing_match: bool = True,
    seed: int = 1234,
):
    """
    UPGMA tree of the samples on bitwise distances with bootstrap support

    Parameters
    ----------
    dset : str
        prefix of the filtered dataset written by `filter-vcf`
    out : str
        output prefix. {out}.nwk, {out}.support.tsv and {out}.png will be produced
    pop : str
        column of the sample metadata appended to the leaf labels in the figure
    n_boot : int
        number of bootstrap replicates
    missing_match : bool
        whether a missing call matches any call in the bitwise distance
    seed : int
        random seed of the bootstrap
    """
    log_params("tree", locals())
    import matplotlib.pyplot as plt

    pg = load_popgeno(dset, pop=pop)
    res = pathopop.popgen.upgma_tree(
        pg, n_boot=n_boot, missing_match=missing_match, seed=seed
    )
    pathopop.io.write_newick(res["newick"], f"{out}.nwk")
    pathopop.io.write_table(res["support"].rename_axis("clade").to_frame(), f"{out}.support.tsv")

    label_map = dict(zip(res["labels"], pg.pop_labels))
    fig, ax = plt.subplots(figsize=(5, 1 + 0.18 * pg.n_indiv))
    pathopop.plot.tree(res, label_map=label_map, ax=ax)
    save_fig(fig, f"{out}.png")
    plt.close(fig)


def amova(
    dset: str,
    out: str,
    hierarchy: str = "Nursery",
    n_perm: int = 999,
    clone_correct: bool = False,
    seed: int = 1234,
):
    """
    Analysis of molecular variance

    Parameters
    ----------
    dset : str
        prefix of the filtered dataset written by `filter-vcf`, without missing
        genotypes
    out : str
        output prefix. {out}.table.tsv, {out}.phi.tsv and {out}.png will be produced
    hierarchy : str
        comma-separated strata from the top level down, e.g. "Nursery,Source"
    n_perm : int
        number of permutations
    clone_correct : bool
        whether to keep one sample per MLG within each stratum
    seed : int
        random seed of the permutations
    """
    log_params("amova", locals())
    import matplotlib.pyplot as plt

    hierarchy = parse_list(hierarchy)
    pg = load_popgeno(dset, pop=hierarchy[-1])
    res = pathopop.popgen.amova(
        pg, hierarchy=hierarchy, n_perm=n_perm, clone_correct=clone_correct, seed=seed
    )
    pathopop.io.write_table(res["table"], f"{out}.table.tsv")
    pathopop.io.write_table(res["phi"], f"{out}.phi.tsv")
    if n_perm > 0:
        pathopop.plot.amova(res)
        save_fig(plt.gcf(), f"{out}.png")
        plt.close(plt.gcf())


def diversity(dset: str, out: str, pop: str = "Nursery", rarefy_to: int = None):
    """
    Genotypic diversity per population

    Parameters
    ----------
    dset : str
        prefix of the filtered dataset written by `filter-vcf`
    out : str
        output prefix. {out}.tsv will be produced
    pop : str
        column of the sample metadata defining the populations
    rarefy_to : int
        subsample size of the expected number of MLGs
    """
    log_params("diversity", locals())
    pg = load_popgeno(dset, pop=pop)
    df = pathopop.popgen.diversity(pg, rarefy_to=rarefy_to)
    pathopop.io.write_table(df, f"{out}.tsv")


def run(
    vcf: str,
    metadata: str,
    out_dir: str,
    pop: str = "Nursery",
    hierarchy: str = "Nursery,Source",
    n_boot: int = 100,
    n_perm: int = 999,
    quantile: bool = True,
):
    """
    Run the whole pipeline: filter, PCA, minimum spanning network, Fst, tree,
    AMOVA and diversity. Results are written into `out_dir`.

    Parameters
    ----------
    vcf : str
        path to the (compressed) vcf file with GT and DP
    metadata : str
        csv file with Sample, Nursery, Source, Marker columns
    out_dir : str
        output directory
    pop : str
        column of the sample metadata defining the populations
    hierarchy : str
        comma-separated AMOVA strata from the top level down
    n_boot : int
        number of bootstrap replicates of the tree
    n_perm : int
        number of AMOVA permutations
    quantile : bool
        whether to censor calls outside the per-sample depth quantiles

    Examples
    --------
    .. code-block:: bash

        pathopop run --vcf calls.vcf.gz --metadata samples.csv --out-dir results
    """
    log_params("run", locals())
    from ._filter import filter_vcf

    os.makedirs(out_dir, exist_ok=True)
    prefix = os.path.join(out_dir, "filtered")
    filter_vcf(vcf=vcf, out=prefix, metadata=metadata, quantile=quantile)

    pca(dset=prefix, out=os.path.join(out_dir, "pca"), pop=pop)
    msn(dset=prefix, out=os.path.join(out_dir, "msn"), pop=pop)
    fst(dset=prefix, out=os.path.join(out_dir, "fst"), pop=pop)
    tree(dset=prefix, out=os.path.join(out_dir, "tree"), pop=pop, n_boot=n_boot)
    amova(dset=prefix, out=os.path.join(out_dir, "amova"), hierarchy=hierarchy, n_perm=n_perm)
    diversity(dset=prefix, out=os.path.join(out_dir, "diversity"), pop=pop)
    pathopop.logger.info(f"All results written to {out_dir}")
