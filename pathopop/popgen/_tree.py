import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import linkage, to_tree
from scipy.spatial.distance import squareform
from tqdm import tqdm
from typing import Dict, FrozenSet, List
import re
import pathopop
from ._popgeno import PopGeno
from ._distance import bitwise_dist


def _upgma(dist: np.ndarray) -> np.ndarray:
    """UPGMA (average linkage) of a square distance matrix"""
    dm = 0.5 * (dist + dist.T)
    np.fill_diagonal(dm, 0.0)
    return linkage(squareform(dm, checks=False), method="average")


def _clades(Z: np.ndarray) -> List[FrozenSet[int]]:
    """Non-trivial clades (sets of leaf ids) of the linkage, in post-order"""
    root = to_tree(Z)
    n_leaf = root.get_count()
    clades = []

    def traverse(node):
        if node.is_leaf():
            return
        traverse(node.get_left())
        traverse(node.get_right())
        leaves = frozenset(node.pre_order())
        if 1 < len(leaves) < n_leaf:
            clades.append(leaves)

    traverse(root)
    return clades


def _quote(label: str) -> str:
    if re.search(r"[\s():;,\[\]']", label):
        return "'" + label.replace("'", "''") + "'"
    return label


def to_newick(Z: np.ndarray, labels: List[str], support: Dict = None) -> str:
    """
    Convert an UPGMA linkage to a Newick string

    Branch lengths are the difference of node heights, where the height of a
    node is half of its linkage distance. Internal nodes are labeled with their
    bootstrap support if given.

    Parameters
    ----------
    Z : np.ndarray
        scipy linkage matrix
    labels : List[str]
        leaf labels
    support : Dict
        clade (frozenset of leaf ids) -> support in percent

    Returns
    -------
    str
    """
    root = to_tree(Z)

    def build(node, parent_height):
        height = node.dist / 2
        length = f"{parent_height - height:.6f}"
        if node.is_leaf():
            return f"{_quote(str(labels[node.id]))}:{length}"
        left = build(node.get_left(), height)
        right = build(node.get_right(), height)
        name = ""
        if support is not None:
            clade = frozenset(node.pre_order())
            if clade in support:
                name = f"{support[clade]:.0f}"
        return f"({left},{right}){name}:{length}"

    height = root.dist / 2
    left = build(root.get_left(), height)
    right = build(root.get_right(), height)
    return f"({left},{right});"


def upgma_tree(
    pg: PopGeno,
    n_boot: int = 100,
    missing_match: bool = True,
    seed: int = 1234,
) -> dict:
    """
    UPGMA tree of the individuals based on bitwise distances, with bootstrap
    support from resampling SNPs with replacement

    Parameters
    ----------
    pg : PopGeno
        genotypes
    n_boot : int
        number of bootstrap replicates, 0 to skip
    missing_match : bool
        passed to `bitwise_dist`
    seed : int
        random seed of the bootstrap

    Returns
    -------
    dict
        - linkage: scipy linkage matrix
        - labels: individual identifiers
        - support: pd.Series of bootstrap support (percent), indexed by the
          comma-joined labels of each clade
        - clade_support: dict of clade (frozenset of leaf ids) -> support, None
          without bootstrap
        - newick: Newick string
    """
    assert pg.n_indiv >= 3, "at least 3 individuals are needed to build a tree"
    dist = bitwise_dist(pg, missing_match=missing_match)
    assert not np.isnan(dist).any(), "some individuals share no called SNP"
    Z = _upgma(dist)
    labels = [str(i) for i in pg.indiv.index]

    support = None
    if n_boot > 0:
        ref_clades = _clades(Z)
        count = {c: 0 for c in ref_clades}
        rng = np.random.default_rng(seed)
        for _ in tqdm(range(n_boot), desc="pathopop.popgen.upgma_tree"):
            snp_idx = rng.choice(pg.n_snp, pg.n_snp, replace=True)
            boot_dist = bitwise_dist(
                pg.subset(snp_idx=snp_idx), missing_match=missing_match
            )
            boot_dist = np.nan_to_num(boot_dist, nan=np.nanmax(boot_dist))
            boot_clades = set(_clades(_upgma(boot_dist)))
            for c in ref_clades:
                count[c] += c in boot_clades
        support = {c: 100.0 * n / n_boot for c, n in count.items()}

    newick = to_newick(Z, labels, support=support)
    pathopop.logger.info(
        f"pathopop.popgen.upgma_tree: {pg.n_indiv} individuals, {n_boot} bootstrap replicates"
    )
    df_support = pd.Series(
        {
            ",".join(sorted(labels[i] for i in c)): s
            for c, s in (support or {}).items()
        },
        dtype=float,
        name="support",
    )
    return {
        "linkage": Z,
        "labels": labels,
        "support": df_support,
        "clade_support": support,
        "newick": newick,
    }
