import numpy as np
import pandas as pd
from typing import Tuple
import pathopop
from ._popgeno import PopGeno
from ._distance import bitwise_dist


def _find(parent: np.ndarray, i: int) -> int:
    while parent[i] != i:
        parent[i] = parent[parent[i]]
        i = parent[i]
    return i


def spanning_edges(dist: np.ndarray, include_ties: bool = True) -> pd.DataFrame:
    """
    Edges of a minimum spanning tree (Kruskal), or with `include_ties` of the
    minimum spanning network: the union of all minimum spanning trees. An edge
    of weight w is in the network if its ends are not yet connected by edges
    lighter than w.

    Parameters
    ----------
    dist : np.ndarray
        (n, n) symmetric distance matrix without NaN
    include_ties : bool
        keep all edges tied in weight

    Returns
    -------
    pd.DataFrame
        columns source, target, weight
    """
    assert not np.isnan(dist).any(), "distance matrix contains NaN"
    n = dist.shape[0]
    src, dst = np.triu_indices(n, k=1)
    weight = dist[src, dst]
    order = np.argsort(weight, kind="stable")
    src, dst, weight = src[order], dst[order], weight[order]

    parent = np.arange(n)
    edges = []
    start = 0
    while start < len(weight):
        # edges with the same weight
        stop = start
        while stop < len(weight) and weight[stop] == weight[start]:
            stop += 1
        group = range(start, stop)
        if include_ties:
            # components before adding any edge of this weight
            roots = [(_find(parent, src[e]), _find(parent, dst[e])) for e in group]
            for e, (r_src, r_dst) in zip(group, roots):
                if r_src != r_dst:
                    edges.append((src[e], dst[e], weight[e]))
            for e, (r_src, r_dst) in zip(group, roots):
                parent[_find(parent, r_src)] = _find(parent, r_dst)
        else:
            for e in group:
                r_src, r_dst = _find(parent, src[e]), _find(parent, dst[e])
                if r_src != r_dst:
                    edges.append((src[e], dst[e], weight[e]))
                    parent[r_src] = r_dst
        start = stop

    return pd.DataFrame(edges, columns=["source", "target", "weight"]).astype(
        {"source": int, "target": int, "weight": float}
    )


def msn(
    pg: PopGeno, include_ties: bool = True, missing_match: bool = True
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Minimum spanning network of the multilocus genotypes (MLGs)

    Parameters
    ----------
    pg : PopGeno
        genotypes, with population set
    include_ties : bool
        keep tied edges (reticulations)
    missing_match : bool
        passed to `bitwise_dist`

    Returns
    -------
    nodes : pd.DataFrame
        one row per MLG: size and count of individuals per population
    edges : pd.DataFrame
        source / target MLG ids and bitwise distance
    """
    mlg = pg.mlg()
    n_mlg = mlg.max() + 1
    # representative individual of each MLG
    rep = np.array([np.flatnonzero(mlg == i)[0] for i in range(n_mlg)])
    dist = bitwise_dist(pg.subset(indiv_idx=rep), missing_match=missing_match)
    if np.isnan(dist).any():
        raise ValueError(
            "Some MLGs share no called SNP; use missing_match=True or drop missing genotypes."
        )

    nodes = pd.crosstab(
        pd.Series(mlg, name="MLG"), pd.Series(pg.pop_labels, name=pg.pop)
    )
    nodes = nodes.reindex(columns=pg.pop_names)
    nodes.insert(0, "size", nodes.sum(axis=1))
    nodes.columns.name = None

    edges = spanning_edges(dist, include_ties=include_ties)
    pathopop.logger.info(
        f"pathopop.popgen.msn: {n_mlg} MLGs from {pg.n_indiv} individuals, "
        f"{len(edges)} edges"
    )
    return nodes, edges
