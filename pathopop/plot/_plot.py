import matplotlib.pyplot as plt
from matplotlib import patheffects
from matplotlib.patches import Wedge
import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import dendrogram
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import shortest_path

import pathopop
from typing import Dict, List


def pca(
    df_pca: pd.DataFrame,
    x: str = "PC1",
    y: str = "PC2",
    label_col: str = "Nursery",
    label_order: list = None,
    exp_var_ratio: np.ndarray = None,
    s=20,
    legend_loc="on data",
    alpha=None,
    ax=None,
):
    """PCA plot

    Parameters
    ----------
    df_pca : pd.DataFrame
        dataframe with PCA components, e.g. from `pathopop.popgen.pca`
    x : str, optional
        x-axis, by default "PC1"
    y : str, optional
        y-axis, by default "PC2"
    label_col : str, optional
        column used to color the individuals, by default "Nursery"
    exp_var_ratio : np.ndarray, optional
        explained variance ratio of the components, added to the axis labels
    s : float, optional
    """
    if alpha is None:
        alpha = 1.0
    else:
        assert isinstance(alpha, float) or isinstance(alpha, dict)
    if ax is None:
        ax = plt.gca()

    xlabel, ylabel = x, y
    if exp_var_ratio is not None:
        x_i, y_i = int(x[2:]) - 1, int(y[2:]) - 1
        xlabel = f"{x} ({exp_var_ratio[x_i] * 100:.1f}%)"
        ylabel = f"{y} ({exp_var_ratio[y_i] * 100:.1f}%)"
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)

    if label_col is None:
        ax.scatter(df_pca[x], df_pca[y], s=s, alpha=alpha)
        return

    if label_order is None:
        label_order = df_pca[label_col].unique()

    for label in label_order:
        group = df_pca.loc[df_pca[label_col] == label, :]
        if isinstance(alpha, dict):
            label_alpha = alpha[label] if label in alpha else 1.0
        else:
            label_alpha = alpha
        ax.scatter(group[x], group[y], s=s, label=label, alpha=label_alpha)

    if legend_loc == "on data":
        all_pos = (
            pd.DataFrame(df_pca[[x, y, label_col]])
            .groupby(label_col, observed=True)
            .median()
            .sort_index()
        )

        for label, x_pos, y_pos in all_pos.itertuples():
            ax.text(
                x_pos,
                y_pos,
                label,
                path_effects=[patheffects.withStroke(linewidth=2.5, foreground="w")],
                verticalalignment="center",
                horizontalalignment="center",
            )

    legend = ax.legend(fontsize=8)
    for lh in legend.legend_handles:
        lh.set_alpha(1)


def depth(
    dset: pathopop.Dataset,
    min_depth: float = None,
    max_depth: float = None,
    log_scale: bool = True,
    ax=None,
):
    """Per-sample distribution of read depth over the called genotypes

    Parameters
    ----------
    dset : pathopop.Dataset
        dataset with depth
    min_depth, max_depth : float, optional
        depth bounds drawn as horizontal lines
    log_scale : bool
        whether to use a log scale on the y-axis
    """
    if ax is None:
        ax = plt.gca()
    dp = dset.depth.compute()
    values = [d[~np.isnan(d)] for d in dp.T]
    ax.boxplot(values, showfliers=False)
    ax.set_xticks(np.arange(1, dset.n_indiv + 1))
    ax.set_xticklabels(dset.indiv.index, rotation=90, fontsize=6)
    ax.set_xlabel("Sample")
    ax.set_ylabel("Depth")
    if log_scale:
        ax.set_yscale("log")
    for bound in [min_depth, max_depth]:
        if bound is not None:
            ax.axhline(bound, color="red", ls="--", lw=0.8)


def msn_layout(edges: pd.DataFrame, n_node: int, seed: int = 1234) -> np.ndarray:
    """
    2D node positions of a network: classical multidimensional scaling of the
    shortest-path distances along the edges

    Parameters
    ----------
    edges : pd.DataFrame
        source, target, weight
    n_node : int
        number of nodes

    Returns
    -------
    np.ndarray
        (n_node, 2) coordinates
    """
    if n_node == 1:
        return np.zeros((1, 2))
    # zero-weight edges still connect
    w = edges["weight"].values + 1e-3
    graph = csr_matrix(
        (w, (edges["source"].values, edges["target"].values)), shape=(n_node, n_node)
    )
    dist = shortest_path(graph, directed=False)
    dist[np.isinf(dist)] = np.nanmax(dist[~np.isinf(dist)]) * 2
    # double centering
    j = np.eye(n_node) - 1.0 / n_node
    b = -0.5 * j @ (dist**2) @ j
    eigval, eigvec = np.linalg.eigh(b)
    order = np.argsort(eigval)[::-1][:2]
    coord = eigvec[:, order] * np.sqrt(np.clip(eigval[order], 0, None))
    if coord.shape[1] < 2 or np.allclose(coord[:, 1], 0):
        rng = np.random.default_rng(seed)
        coord = coord + rng.normal(scale=1e-2, size=coord.shape)
    return coord


def msn(
    nodes: pd.DataFrame,
    edges: pd.DataFrame,
    colors: Dict[str, str] = None,
    max_radius: float = None,
    ax=None,
):
    """Minimum spanning network with nodes drawn as pie charts of population

    Parameters
    ----------
    nodes : pd.DataFrame
        output of `pathopop.popgen.msn`, a size column then one column per population
    edges : pd.DataFrame
        output of `pathopop.popgen.msn`
    colors : Dict[str, str], optional
        population -> color
    """
    if ax is None:
        ax = plt.gca()
    pops = [c for c in nodes.columns if c != "size"]
    if colors is None:
        cycle = plt.rcParams["axes.prop_cycle"].by_key()["color"]
        colors = {p: cycle[i % len(cycle)] for i, p in enumerate(pops)}

    pos = msn_layout(edges, len(nodes))
    span = np.ptp(pos, axis=0).max() if len(nodes) > 1 else 1.0
    if max_radius is None:
        max_radius = 0.06 * span if span > 0 else 0.5
    radius = max_radius * np.sqrt(nodes["size"].values / nodes["size"].max())

    w = edges["weight"].values
    lw = np.ones(len(w))
    if len(w) > 0 and np.ptp(w) > 0:
        lw = 0.5 + 2.5 * (1 - (w - w.min()) / np.ptp(w))
    for (src, dst, weight), width in zip(edges.itertuples(index=False), lw):
        ax.plot(
            pos[[src, dst], 0], pos[[src, dst], 1], color="gray", lw=width, zorder=1
        )

    for i, (_, row) in enumerate(nodes.iterrows()):
        start = 0.0
        for p in pops:
            if row[p] == 0:
                continue
            theta = 360.0 * row[p] / row["size"]
            ax.add_patch(
                Wedge(
                    pos[i],
                    radius[i],
                    start,
                    start + theta,
                    facecolor=colors[p],
                    edgecolor="white",
                    lw=0.5,
                    zorder=2,
                )
            )
            start += theta

    for p in pops:
        ax.scatter([], [], color=colors[p], label=p)
    ax.legend(fontsize=8, loc="best")
    ax.set_aspect("equal")
    pad = max_radius * 1.5
    ax.set_xlim(pos[:, 0].min() - pad, pos[:, 0].max() + pad)
    ax.set_ylim(pos[:, 1].min() - pad, pos[:, 1].max() + pad)
    ax.set_xticks([])
    ax.set_yticks([])


def fst(df_fst: pd.DataFrame, annot: bool = True, cmap="viridis", ax=None):
    """Heatmap of a pairwise Fst matrix"""
    if ax is None:
        ax = plt.gca()
    im = ax.imshow(df_fst.values, cmap=cmap)
    n = len(df_fst)
    ax.set_xticks(np.arange(n))
    ax.set_yticks(np.arange(n))
    ax.set_xticklabels(df_fst.columns, rotation=45, ha="right")
    ax.set_yticklabels(df_fst.index)
    if annot:
        for i in range(n):
            for j in range(n):
                ax.text(
                    j,
                    i,
                    f"{df_fst.values[i, j]:.3f}",
                    ha="center",
                    va="center",
                    fontsize=7,
                    path_effects=[patheffects.withStroke(linewidth=2, foreground="w")],
                )
    plt.colorbar(im, ax=ax, label="$F_{ST}$")


def tree(res: dict, label_map: Dict[str, str] = None, ax=None):
    """UPGMA dendrogram with bootstrap support on the internal nodes

    Parameters
    ----------
    res : dict
        output of `pathopop.popgen.upgma_tree`
    label_map : Dict[str, str], optional
        leaf label -> displayed label, e.g. sample -> nursery
    """
    if ax is None:
        ax = plt.gca()
    labels = res["labels"]
    if label_map is not None:
        labels = [f"{lbl} ({label_map[lbl]})" for lbl in labels]
    # linkage distances are halved to show node heights
    Z = res["linkage"].copy()
    Z[:, 2] = Z[:, 2] / 2
    dn = dendrogram(
        Z, labels=labels, orientation="left", ax=ax, color_threshold=0, leaf_font_size=7
    )
    ax.set_xlabel("Distance")

    support = res["clade_support"]
    if support is None:
        return
    n_leaf = len(labels)
    # dendrogram places the leaf of rank t at 5 + 10 * t
    members = [frozenset([i]) for i in range(n_leaf)]
    pos = np.zeros(2 * n_leaf - 1)
    pos[dn["leaves"]] = 5 + 10 * np.arange(n_leaf)
    for k, (a, b, h, _) in enumerate(Z):
        a, b = int(a), int(b)
        members.append(members[a] | members[b])
        pos[n_leaf + k] = (pos[a] + pos[b]) / 2
        clade = members[n_leaf + k]
        if clade in support:
            ax.text(
                h,
                pos[n_leaf + k],
                f"{support[clade]:.0f}",
                fontsize=6,
                ha="right",
                va="bottom",
            )


def amova(res: dict, axes=None, bins: int = 30):
    """Permutation distributions of the AMOVA Phi statistics

    Parameters
    ----------
    res : dict
        output of `pathopop.popgen.amova`
    """
    names: List[str] = list(res["phi"].index)
    if axes is None:
        _, axes = plt.subplots(ncols=len(names), figsize=(3.5 * len(names), 3), dpi=150)
    axes = np.atleast_1d(axes)
    for ax, name in zip(axes, names):
        obs = res["phi"].loc[name, "Phi"]
        ax.hist(res["perm"][name], bins=bins, color="lightgray", edgecolor="gray")
        ax.axvline(obs, color="red")
        ax.set_title(f"{name} = {obs:.3f}, p = {res['phi'].loc[name, 'p']:.3g}")
        ax.set_xlabel(name)
    axes[0].set_ylabel("Permutations")
