import numpy as np
import pandas as pd
from tqdm import tqdm
from typing import List
import pathopop
from .._errors import SingletonPopulationError
from ._popgeno import PopGeno
from ._distance import sq_euclidean_dist


def _ssd(d2: np.ndarray, codes: np.ndarray) -> float:
    """Sum of squared deviations within the classes of `codes`"""
    ssd = 0.0
    for c in np.unique(codes):
        idx = np.flatnonzero(codes == c)
        ssd += d2[np.ix_(idx, idx)].sum() / (2 * len(idx))
    return ssd


def _components(d2: np.ndarray, pop: np.ndarray, group: np.ndarray = None) -> dict:
    """
    Variance components of a one-level (pop) or two-level (group / pop) AMOVA
    following Excoffier et al. (1992).

    Parameters
    ----------
    d2 : np.ndarray
        (n, n) squared distances
    pop : np.ndarray
        (n, ) integer population codes
    group : np.ndarray
        (n, ) integer group codes, every population must be within one group

    Returns
    -------
    dict
        df, ssd (lists from the top level to within populations, then total),
        sigma (list from the top level to within populations) and phi (dict)
    """
    N = len(pop)
    ssd_total = d2.sum() / (2 * N)
    ssd_wp = _ssd(d2, pop)
    _, n_p = np.unique(pop, return_counts=True)
    P = len(n_p)

    if group is None:
        df = [P - 1, N - P, N - 1]
        ssd = [ssd_total - ssd_wp, ssd_wp, ssd_total]
        msd_a, msd_w = ssd[0] / df[0], ssd[1] / df[1]
        n0 = (N - (n_p**2).sum() / N) / (P - 1)
        sigma_w = msd_w
        sigma_a = (msd_a - msd_w) / n0
        sigma = [sigma_a, sigma_w]
        phi = {"Phi_ST": sigma_a / (sigma_a + sigma_w)}
    else:
        ssd_wg = _ssd(d2, group)
        df_pop = pd.DataFrame({"pop": pop, "group": group})
        pop_size = df_pop.groupby("pop").size()
        pop_group = df_pop.groupby("pop")["group"].first()
        group_size = df_pop.groupby("group").size()
        G = len(group_size)

        df = [G - 1, P - G, N - P, N - 1]
        ssd = [ssd_total - ssd_wg, ssd_wg - ssd_wp, ssd_wp, ssd_total]
        msd = [ssd[i] / df[i] for i in range(3)]

        # sum over groups of sum_{p in g} n_p^2 / N_g
        s_pg = ((pop_size**2) / group_size.loc[pop_group.values].values).sum()
        n = (N - s_pg) / (P - G)
        n1 = (s_pg - (pop_size**2).sum() / N) / (G - 1)
        n2 = (N - (group_size**2).sum() / N) / (G - 1)

        sigma_c = msd[2]
        sigma_b = (msd[1] - sigma_c) / n
        sigma_a = (msd[0] - sigma_c - n1 * sigma_b) / n2
        total = sigma_a + sigma_b + sigma_c
        sigma = [sigma_a, sigma_b, sigma_c]
        phi = {
            "Phi_CT": sigma_a / total,
            "Phi_SC": sigma_b / (sigma_b + sigma_c),
            "Phi_ST": (sigma_a + sigma_b) / total,
        }
    return {"df": df, "ssd": ssd, "sigma": sigma, "phi": phi}


def amova(
    pg: PopGeno,
    hierarchy: List[str],
    n_perm: int = 999,
    clone_correct: bool = False,
    seed: int = 1234,
) -> dict:
    """
    Analysis of molecular variance over squared Euclidean distances between
    dosage vectors, with one or two nested strata.

    Parameters
    ----------
    pg : PopGeno
        genotypes without missing calls
    hierarchy : List[str]
        strata from the top level down, e.g. ["Nursery"] or ["Nursery", "Source"];
        the lower level is nested within the upper one
    n_perm : int
        number of permutations for the significance test, 0 to skip
    clone_correct : bool
        whether to keep one individual per MLG within each stratum combination
    seed : int
        random seed of the permutations

    Returns
    -------
    dict
        - table: pd.DataFrame with Df, Sum Sq, Mean Sq, Sigma, % per level
        - phi: pd.DataFrame with the Phi statistics and permutation p-values
        - perm: dict of Phi statistic -> np.ndarray of permuted values

    Raises
    ------
    MissingGenotypeError
        if any genotype is missing
    SingletonPopulationError
        if a population at the lowest level has a single individual
    """
    assert len(hierarchy) in [1, 2], "hierarchy should have one or two levels"
    for h in hierarchy:
        assert h in pg.indiv.columns, f"`{h}` is not a column of indiv"
    if clone_correct:
        pg = pg.clone_correct(hierarchy)

    d2 = sq_euclidean_dist(pg)
    strata = pg.indiv[hierarchy].astype(str)

    # populations are the lowest level, identified by the full path of strata
    grouped = strata.groupby(hierarchy, sort=False)
    pop = grouped.ngroup().values
    pop_size = grouped.size()
    if (pop_size < 2).any():
        raise SingletonPopulationError(
            f"Populations of {hierarchy} with a single individual: "
            + ", ".join(map(str, pop_size.index[pop_size < 2]))
        )
    if len(hierarchy) == 2:
        group, group_names = pd.factorize(strata[hierarchy[0]].values)
        assert len(group_names) >= 2, f"at least two levels of `{hierarchy[0]}` are needed"
        assert pop.max() + 1 > len(group_names), (
            f"`{hierarchy[1]}` must subdivide at least one level of `{hierarchy[0]}`"
        )
        row_names = [
            f"Between {hierarchy[0]}",
            f"Between {hierarchy[1]} Within {hierarchy[0]}",
            f"Within {hierarchy[1]}",
        ]
    else:
        group = None
        assert pop.max() + 1 >= 2, f"at least two levels of `{hierarchy[0]}` are needed"
        row_names = [f"Between {hierarchy[0]}", f"Within {hierarchy[0]}"]

    obs = _components(d2, pop, group)
    sigma = np.array(obs["sigma"])
    table = pd.DataFrame(
        {
            "Df": obs["df"],
            "Sum Sq": obs["ssd"],
            "Mean Sq": [s / d for s, d in zip(obs["ssd"], obs["df"])],
            "Sigma": list(sigma) + [sigma.sum()],
            "%": list(100 * sigma / sigma.sum()) + [100.0],
        },
        index=row_names + ["Total"],
    )

    perm = {name: np.zeros(n_perm) for name in obs["phi"]}
    rng = np.random.default_rng(seed)
    if n_perm > 0:
        if group is not None:
            pop_group = pd.Series(group).groupby(pop).first().sort_index().values
        for i in tqdm(range(n_perm), desc="pathopop.popgen.amova"):
            # individuals among all populations
            pop_perm = pop[rng.permutation(len(pop))]
            group_perm = None if group is None else pop_group[pop_perm]
            perm["Phi_ST"][i] = _components(d2, pop_perm, group_perm)["phi"]["Phi_ST"]
            if group is not None:
                # individuals among populations within groups
                pop_perm = pop.copy()
                for g in np.unique(group):
                    idx = np.flatnonzero(group == g)
                    pop_perm[idx] = pop[idx][rng.permutation(len(idx))]
                perm["Phi_SC"][i] = _components(d2, pop_perm, group)["phi"]["Phi_SC"]
                # populations among groups
                group_perm = rng.permutation(pop_group)[pop]
                perm["Phi_CT"][i] = _components(d2, pop, group_perm)["phi"]["Phi_CT"]

    df_phi = pd.DataFrame({"Phi": pd.Series(obs["phi"])})
    if n_perm > 0:
        df_phi["p"] = [
            ((perm[name] >= obs["phi"][name]).sum() + 1) / (n_perm + 1)
            for name in df_phi.index
        ]
    else:
        df_phi["p"] = np.nan

    pathopop.logger.info(
        f"pathopop.popgen.amova: hierarchy {hierarchy}, {pg.n_indiv} individuals, "
        f"{len(pop_size)} populations, {n_perm} permutations"
    )
    return {"table": table, "phi": df_phi, "perm": perm}
