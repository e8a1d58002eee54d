import numpy as np
import pandas as pd
import itertools
import pathopop
from .._errors import SingletonPopulationError
from ._popgeno import PopGeno


def check_pop_size(pg: PopGeno, min_size: int = 2) -> pd.Series:
    """
    Raise SingletonPopulationError if a population has fewer than `min_size`
    individuals; return the population sizes.
    """
    size = pd.Series(pg.pop_labels).value_counts().reindex(pg.pop_names)
    small = size[size < min_size]
    if len(small) > 0:
        raise SingletonPopulationError(
            f"Populations of `{pg.pop}` with fewer than {min_size} individuals: "
            + ", ".join(f"{p} (n={n})" for p, n in small.items())
        )
    return size


def pop_allele_count(pg: PopGeno, pop: str) -> np.ndarray:
    """
    Reference / non-reference allele counts within one population

    Returns
    -------
    np.ndarray
        (n_snp, 2) allele counts
    """
    x = pg.dosage[pg.pop_labels == pop]
    n_alt = np.nansum(x, axis=0)
    n_called = pg.ploidy * (~np.isnan(x)).sum(axis=0)
    return np.stack([n_called - n_alt, n_alt], axis=1).astype(int)


def pairwise_fst(pg: PopGeno) -> pd.DataFrame:
    """
    Hudson's Fst between every pair of populations, computed as the ratio of
    the numerator and denominator summed over SNPs (Bhatia et al. 2013).

    Parameters
    ----------
    pg : PopGeno
        genotypes with population set

    Returns
    -------
    pd.DataFrame
        (n_pop, n_pop) symmetric matrix with zero diagonal

    Raises
    ------
    SingletonPopulationError
        if a population has a single individual
    """
    import allel

    check_pop_size(pg, min_size=2)
    pops = pg.pop_names
    assert len(pops) >= 2, "at least two populations are needed"

    ac = {p: pop_allele_count(pg, p) for p in pops}
    df_fst = pd.DataFrame(0.0, index=pops, columns=pops)
    for p1, p2 in itertools.combinations(pops, 2):
        num, den = allel.hudson_fst(ac[p1], ac[p2])
        den_sum = np.nansum(den)
        fst = np.nansum(num) / den_sum if den_sum > 0 else np.nan
        df_fst.loc[p1, p2] = df_fst.loc[p2, p1] = fst

    pathopop.logger.info(
        f"pathopop.popgen.pairwise_fst: {len(pops)} populations of `{pg.pop}`, "
        f"{pg.n_snp} SNPs"
    )
    return df_fst
