import numpy as np
import pandas as pd
from scipy.special import gammaln
import pathopop
from ._popgeno import PopGeno
from ._distance import allele_diff


def _comb_ratio(a: np.ndarray, N: int, n: int) -> np.ndarray:
    """C(a, n) / C(N, n), zero where a < n"""
    a = np.asarray(a, dtype=float)
    ratio = np.zeros_like(a)
    ok = a >= n
    ratio[ok] = np.exp(
        gammaln(a[ok] + 1)
        - gammaln(a[ok] - n + 1)
        - gammaln(N + 1)
        + gammaln(N - n + 1)
    )
    return ratio


def rarefy(counts: np.ndarray, n: int):
    """
    Expected number of MLGs in a subsample of `n` individuals (Hurlbert 1971)
    and its standard error (Heck et al. 1975).

    Parameters
    ----------
    counts : np.ndarray
        number of individuals of each MLG
    n : int
        subsample size; with n >= sum(counts) the observed number of MLGs is
        returned with a standard error of 0

    Returns
    -------
    (float, float)
        eMLG, SE
    """
    counts = np.asarray(counts)
    counts = counts[counts > 0]
    N = int(counts.sum())
    if n >= N:
        return float(len(counts)), 0.0
    r = _comb_ratio(N - counts, N, n)
    e = np.sum(1 - r)
    var = np.sum(r * (1 - r))
    i, j = np.triu_indices(len(counts), k=1)
    r_ij = _comb_ratio(N - counts[i] - counts[j], N, n)
    var += 2 * np.sum(r_ij - r[i] * r[j])
    return float(e), float(np.sqrt(max(var, 0.0)))


def expected_heterozygosity(dosage: np.ndarray, ploidy: int) -> float:
    """Nei's unbiased gene diversity averaged over SNPs"""
    called = ~np.isnan(dosage)
    n_allele = ploidy * called.sum(axis=0)
    with np.errstate(invalid="ignore", divide="ignore"):
        p = np.nansum(dosage, axis=0) / n_allele
        h = n_allele / (n_allele - 1) * (1 - p**2 - (1 - p) ** 2)
    h[n_allele < 2] = np.nan
    if np.all(np.isnan(h)):
        return np.nan
    return float(np.nanmean(h))


def _pair_var(sum_d: np.ndarray, sum_d2: np.ndarray, n_pair: int) -> np.ndarray:
    return (sum_d2 - sum_d**2 / n_pair) / n_pair


def index_of_association(dosage: np.ndarray):
    """
    Index of association Ia and standardized rbarD (Agapow & Burt 2001)
    from pairwise allele differences; a missing call matches anything.

    Returns
    -------
    (float, float)
        Ia, rbarD, NaN with fewer than 3 individuals or no variable SNP
    """
    n_indiv, n_snp = dosage.shape
    if n_indiv < 3:
        return np.nan, np.nan
    n_pair = n_indiv * (n_indiv - 1) // 2

    # variance of the distances at each SNP, from the counts of dosage values
    var_locus = np.zeros(n_snp)
    for j in range(n_snp):
        x = dosage[:, j]
        values, counts = np.unique(x[~np.isnan(x)], return_counts=True)
        d = np.abs(values[:, None] - values[None, :])
        cc = np.outer(counts, counts)
        sum_d = np.triu(d * cc, k=1).sum()
        sum_d2 = np.triu(d**2 * cc, k=1).sum()
        var_locus[j] = _pair_var(sum_d, sum_d2, n_pair)

    d_total = allele_diff(dosage)[np.triu_indices(n_indiv, k=1)]
    v_obs = _pair_var(d_total.sum(), (d_total**2).sum(), n_pair)
    v_exp = var_locus.sum()
    if v_exp <= 0:
        return np.nan, np.nan
    ia = v_obs / v_exp - 1
    denom = np.sqrt(var_locus).sum() ** 2 - v_exp
    rbard = (v_obs - v_exp) / denom if denom > 0 else np.nan
    return float(ia), float(rbard)


def _summarize(mlg: np.ndarray, dosage: np.ndarray, ploidy: int, n_rare: int) -> dict:
    counts = np.bincount(mlg)
    counts = counts[counts > 0]
    N = int(counts.sum())
    p = counts / N
    H = -np.sum(p * np.log(p))
    sum_p2 = np.sum(p**2)
    G = 1 / sum_p2
    e_mlg, se = rarefy(counts, n_rare)
    ia, rbard = index_of_association(dosage)
    return {
        "N": N,
        "MLG": len(counts),
        "eMLG": e_mlg,
        "SE": se,
        "H": H,
        "G": G,
        "lambda": 1 - sum_p2,
        "E.5": (G - 1) / (np.exp(H) - 1) if len(counts) > 1 else np.nan,
        "Hexp": expected_heterozygosity(dosage, ploidy),
        "Ia": ia,
        "rbarD": rbard,
    }


def diversity(pg: PopGeno, rarefy_to: int = None) -> pd.DataFrame:
    """
    Genotypic diversity of every population and of the whole sample

    Parameters
    ----------
    pg : PopGeno
        genotypes with population set
    rarefy_to : int
        subsample size of eMLG, by default the larger of 10 and the smallest
        population size

    Returns
    -------
    pd.DataFrame
        one row per population plus "Total", with columns
        N, MLG, eMLG, SE, H, G, lambda, E.5, Hexp, Ia, rbarD
    """
    mlg = pg.mlg()
    labels = pg.pop_labels
    if rarefy_to is None:
        min_size = pd.Series(labels).value_counts().min()
        rarefy_to = max(int(min_size), 10)

    rows = {}
    for p in pg.pop_names:
        idx = labels == p
        rows[p] = _summarize(mlg[idx], pg.dosage[idx], pg.ploidy, rarefy_to)
    rows["Total"] = _summarize(mlg, pg.dosage, pg.ploidy, rarefy_to)

    df = pd.DataFrame.from_dict(rows, orient="index")
    df.index.name = pg.pop
    pathopop.logger.info(
        f"pathopop.popgen.diversity: {len(pg.pop_names)} populations of `{pg.pop}`, "
        f"eMLG rarefied to {rarefy_to}"
    )
    return df
