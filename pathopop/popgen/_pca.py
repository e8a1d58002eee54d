import numpy as np
import pandas as pd
import dask.array as da
import dask
import pathopop
from typing import Tuple
from .._errors import ZeroVarianceError
from ._popgeno import PopGeno


def pca(
    pg: PopGeno, n_components: int = 10, n_power_iter: int = 4, seed: int = 1234
) -> Tuple[pd.DataFrame, np.ndarray]:
    """
    Principal component analysis of the dosage matrix

    Each SNP is mean-imputed, centered and scaled to variance 1; SNPs without
    variation are dropped.

    Parameters
    ----------
    pg : PopGeno
        genotypes
    n_components : int
        number of components, capped at min(n_indiv, n_snp)
    n_power_iter : int
        power iterations of the randomized SVD
    seed : int
        random seed of the randomized SVD

    Returns
    -------
    df_pc : pd.DataFrame
        PC1, PC2, ... of every individual, joined with pg.indiv
    exp_var_ratio : np.ndarray
        fraction of the total variance explained by each component

    Raises
    ------
    ZeroVarianceError
        if no SNP varies across individuals
    """
    gn = pathopop.data.impute_with_mean(pg.dosage, inplace=False, axis=0)
    n_indiv = gn.shape[0]

    mean_ = gn.mean(axis=0)
    std_ = gn.std(axis=0)
    vary = std_ > 0
    if not np.any(vary):
        raise ZeroVarianceError(
            f"None of the {pg.n_snp} SNPs vary across the {n_indiv} individuals."
        )
    if not np.all(vary):
        pathopop.logger.warning(
            f"pathopop.popgen.pca: {(~vary).sum()} SNPs without variation are dropped"
        )
    # standardize to mean 0 and variance 1
    gn = (gn[:, vary] - mean_[vary]) / std_[vary]

    k = min(n_components, *gn.shape)
    u, s, v = da.linalg.svd_compressed(
        da.from_array(gn, chunks=-1), k=k, n_power_iter=n_power_iter, seed=seed
    )
    u, s, v = dask.compute(u, s, v)

    # calculate explained variance, total variance is the number of standardized SNPs
    exp_var = (s**2) / n_indiv
    exp_var_ratio = exp_var / gn.shape[1]

    coords = u[:, :k] * s[:k]
    df_pc = pd.DataFrame(
        coords, index=pg.indiv.index, columns=[f"PC{i + 1}" for i in range(k)]
    )
    df_pc = pd.concat([df_pc, pg.indiv], axis=1)
    return df_pc, exp_var_ratio
