"""
pathopop.data is for manipulation of the genotype / depth matrices.

These functions do not depend on pathopop.Dataset, and operate on plain
numpy arrays of shape (n_snp, n_indiv[, ploidy]).
"""

from ._geno import (
    impute_with_mean,
    missing_rate,
    depth_quantile_mask,
    allele_count,
    minor_allele_count,
    is_polymorphic,
)
