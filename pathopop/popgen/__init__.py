"""
Population genetic analyses of filtered genotypes

Analyses work on `PopGeno`, the (n_indiv, n_snp) dosage matrix of a filtered
`pathopop.Dataset` together with the strata of the individuals.
"""

from ._popgeno import PopGeno
from ._distance import allele_diff, bitwise_dist, sq_euclidean_dist
from ._pca import pca
from ._msn import msn, spanning_edges
from ._fst import pairwise_fst, check_pop_size, pop_allele_count
from ._tree import upgma_tree, to_newick
from ._amova import amova
from ._diversity import diversity, rarefy, expected_heterozygosity, index_of_association

__all__ = [
    "PopGeno",
    "allele_diff",
    "bitwise_dist",
    "sq_euclidean_dist",
    "pca",
    "msn",
    "spanning_edges",
    "pairwise_fst",
    "check_pop_size",
    "pop_allele_count",
    "upgma_tree",
    "to_newick",
    "amova",
    "diversity",
    "rarefy",
    "expected_heterozygosity",
    "index_of_association",
]
