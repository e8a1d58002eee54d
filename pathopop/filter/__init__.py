"""
Variant call filters. Stages are functions Dataset -> Dataset; chains are
ordered lists of named stages.
"""
from ._stages import (
    filter_depth,
    filter_depth_quantile,
    filter_indiv_missing,
    filter_snp_missing,
    filter_polymorphic,
    filter_mac,
    filter_missing_gt,
)
from ._chain import (
    depth_filter_stages,
    maf_filter_stages,
    run_stages,
    summarize,
    filter_vcf,
    missing_gt_maf_filter,
)
