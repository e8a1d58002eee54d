import dask.array as da
import numpy as np
import pandas as pd
import pytest
import pathopop
from pathopop.filter import (
    filter_depth,
    filter_indiv_missing,
    filter_snp_missing,
    filter_polymorphic,
    filter_mac,
)


def _make_dset(geno, depth=None):
    geno = np.asarray(geno)
    n_snp, n_indiv = geno.shape[0:2]
    return pathopop.Dataset(
        geno=da.from_array(geno),
        depth=None if depth is None else da.from_array(np.asarray(depth, dtype=float)),
        snp=pd.DataFrame(index=pd.Index([f"snp{i}" for i in range(n_snp)], name="snp")),
        indiv=pd.DataFrame(
            index=pd.Index([f"indiv{i}" for i in range(n_indiv)], name="indiv")
        ),
    )


def test_filter_depth():
    dset = pathopop.dataset.load_toy()
    filtered = filter_depth(dset, min_depth=4, max_depth=500)
    depth = filtered.depth.compute()
    called = ~np.isnan(depth)
    assert np.all((depth[called] >= 4) & (depth[called] <= 500))
    # censored cells are missing genotypes
    assert np.array_equal(filtered.missing().compute(), ~called)
    # S02 at snp5 (depth 2) and S07 at snp6 (depth 600)
    assert filtered.missing().compute().sum() == dset.missing().compute().sum() + 2
    assert filtered.n_snp == dset.n_snp and filtered.n_indiv == dset.n_indiv


def test_depth_quantile_mask():
    depth = np.arange(1, 21, dtype=float)[:, None]
    mask = pathopop.data.depth_quantile_mask(depth, lower=0.05, upper=0.95)
    # only the extremes lie strictly outside [1.95, 19.05]
    assert np.array_equal(np.flatnonzero(mask[:, 0]), [0, 19])

    # constant depth, nothing outside the band; missing cells are never masked
    depth = np.array([[10.0], [10.0], [np.nan], [10.0]])
    mask = pathopop.data.depth_quantile_mask(depth)
    assert not mask.any()


def test_missing_ceiling():
    # indiv0 misses 1 of 4 calls (0.25), indiv1 none
    geno = np.zeros((4, 2, 2), dtype=int)
    geno[0, 0, :] = -1
    dset = _make_dset(geno)
    # a missing rate equal to the ceiling is kept
    assert filter_indiv_missing(dset, max_missing=0.25).n_indiv == 2
    assert filter_indiv_missing(dset, max_missing=0.2).n_indiv == 1
    # snp0 misses 1 of 2 calls (0.5)
    assert filter_snp_missing(dset, max_missing=0.5).n_snp == 4
    assert filter_snp_missing(dset, max_missing=0.49).n_snp == 3


def test_polymorphic():
    geno = np.array(
        [
            # first call missing, 0/1 and 1/0 are the same call
            [[-1, -1], [0, 1], [1, 0]],
            [[0, 0], [0, 0], [0, 1]],
            [[-1, -1], [-1, -1], [-1, -1]],
            [[1, 1], [1, 1], [-1, -1]],
            [[1, 1], [-1, 0], [0, 0]],
        ]
    )
    keep = pathopop.data.is_polymorphic(geno)
    assert np.array_equal(keep, [False, True, False, False, True])
    dset = filter_polymorphic(_make_dset(geno))
    assert dset.snp.index.tolist() == ["snp1", "snp4"]


def test_mac():
    geno = np.array(
        [
            [[0, 0], [0, 1], [0, 0]],
            [[0, 1], [0, 1], [0, 0]],
            [[1, 1], [1, 1], [1, 0]],
        ]
    )
    dset = filter_mac(_make_dset(geno), min_mac=2)
    assert dset.snp.index.tolist() == ["snp1"]


def test_filter_vcf():
    dset = pathopop.dataset.load_toy()
    filtered, df_report = pathopop.filter.filter_vcf(dset, return_report=True)
    assert df_report.index.tolist() == [
        "input",
        "depth",
        "depth_quantile",
        "indiv_missing_1",
        "snp_missing",
        "indiv_missing_2",
        "polymorphic",
    ]
    assert df_report["n_snp"].tolist() == [20, 20, 20, 20, 17, 17, 16]
    assert df_report["n_indiv"].tolist() == [13, 13, 13, 12, 12, 12, 12]
    # the input dataset is not modified
    assert dset.n_snp == 20 and dset.n_indiv == 13

    # the poorly covered isolate, all-missing, under/over covered and
    # monomorphic variants are removed
    assert "S13" not in filtered.indiv.index
    for snp in ["scaffold_2:4012", "snp5", "snp6", "snp3"]:
        assert snp not in filtered.snp.index
    assert filtered.missing().compute().sum() == 0

    filtered, df_report = pathopop.filter.missing_gt_maf_filter(
        filtered, min_mac=2, return_report=True
    )
    assert df_report.index.tolist() == ["input", "mac", "missing_gt"]
    assert filtered.n_snp == 15
    assert filtered.n_indiv == 12
    assert "snp4" not in filtered.snp.index
    mac, _ = pathopop.data.minor_allele_count(filtered.geno.compute())
    assert np.all(mac >= 2)


def test_report_monotone():
    dset = pathopop.dataset.load_toy()
    stages = pathopop.filter.depth_filter_stages() + pathopop.filter.maf_filter_stages()
    _, df_report = pathopop.filter.run_stages(dset, stages, return_report=True)
    assert np.all(np.diff(df_report["n_snp"].values) <= 0)
    assert np.all(np.diff(df_report["n_indiv"].values) <= 0)


def test_idempotent():
    dset = pathopop.dataset.load_toy()
    stages = pathopop.filter.depth_filter_stages(
        quantile=False
    ) + pathopop.filter.maf_filter_stages()
    once = pathopop.filter.run_stages(dset, stages)
    twice = pathopop.filter.run_stages(once, stages)
    assert once.snp.index.equals(twice.snp.index)
    assert once.indiv.index.equals(twice.indiv.index)
    assert np.array_equal(once.geno.compute(), twice.geno.compute())


def test_drop_missing():
    geno = np.array(
        [
            [[0, 0], [0, 1], [1, 1], [-1, -1]],
            [[0, 0], [0, 1], [1, 1], [0, 0]],
        ]
    )
    dset = _make_dset(geno)
    kept = pathopop.filter.missing_gt_maf_filter(dset, min_mac=2, drop_missing=False)
    assert kept.n_snp == 2
    kept = pathopop.filter.missing_gt_maf_filter(dset, min_mac=2, drop_missing=True)
    assert kept.snp.index.tolist() == ["snp1"]


def test_empty():
    dset = pathopop.dataset.load_toy()
    with pytest.raises(pathopop.EmptyDatasetError):
        pathopop.filter.filter_vcf(dset, min_depth=1000, max_depth=2000)

    # no SNP left after the MAC filter
    geno = np.zeros((2, 3, 2), dtype=int)
    with pytest.raises(pathopop.EmptyDatasetError):
        pathopop.filter.missing_gt_maf_filter(_make_dset(geno), min_mac=1)


def _varied_depth_dset():
    # indiv0 has depth 10, 20, ..., 200 across SNPs, the others a constant depth
    n_snp = 20
    geno = np.zeros((n_snp, 4, 2), dtype=int)
    geno[:, 1, 1] = 1
    geno[:, 2, :] = 1
    depth = np.full((n_snp, 4), 50.0)
    depth[:, 0] = np.arange(10, 210, 10)
    return _make_dset(geno, depth)


def test_quantile_feeds_missingness():
    dset = _varied_depth_dset()

    # the lowest and highest depth of indiv0 are censored, which pushes
    # snp0 and snp19 over the SNP missing ceiling
    filtered, df_report = pathopop.filter.filter_vcf(dset, return_report=True)
    assert df_report["n_snp"].tolist() == [20, 20, 20, 20, 18, 18, 18]
    assert df_report["n_indiv"].tolist() == [4] * 7
    assert np.isclose(df_report.loc["depth_quantile", "missing_rate"], 2 / 80)
    assert "snp0" not in filtered.snp.index
    assert "snp19" not in filtered.snp.index

    filtered = pathopop.filter.filter_vcf(dset, quantile=False)
    assert filtered.n_snp == 20

    # with a tolerant SNP ceiling, indiv0 (2 / 20 missing) exceeds the second
    # individual ceiling
    params = dict(max_snp_missing=0.5, max_indiv_missing_2=0.05)
    filtered = pathopop.filter.filter_vcf(dset, **params)
    assert filtered.indiv.index.tolist() == ["indiv1", "indiv2", "indiv3"]
    assert filtered.n_snp == 20
    filtered = pathopop.filter.filter_vcf(dset, quantile=False, **params)
    assert filtered.n_indiv == 4


def test_second_pass_subset():
    dset = _varied_depth_dset()
    stages = pathopop.filter.depth_filter_stages(
        max_snp_missing=0.5, max_indiv_missing_2=0.05
    )
    names = [name for name, _ in stages]
    after_1 = pathopop.filter.run_stages(
        dset, stages[: names.index("indiv_missing_1") + 1]
    )
    after_2 = pathopop.filter.run_stages(
        dset, stages[: names.index("indiv_missing_2") + 1]
    )
    assert after_1.n_indiv == 4
    assert after_2.n_indiv == 3
    assert set(after_2.indiv.index) < set(after_1.indiv.index)

    # same relation on the toy data
    dset = pathopop.dataset.load_toy()
    stages = pathopop.filter.depth_filter_stages()
    names = [name for name, _ in stages]
    after_1 = pathopop.filter.run_stages(
        dset, stages[: names.index("indiv_missing_1") + 1]
    )
    after_2 = pathopop.filter.run_stages(
        dset, stages[: names.index("indiv_missing_2") + 1]
    )
    assert set(after_2.indiv.index) <= set(after_1.indiv.index)
