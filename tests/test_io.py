import os
import tempfile
import numpy as np
import pandas as pd
import pytest
import pathopop


def test_read_metadata():
    data_dir = pathopop.dataset.get_test_data_dir()
    df = pathopop.io.read_metadata(os.path.join(data_dir, "toy.csv"))
    assert df.index.name == "indiv"
    assert list(df.columns) == ["Nursery", "Source", "Marker"]
    assert df.loc["S13", "Nursery"] == "Nursery3"


def test_read_vcf_without_metadata():
    data_dir = pathopop.dataset.get_test_data_dir()
    dset = pathopop.io.read_vcf(os.path.join(data_dir, "toy.vcf"))
    assert dset.indiv.shape == (13, 0)
    assert list(dset.snp.columns) == ["CHROM", "POS", "REF", "ALT"]
    assert dset.snp["POS"].dtype.kind == "i"
    # depth of a called genotype is kept
    assert dset.depth.compute()[0, 0] == 20


def test_dataset_roundtrip():
    dset = pathopop.dataset.load_toy()
    dset = pathopop.filter.filter_depth(dset, min_depth=4, max_depth=500)
    with tempfile.TemporaryDirectory() as tmp_dir:
        prefix = os.path.join(tmp_dir, "toy")
        pathopop.io.write_dataset(dset, prefix)
        for suffix in [".zarr", ".snp_info", ".indiv_info"]:
            assert os.path.exists(prefix + suffix)

        dset2 = pathopop.io.read_dataset(prefix)
        assert dset2.xr.attrs["path"] == prefix
        assert np.array_equal(dset.geno.compute(), dset2.geno.compute())
        assert np.allclose(
            dset.depth.compute(), dset2.depth.compute(), equal_nan=True
        )
        assert np.all(dset.snp.index == dset2.snp.index)
        assert np.all(dset.indiv.index == dset2.indiv.index)
        assert dset.snp["ALT"].tolist() == dset2.snp["ALT"].tolist()
        assert dset.snp["POS"].tolist() == dset2.snp["POS"].tolist()
        assert dset.indiv["Nursery"].tolist() == dset2.indiv["Nursery"].tolist()


def test_write_table():
    df = pd.DataFrame({"a": [1.0, np.nan], "b": ["x", "y"]}, index=["r1", "r2"])
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = os.path.join(tmp_dir, "table.tsv")
        pathopop.io.write_table(df, path)
        with open(path) as f:
            lines = f.read().rstrip("\n").split("\n")
        assert lines[0] == "\ta\tb"
        assert lines[2] == "r2\tNA\ty"

        path = os.path.join(tmp_dir, "tree.nwk")
        pathopop.io.write_newick("(a:1,b:1);", path)
        with open(path) as f:
            assert f.read() == "(a:1,b:1);\n"


def test_read_dataset_snp_columns():
    dset = pathopop.dataset.load_toy()
    with tempfile.TemporaryDirectory() as tmp_dir:
        prefix = os.path.join(tmp_dir, "toy")
        pathopop.io.write_dataset(dset, prefix)
        df_snp = pd.read_csv(prefix + ".snp_info", sep="\t", index_col=0)
        df_snp.drop(columns=["ALT"]).to_csv(prefix + ".snp_info", sep="\t")
        with pytest.raises(AssertionError, match="ALT"):
            pathopop.io.read_dataset(prefix)
