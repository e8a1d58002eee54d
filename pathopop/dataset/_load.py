"""
Load existing data sets
"""
from os.path import dirname, join
from ._dataset import Dataset
import pathopop


def get_test_data_dir() -> str:
    """
    Get toy dataset directory

    Returns
    -------
    str
        Toy dataset directory
    """
    test_data_path = join(dirname(__file__), "../../tests/test-data")
    return test_data_path


def load_toy() -> Dataset:
    """
    Load toy data set: 13 isolates from 3 nurseries typed at 20 variants,
    with read depth and sample metadata (Nursery, Source, Marker).

    Returns
    -------
    Dataset
    """
    data_dir = get_test_data_dir()
    dset = pathopop.io.read_calls(
        vcf=join(data_dir, "toy.vcf"), metadata=join(data_dir, "toy.csv")
    )
    return dset
