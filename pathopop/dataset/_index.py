import pandas as pd
import numpy as np
from typing import Union, Tuple

Indexer = Union[slice, int, np.ndarray]


def normalize_indices(
    index, snp_names: pd.Index, indiv_names: pd.Index
) -> Tuple[Indexer, Indexer]:
    """Translate `dset[...]` arguments into positional SNP / individual indexers

    Parameters
    ----------
    index : object
        anything passed to `Dataset.__getitem__`: a single indexer (applied to SNPs)
        or a (snp, indiv) pair
    snp_names : pd.Index
        dset.snp.index
    indiv_names : pd.Index
        dset.indiv.index

    Returns
    -------
    Tuple[Indexer, Indexer]
        positional indexers for the SNP and the individual axis
    """
    if isinstance(index, tuple):
        if len(index) == 1:
            snp_ax, indiv_ax = index[0], slice(None)
        elif len(index) == 2:
            snp_ax, indiv_ax = index
        else:
            raise IndexError(
                "data can only be sliced in SNPs (first dim) and individuals (second dim)"
            )
    else:
        snp_ax, indiv_ax = index, slice(None)

    return _positions(snp_ax, snp_names), _positions(indiv_ax, indiv_names)


def _positions(indexer, names: pd.Index) -> Indexer:
    """Convert one indexer (integer, slice, name, boolean mask, list) to positions

    Adapted from anndata's index normalization.
    """
    if isinstance(indexer, slice):
        start, stop = indexer.start, indexer.stop
        if isinstance(start, str):
            start = names.get_loc(start)
        if isinstance(stop, str):
            # slices by name are inclusive
            stop = names.get_loc(stop) + 1
        return slice(start, stop, indexer.step)

    if isinstance(indexer, (int, np.integer)):
        return indexer

    if isinstance(indexer, str):
        return names.get_loc(indexer)

    if pd.api.types.is_list_like(indexer):
        if pd.api.types.is_bool_dtype(indexer):
            arr = np.asarray(indexer, dtype=bool)
        else:
            arr = np.asarray(indexer)
        if arr.ndim != 1:
            arr = np.ravel(arr)
        if arr.dtype == np.bool_:
            if arr.shape[0] != len(names):
                raise IndexError(
                    f"Boolean index of length {arr.shape[0]} does not match "
                    f"the dimension of length {len(names)}."
                )
            return np.flatnonzero(arr)
        if np.issubdtype(arr.dtype, np.integer):
            return arr
        # otherwise index by names
        positions = names.get_indexer(arr)
        if np.any(positions < 0):
            raise KeyError(f"Names {list(arr[positions < 0])} are not in the dataset.")
        return positions

    raise IndexError(f"Unknown indexer {indexer!r} of type {type(indexer)}")
