import pandas as pd
import xarray as xr
import numpy as np
import dask.array as da
import pathopop
import dask
from typing import (
    Hashable,
    Optional,
    Any,
    Dict,
    Union,
)
from ._index import normalize_indices


class Dataset(object):
    """Data structure to contain genotype calls and read depth.

    geno: (n_snp, n_indiv, ploidy) allele indices, -1 denotes a missing allele
    depth: (n_snp, n_indiv) read depth, NaN denotes a censored / missing cell

    A Dataset is not modified in place: slicing and censoring return new objects.
    """

    def __init__(
        self,
        geno: Optional[Union[da.Array, np.ndarray]] = None,
        depth: Optional[Union[da.Array, np.ndarray]] = None,
        snp: Optional[pd.DataFrame] = None,
        indiv: Optional[pd.DataFrame] = None,
        dset_ref=None,
        snp_idx: Union[slice, int, np.ndarray] = None,
        indiv_idx: Union[slice, int, np.ndarray] = None,
    ):
        if dset_ref is not None:
            # initialize from reference data set
            if isinstance(snp_idx, (int, np.integer)):
                assert (
                    0 <= snp_idx < dset_ref.n_snp
                ), f"SNP index `{snp_idx}` is out of range."
                snp_idx = slice(snp_idx, snp_idx + 1, 1)

            if isinstance(indiv_idx, (int, np.integer)):
                assert (
                    0 <= indiv_idx < dset_ref.n_indiv
                ), f"individual index `{indiv_idx}` is out of range."
                indiv_idx = slice(indiv_idx, indiv_idx + 1, 1)

            for name, idx in zip(["snp", "indiv"], [snp_idx, indiv_idx]):
                if isinstance(idx, slice):
                    if idx.step is not None:
                        assert idx.step > 0, f"Slice `{idx}` is not ordered."
                elif isinstance(idx, np.ndarray):
                    assert np.all(
                        np.diff(idx) > 0
                    ), f"{name}_idx=`{idx}` is not ordered according to dset.{name}.index"
                else:
                    raise ValueError(
                        f"`{name}_idx` must be a slice or a numpy array of integers."
                    )

            self._snp = dset_ref.snp.iloc[snp_idx, :].copy()
            self._indiv = dset_ref.indiv.iloc[indiv_idx, :].copy()

            with dask.config.set(**{"array.slicing.split_large_chunks": False}):
                self._xr = dset_ref.xr.isel(snp=snp_idx, indiv=indiv_idx)
            self._xr.attrs = dict(dset_ref.xr.attrs)

        else:
            # initialize from actual data set
            assert geno is not None, "`geno` must not be None"
            if not isinstance(geno, da.Array):
                geno = da.from_array(np.asarray(geno), chunks=-1)
            assert geno.ndim == 3, "`geno` must be of shape (n_snp, n_indiv, ploidy)"

            data_vars: Dict[Hashable, Any] = {}
            data_vars["geno"] = (("snp", "indiv", "ploidy"), geno)

            n_snp, n_indiv = geno.shape[0:2]
            if depth is not None:
                if not isinstance(depth, da.Array):
                    depth = da.from_array(np.asarray(depth, dtype=float), chunks=-1)
                assert (
                    depth.shape == geno.shape[0:2]
                ), "`depth` must be of shape (n_snp, n_indiv)"
                data_vars["depth"] = (("snp", "indiv"), depth.astype(float))

            # assign `indiv` and `snp`
            if snp is None:
                self._snp = pd.DataFrame(index=pd.RangeIndex(stop=n_snp))
            else:
                assert len(snp) == n_snp, "`snp` must have n_snp rows"
                self._snp = snp

            if indiv is None:
                self._indiv = pd.DataFrame(index=pd.RangeIndex(stop=n_indiv))
            else:
                assert len(indiv) == n_indiv, "`indiv` must have n_indiv rows"
                self._indiv = indiv

            self._xr = xr.Dataset(
                data_vars=data_vars,
                coords={"snp": self._snp.index, "indiv": self._indiv.index},
            )
            self._xr.attrs["path"] = None

    def __repr__(self) -> str:
        descr = f"pathopop.Dataset object with n_snp x n_indiv = {self.n_snp} x {self.n_indiv}"
        if "depth" not in self._xr:
            descr += ", no read depth"

        if len(self.snp.columns) > 0:
            descr += "\n\tsnp: " + ", ".join([f"'{col}'" for col in self.snp.columns])
        if len(self.indiv.columns) > 0:
            descr += "\n\tindiv: " + ", ".join(
                [f"'{col}'" for col in self.indiv.columns]
            )

        return descr

    @property
    def n_indiv(self) -> int:
        """Number of individuals."""
        return self._xr.sizes["indiv"]

    @property
    def n_snp(self) -> int:
        """Number of SNPs."""
        return self._xr.sizes["snp"]

    @property
    def ploidy(self) -> int:
        """Number of allele calls per genotype."""
        return self._xr.sizes["ploidy"]

    @property
    def indiv(self) -> pd.DataFrame:
        """One-dimensional annotation of individuals (`pd.DataFrame`)."""
        return self._indiv

    @property
    def snp(self) -> pd.DataFrame:
        """One-dimensional annotation of SNPs (`pd.DataFrame`)."""
        return self._snp

    @property
    def geno(self) -> da.Array:
        """Genotype matrix"""
        return self._xr["geno"].data

    @property
    def depth(self) -> da.Array:
        """Read depth matrix"""
        assert "depth" in self._xr, "Read depth is not available."
        return self._xr["depth"].data

    @property
    def has_depth(self) -> bool:
        return "depth" in self._xr

    @property
    def xr(self) -> xr.Dataset:
        """Return the xr.Dataset used internally"""
        return self._xr

    def missing(self) -> da.Array:
        """(n_snp, n_indiv) boolean matrix, True if any allele call is missing"""
        return (self.geno < 0).any(axis=2)

    def dosage(self) -> da.Array:
        """(n_snp, n_indiv) number of non-reference alleles, NaN for missing calls"""
        n_alt = (self.geno > 0).sum(axis=2).astype(float)
        return da.where(self.missing(), np.nan, n_alt)

    def mask_calls(self, mask: Union[np.ndarray, da.Array]) -> "Dataset":
        """
        Return a new dataset where the calls in `mask` are censored: every allele
        call of the cell is set to -1 and its depth to NaN.

        Parameters
        ----------
        mask : np.ndarray
            (n_snp, n_indiv) boolean matrix of cells to censor

        Returns
        -------
        Dataset
        """
        assert mask.shape == (
            self.n_snp,
            self.n_indiv,
        ), "mask must be of shape (n_snp, n_indiv)"
        if not isinstance(mask, da.Array):
            mask = da.from_array(np.asarray(mask, dtype=bool), chunks=self.geno.chunks[0:2])
        geno = da.where(mask[:, :, None], -1, self.geno).astype(self.geno.dtype)
        depth = da.where(mask, np.nan, self.depth) if self.has_depth else None
        dset = Dataset(
            geno=geno,
            depth=depth,
            snp=self.snp.copy(),
            indiv=self.indiv.copy(),
        )
        dset._xr.attrs = dict(self._xr.attrs)
        return dset

    def append_indiv_info(
        self, df_info: pd.DataFrame, force_update: bool = False
    ) -> None:
        """
        append indiv info to the dataset, individual is matched using the self.indiv.index
        and df_info.index. Missing individuals in df_info will be filled with NaN.

        Parameters
        ----------
        df_info : pd.DataFrame
            DataFrame with the indiv info
        force_update : bool
            If True, update the indiv information even if it already exists.
        """
        n_extra = len(set(df_info.index) - set(self.indiv.index))
        if n_extra > 0:
            pathopop.logger.warning(
                "pathopop.Dataset.append_indiv_info: "
                f"{n_extra}/{len(set(df_info.index))}"
                " individuals in the new dataframe not in the dataset;"
                " These individuals will be ignored."
            )
        n_absent = len(set(self.indiv.index) - set(df_info.index))
        if n_absent > 0:
            pathopop.logger.warning(
                "pathopop.Dataset.append_indiv_info: "
                f"{n_absent}/{len(set(self.indiv.index))}"
                " individuals in the dataset are missing in the provided data frame."
                " These individuals will be filled with NaN."
            )

        df_info = df_info.reindex(self.indiv.index)

        for col in df_info.columns:
            if col in self.indiv.columns:
                if not self.indiv[col].equals(df_info[col]):
                    if force_update:
                        pathopop.logger.info(
                            f"pathopop.Dataset.append_indiv_info: "
                            f"{col} is updated from {self.indiv[col].values[0:5]} ..."
                            f"to {df_info[col].values[0:5]} ..."
                        )
                        self._indiv[col] = df_info[col]
                    else:
                        raise ValueError(
                            "pathopop.Dataset.append_indiv_info: "
                            f"The column '{col}' in the provided data frame is not consistent "
                            "with the dataset."
                        )
            else:
                self._indiv[col] = df_info[col]

    def __getitem__(self, index) -> "Dataset":
        """Returns a sliced view of the object."""
        snp_idx, indiv_idx = normalize_indices(index, self.snp.index, self.indiv.index)
        return Dataset(dset_ref=self, snp_idx=snp_idx, indiv_idx=indiv_idx)
