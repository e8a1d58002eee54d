import numpy as np
import pandas as pd
from typing import List, Optional
import pathopop


class PopGeno(object):
    """Genotypes of individuals annotated with population strata.

    dosage: (n_indiv, n_snp) number of non-reference alleles, NaN for missing.
    indiv: strata of the individuals, aligned row-by-row with `dosage`.
    pop: the column of `indiv` used as population label.

    Derived from a filtered `pathopop.Dataset` with `PopGeno.from_dataset`;
    `set_pop`, `subset` and `clone_correct` return new objects.
    """

    def __init__(
        self,
        dosage: np.ndarray,
        indiv: Optional[pd.DataFrame] = None,
        snp: Optional[pd.DataFrame] = None,
        ploidy: int = 2,
        pop: Optional[str] = None,
    ):
        dosage = np.asarray(dosage, dtype=float)
        assert dosage.ndim == 2, "dosage must be of shape (n_indiv, n_snp)"
        n_indiv, n_snp = dosage.shape
        if indiv is None:
            indiv = pd.DataFrame(index=pd.RangeIndex(stop=n_indiv))
        if snp is None:
            snp = pd.DataFrame(index=pd.RangeIndex(stop=n_snp))
        assert len(indiv) == n_indiv, "indiv must have n_indiv rows"
        assert len(snp) == n_snp, "snp must have n_snp rows"
        if pop is not None:
            assert pop in indiv.columns, f"`{pop}` is not a column of indiv"

        self.dosage = dosage
        self.indiv = indiv
        self.snp = snp
        self.ploidy = ploidy
        self.pop = pop

    @classmethod
    def from_dataset(cls, dset: pathopop.Dataset, pop: str = None) -> "PopGeno":
        """
        Convert a dataset into a PopGeno

        Parameters
        ----------
        dset : pathopop.Dataset
            filtered dataset
        pop : str
            column of dset.indiv used as population label

        Returns
        -------
        PopGeno
        """
        return cls(
            dosage=dset.dosage().compute().T,
            indiv=dset.indiv.copy(),
            snp=dset.snp.copy(),
            ploidy=dset.ploidy,
            pop=pop,
        )

    def __repr__(self) -> str:
        descr = f"pathopop.popgen.PopGeno with n_indiv x n_snp = {self.n_indiv} x {self.n_snp}"
        if self.pop is not None:
            descr += f", pop='{self.pop}' ({len(self.pop_names)} populations)"
        return descr

    @property
    def n_indiv(self) -> int:
        return self.dosage.shape[0]

    @property
    def n_snp(self) -> int:
        return self.dosage.shape[1]

    @property
    def has_missing(self) -> bool:
        return bool(np.isnan(self.dosage).any())

    @property
    def pop_labels(self) -> np.ndarray:
        """Population label of every individual"""
        assert self.pop is not None, "population is not set, use `set_pop`"
        return self.indiv[self.pop].astype(str).values

    @property
    def pop_names(self) -> List[str]:
        """Populations in the order of first appearance"""
        return list(pd.unique(self.pop_labels))

    def set_pop(self, pop: str) -> "PopGeno":
        """Return a PopGeno using `pop` as population label"""
        return PopGeno(
            dosage=self.dosage,
            indiv=self.indiv,
            snp=self.snp,
            ploidy=self.ploidy,
            pop=pop,
        )

    def subset(self, indiv_idx=None, snp_idx=None) -> "PopGeno":
        """
        Subset individuals and / or SNPs

        Parameters
        ----------
        indiv_idx : np.ndarray
            boolean mask or integer positions of individuals, by default all
        snp_idx : np.ndarray
            boolean mask or integer positions of SNPs, by default all
        """
        if indiv_idx is None:
            indiv_idx = np.arange(self.n_indiv)
        if snp_idx is None:
            snp_idx = np.arange(self.n_snp)
        indiv_idx, snp_idx = np.asarray(indiv_idx), np.asarray(snp_idx)
        if indiv_idx.dtype == np.bool_:
            indiv_idx = np.flatnonzero(indiv_idx)
        if snp_idx.dtype == np.bool_:
            snp_idx = np.flatnonzero(snp_idx)
        return PopGeno(
            dosage=self.dosage[np.ix_(indiv_idx, snp_idx)],
            indiv=self.indiv.iloc[indiv_idx].copy(),
            snp=self.snp.iloc[snp_idx].copy(),
            ploidy=self.ploidy,
            pop=self.pop,
        )

    def mlg(self) -> np.ndarray:
        """
        Multilocus genotype of every individual. Individuals with identical calls
        at all SNPs (a missing call being its own state) share an MLG. MLGs are
        numbered from 0 in the order of first appearance.

        Returns
        -------
        np.ndarray
            (n_indiv, ) integer MLG ids
        """
        calls = np.where(np.isnan(self.dosage), -1, self.dosage)
        _, first, inverse = np.unique(
            calls, axis=0, return_index=True, return_inverse=True
        )
        inverse = inverse.reshape(-1)
        rank = np.empty(len(first), dtype=int)
        rank[np.argsort(first)] = np.arange(len(first))
        return rank[inverse]

    def mlg_table(self) -> pd.DataFrame:
        """
        Count of every MLG in every population

        Returns
        -------
        pd.DataFrame
            (n_pop, n_mlg) table with MLG.1, MLG.2, ... columns
        """
        mlg = pd.Series(self.mlg() + 1).map(lambda i: f"MLG.{i}")
        table = pd.crosstab(
            pd.Series(self.pop_labels, name=self.pop),
            pd.Series(mlg.values, name="MLG"),
        )
        mlg_order = sorted(table.columns, key=lambda c: int(c.split(".")[1]))
        return table.reindex(index=self.pop_names, columns=mlg_order)

    def clone_correct(self, strata: List[str] = None) -> "PopGeno":
        """
        Keep one individual of every MLG within each combination of `strata`

        Parameters
        ----------
        strata : List[str]
            columns of indiv, by default [self.pop]. With an empty list, one
            individual per MLG is kept over the whole dataset.

        Returns
        -------
        PopGeno
        """
        if strata is None:
            assert self.pop is not None, "either strata or pop should be set"
            strata = [self.pop]
        df = self.indiv[strata].astype(str).reset_index(drop=True)
        df["_mlg"] = self.mlg()
        keep = ~df.duplicated(keep="first").values
        pathopop.logger.info(
            f"clone_correct: {keep.sum()}/{self.n_indiv} individuals kept "
            f"within strata {strata}"
        )
        return self.subset(indiv_idx=keep)
