import numpy as np
import pathopop
from typing import List, Union


def log_params(name, params):
    pathopop.logger.info(
        f"Received parameters: \n{name}\n  "
        + "\n  ".join(f"--{k}={v}" for k, v in params.items())
    )


def parse_list(value: Union[str, List[str], tuple]) -> List[str]:
    """Comma-separated string (or the tuple parsed by fire) to a list of str"""
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip() != ""]
    return [str(v) for v in value]


def load_popgeno(
    prefix: str, pop: str = "Nursery", drop_missing: bool = False
) -> pathopop.popgen.PopGeno:
    """Read a filtered dataset checkpoint and convert it to PopGeno"""
    dset = pathopop.io.read_dataset(prefix)
    pg = pathopop.popgen.PopGeno.from_dataset(dset, pop=pop)
    if drop_missing and pg.has_missing:
        complete = ~np.isnan(pg.dosage).any(axis=0)
        pathopop.logger.info(
            f"{(~complete).sum()}/{pg.n_snp} SNPs with missing genotypes are dropped"
        )
        pg = pg.subset(snp_idx=complete)
    return pg


def save_fig(fig, path: str):
    fig.tight_layout()
    fig.savefig(path, bbox_inches="tight", dpi=150)
    pathopop.logger.info(f"Figure saved to {path}")
