#!/usr/bin/env python

import fire
from ._utils import log_params
from ._filter import filter_vcf
from ._popgen import pca, msn, fst, tree, amova, diversity, run


def cli():
    """
    Entry point for the pathopop command line interface.
    """
    fire.Fire()


if __name__ == "__main__":
    fire.Fire()
