from ._logging import logger
from ._errors import (
    EmptyDatasetError,
    ZeroVarianceError,
    SingletonPopulationError,
    MissingGenotypeError,
)
from .dataset import Dataset
from . import data, dataset, io, filter, popgen, plot, cli
from .version import __version__

__all__ = [
    "data",
    "dataset",
    "io",
    "filter",
    "popgen",
    "plot",
    "cli",
    "Dataset",
    "EmptyDatasetError",
    "ZeroVarianceError",
    "SingletonPopulationError",
    "MissingGenotypeError",
]
