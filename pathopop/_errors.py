"""Errors raised when the data cannot support a filter stage or an analysis."""


class EmptyDatasetError(ValueError):
    """A filter stage removed every variant or every sample."""


class ZeroVarianceError(ValueError):
    """No variant varies across samples, so PCA is undefined."""


class SingletonPopulationError(ValueError):
    """A population has a single sample, so within-population variance is undefined."""


class MissingGenotypeError(ValueError):
    """An analysis that needs complete genotypes received missing calls."""
