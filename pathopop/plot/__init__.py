from ._plot import pca, depth, msn, msn_layout, fst, tree, amova


__all__ = ["pca", "depth", "msn", "msn_layout", "fst", "tree", "amova"]
