"""Quantitative information flow: priors, channels, leakage measures, refinement, grids and plots."""

__version__ = "0.1.0"