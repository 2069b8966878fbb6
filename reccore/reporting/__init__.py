"""Reporting helpers: loss plots and cross-run measure tables."""

from .plots import save_loss_curves  # noqa: F401
from .summary import average_measures, measures_frame  # noqa: F401
