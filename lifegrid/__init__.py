"""
Life in Months - lifespan grid annotation package

This is the root package for the life grid, containing shared utilities and the
interactive editor used to annotate a lifetime of months with colors and labels.

Core modules:
- datetime_utils: Months lived, current month progress, cell calendar dates
- utils: Environment parsing helpers
- editor: Grid coordinates, color suggestions, selection state machine,
  annotation store, debounced persistence and the HTTP client
"""

__version__ = "0.4.2"
