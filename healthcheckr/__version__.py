# ============================================================================
# VERSION - HEALTHCHECKR
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# ============================================================================
"""
Version information for healthcheckr.

This is the single source of truth for the package version.
Updated manually for each release.
"""
# Version format: major.minor.patch
__version__ = "1.2.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-18"

EPOCH = 1
CODENAME = "Health Aggregation"
