"""
Depot Stats

Computes per-place storage unit statistics (unit count, available m2/m3,
bucketed average prices) and caches them as place attributes.
"""

__version__ = "1.0.0"
