"""
prayerhall - prayer-time-aware availability engine for a pool hall.
"""

__version__ = "0.1.0"
