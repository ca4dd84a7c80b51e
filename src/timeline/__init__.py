"""
Timeline layer: per-order event assembly, branch classification and
financial summaries.
"""
