"""State layer.

This package is the single source of truth for how activity results are
merged into the aggregate record and how observers learn about it.
"""
