"""
Core helpers shared across Asset Sync: constants, errors, paths, progress.
"""
