"""
Shared utilities: configuration constants, logging, errors, metrics, checkpoints and data loading
"""
