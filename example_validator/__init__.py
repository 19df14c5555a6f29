"""Batch runner that executes course example scripts and reports results."""
