"""Experiment batches: ensemble evaluation, catalog sweeps and fitness sweeps.

Provides the batch runner and the CSV result sink it writes through.
"""
