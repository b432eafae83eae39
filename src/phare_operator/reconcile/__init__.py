"""Drift detection, merging and cleanup of managed objects."""
