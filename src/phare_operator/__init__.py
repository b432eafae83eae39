"""Phare Operator: reconciles Phare micro-service resources into Kubernetes objects."""

__version__ = "0.1.0"
