"""Probe orchestration: network classification, the pipeline and its report."""
