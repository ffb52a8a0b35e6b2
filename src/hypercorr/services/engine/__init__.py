"""Correlation pipeline orchestration."""
