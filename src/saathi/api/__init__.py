"""SAATHI HTTP API layer."""
