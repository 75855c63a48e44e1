"""Data ingestion pipeline.

This package fetches and parses the weekly mortality export and census.
It hands typed observation records to the series transforms.
"""
