"""Core backend infrastructure for the disaster response API.

This package contains configuration, logging, database, identity, error and
dependency helpers used by the FastAPI application entrypoint.
"""
