"""Pydantic schemas shared by services and routes."""
