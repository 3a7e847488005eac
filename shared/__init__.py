"""Shared infrastructure: models, repositories, services, and utilities."""
