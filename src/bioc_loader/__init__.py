# src/bioc_loader/__init__.py
"""Loads BioC XML literature collections into a relational store."""

__version__ = "1.0.0"
