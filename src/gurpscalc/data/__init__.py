"""Packaged rules data."""
