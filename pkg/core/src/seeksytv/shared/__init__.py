"""Shared wire schemas."""
