"""Utility helpers for carton."""
