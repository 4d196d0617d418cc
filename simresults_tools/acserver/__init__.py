"""Assetto Corsa dedicated server (acServer) log dialect."""

from .reader import AcServerReader

__all__ = ["AcServerReader"]
