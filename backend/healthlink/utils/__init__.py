"""Utilities - authentication and date keys."""
