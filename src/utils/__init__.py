"""Utility modules for formatting, logging and input validation."""
