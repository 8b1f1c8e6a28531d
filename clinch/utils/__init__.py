"""Shared helpers — validation, network names, git automation."""
