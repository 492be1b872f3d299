"""Clients for upstream transit feeds."""
