"""Adapters binding the domain ports to storage and feed formats."""
