"""Merge decision services: condition evaluation, record store, coordinator."""
