"""Manifest fetching and applying."""
