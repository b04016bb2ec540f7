"""Persistence adapter: named blob slots over a swappable backend."""
