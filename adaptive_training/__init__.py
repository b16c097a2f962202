"""Adaptive training engine: per-user, per-day workout personalization."""
