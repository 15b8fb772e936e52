"""Workout rotation tracker: recency-based muscle group recommendations."""
