"""Cadence - recurring task scheduling."""
