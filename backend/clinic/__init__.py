"""Clinic scheduling backend: doctor registry, appointment scheduler and reports."""
