"""Utility helpers for fluentdb."""
