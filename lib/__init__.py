"""Reusable building blocks for dodobot (messaging adapters)."""
