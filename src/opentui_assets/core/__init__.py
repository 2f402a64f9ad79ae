"""Shared helpers for opentui-assets."""
