"""Merging of layered config dicts (system, user, explicit file, environment)."""

from __future__ import annotations

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` layered on top.

    Nested dicts merge key by key; any other value, lists included, is
    replaced. A None in ``override`` leaves the base value in place, so a
    partial file can mention a key without clearing it.
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_configs(*layers: dict[str, Any]) -> dict[str, Any]:
    """Merge layers in order; later layers win."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged = deep_merge(merged, layer)
    return merged
