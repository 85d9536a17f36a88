"""
Optional inference backends for yolo2_kit.

Kept out of the package namespace so decoding works without an inference
runtime installed.
"""

from __future__ import annotations

__all__ = []
