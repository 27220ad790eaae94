"""
grounded-rag: seed a Chroma collection and answer questions grounded in it.
"""

from __future__ import annotations

__version__ = "0.1.0"
