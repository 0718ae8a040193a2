"""
Tools: THR reading, image rendering, and raw heightfield export.
"""

__all__ = [
    "thr",
    "render",
    "export_heightfield",
    "paths",
]
