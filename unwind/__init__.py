"""
Unwind — an idempotent, revertible installation engine.
"""

__version__ = "0.1.0"
