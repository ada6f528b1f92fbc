"""core package initialization.

Making `core` an explicit package so imports like `import core.rng`
work reliably when running `main.py` from the project root.
"""

__all__ = ["app", "rng", "progression", "data", "save", "tuning"]
