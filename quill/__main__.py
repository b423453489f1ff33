"""
Entry point for running quill as a Python module: `python -m quill`

The console script declared in pyproject.toml calls `quill.main:main`
directly; both paths end up in the same `main()`.
"""

from .main import main

if __name__ == "__main__":
    main()
