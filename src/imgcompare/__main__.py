"""Allow running the package with: `python -m imgcompare`.

This delegates to :func:`imgcompare.cli.main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
