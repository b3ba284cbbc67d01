"""Module entry point: python -m trip_analyze ..."""

from __future__ import annotations

from trip_analyze.cli import main


if __name__ == "__main__":
    raise SystemExit(main())


