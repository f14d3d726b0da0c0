"""Module entrypoint for running wikistyle as ``python -m wikistyle``."""

from __future__ import annotations

from wikistyle.cli import main


if __name__ == "__main__":
    main()
