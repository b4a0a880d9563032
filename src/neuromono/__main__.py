"""Module entrypoint for `python -m neuromono`."""

from __future__ import annotations

from neuromono.cli.main import main


if __name__ == "__main__":
    raise SystemExit(main())
