from __future__ import annotations

"""Repo-root convenience shim for the schedulelab CLI.

This keeps the most common local workflow short:

    python runner.py simulate --graph project.json --out-summary out/summary.json

It delegates to the canonical entry point:

    python -m schedulelab
"""

import sys


def main() -> int:
    """Run the schedulelab CLI.

    Arguments are forwarded exactly as in `python -m schedulelab`.
    """

    from schedulelab.cli import main as cli_main

    return cli_main(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
