"""Entry point for `python -m cadence_interaction` and `cadence-interaction` console script."""

import sys

from .cli.commands import run_cli


def main():
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
