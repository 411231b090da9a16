"""Work program: occupies a job slot for the given number of seconds."""

from __future__ import annotations

import argparse
import time


def main(argv=None) -> int:
    """Sleep for the CPU time given as the only argument."""
    parser = argparse.ArgumentParser(
        prog="aubatch-worker", description="Simulate a job by sleeping."
    )
    parser.add_argument("cpu_time", type=float, help="seconds to run")
    args = parser.parse_args(argv)
    time.sleep(max(0.0, args.cpu_time))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())