"""Leaky-bucket traffic shaping simulation."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Iterable, Sequence

BUCKET_SIZE = 5
OUT_RATE = 3


@dataclass(frozen=True)
class SlotReport:
    """What happened to the bucket during one time slot."""

    slot: int
    incoming: int
    discarded: int
    level: int
    remaining: int

    @property
    def overflowed(self) -> bool:
        return self.discarded > 0


def simulate(
    packets: Iterable[int], bucket_size: int = BUCKET_SIZE, out_rate: int = OUT_RATE
) -> list[SlotReport]:
    """Run the bucket over one packet per slot; returns a report per slot."""
    if bucket_size <= 0:
        raise ValueError("bucket size must be positive")
    if out_rate < 0:
        raise ValueError("output rate must not be negative")
    reports = []
    water = 0
    for slot, size in enumerate(packets, start=1):
        if size < 0:
            raise ValueError(f"packet size in slot {slot} must not be negative")
        filled = water + size
        discarded = max(0, filled - bucket_size)
        level = min(filled, bucket_size)
        water = 0 if level <= out_rate else level - out_rate
        reports.append(SlotReport(slot, size, discarded, level, water))
    return reports


def render(reports: Iterable[SlotReport]) -> str:
    """Describe each slot as text."""
    lines = []
    for report in reports:
        lines.append(f"time slot :{report.slot}")
        lines.append(f"incoming packet size : {report.incoming}")
        if report.overflowed:
            lines.append(f"bucket overflow: packet of size {report.discarded} is discarded")
        lines.append(f"current water amount in bucket : {report.level}")
        lines.append(f"after leakage bucket size : {report.remaining}")
    return "".join(line + "\n" for line in lines)


def _parse_packets(text: str) -> list[int]:
    values = [int(token) for token in text.split()]
    if not values:
        raise ValueError("missing number of time slots")
    count, sizes = values[0], values[1:]
    if count < 0:
        raise ValueError("number of time slots must not be negative")
    if len(sizes) < count:
        raise ValueError(f"expected {count} packet sizes, got {len(sizes)}")
    return sizes[:count]


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="netlab-leaky-bucket",
        description="Simulate a leaky bucket from a slot count followed by packet sizes.",
    )
    parser.add_argument("input", nargs="?", help="file with the sizes (default: standard input)")
    parser.add_argument("--bucket-size", type=int, default=BUCKET_SIZE)
    parser.add_argument("--out-rate", type=int, default=OUT_RATE)
    args = parser.parse_args(argv)
    try:
        if args.input:
            with open(args.input, encoding="utf-8") as handle:
                text = handle.read()
        else:
            text = sys.stdin.read()
        reports = simulate(_parse_packets(text), args.bucket_size, args.out_rate)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    sys.stdout.write(render(reports))
    return 0


if __name__ == "__main__":
    sys.exit(main())