#!/usr/bin/env python3
"""
Inspect a saved engine stderr log: print what the bridge would extract.

Useful when a new engine build changes its diagnostic output. Save the
engine's stderr after a genmove (or a heatmap), then run this script to see
the parsed variations, labels and heatmap, plus the exact #sabaki payload.

Usage (with the package installed):
    python3 tools/inspect_log.py leelaz-stderr.log [--size 19] [--color B]
                                  [--flat] [--limitdepth]
"""
import argparse
import sys

from analysis.constants import FULL_DEPTH_LIMIT, SHORT_DEPTH_LIMIT
from analysis.heatmap import extract_heatmap
from analysis.labels import assign_labels, format_labels
from analysis.sgf import Color, variations_to_sgf
from analysis.variations import parse_variations
from interface.config import GenmoveLogPayload, embed_payload


def inspect(text: str, size: int, color: Color, flat: bool, depth_limit: int) -> GenmoveLogPayload:
    """Run every extractor over one log and print a summary table."""
    variations = parse_variations(text, depth_limit)
    labels = assign_labels(text, size)
    heatmap = extract_heatmap(text, size)

    print(f"{'#':>3} {'Label':<6} {'Visits':>8}  {'Stats':<40} Moves")
    print("-" * 90)
    for i, variation in enumerate(variations):
        label = labels[i][1] if i < len(labels) else ""
        visits = "?" if variation.visits is None else f"{variation.visits:,}"
        stats = " ".join(f"{k}={v}" for k, v in variation.stats.items())
        print(f"{i + 1:>3} {label:<6} {visits:>8}  {stats:<40} {' '.join(variation.moves)}")

    if heatmap:
        print()
        print(f"Heatmap ({len(heatmap)} rows):")
        for row in heatmap:
            print(" ".join(str(value) for value in row))

    return GenmoveLogPayload(
        variations=variations_to_sgf(variations, color, size, flat=flat),
        labels=format_labels(labels) if variations else "",
        heatmap=heatmap or None,
    )


def main() -> None:
    """Parse arguments, inspect the log, and print the payload."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("log", help="File containing the engine's stderr output.")
    parser.add_argument("--size", type=int, default=19)
    parser.add_argument("--color", choices=["B", "W"], default="B")
    parser.add_argument("--flat", action="store_true")
    parser.add_argument("--limitdepth", action="store_true")
    args = parser.parse_args()

    with open(args.log, encoding="utf-8", errors="replace") as f:
        text = f.read()

    depth_limit = SHORT_DEPTH_LIMIT if args.limitdepth else FULL_DEPTH_LIMIT
    payload = inspect(text, args.size, Color(args.color), args.flat, depth_limit)

    print()
    print(embed_payload(payload))


if __name__ == "__main__":
    sys.exit(main())
