#!/usr/bin/env python3
"""
Command-Line Interface for SenseScorer
======================================

    sense-scorer [--no-remapping] gold.key to-test.key [remapped.key]

Prints the per-term and overall report to stdout.
"""

import argparse
import sys

from .folds import DEFAULT_N_FOLDS, DEFAULT_SEED
from .metrics import METRICS
from .scorer import Scorer, print_report


USAGE_TEXT = """\
usage: sense-scorer [--no-remapping] gold.key to-test.key [remapped.key]

The last argument specifies an optional output file that contains the
labeling of the to-test.key after the sense-remapping has been performed.
Use --no-remapping when the to-test.key already uses the gold key's
sense ids."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sense-scorer',
        description='SenseScorer: supervised evaluation of induced sense keys',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score an induced key with the Jaccard index (remapping on)
  sense-scorer gold.key induced.key

  # Keep the remapped key for inspection
  sense-scorer gold.key induced.key remapped.key

  # Test key already uses gold sense ids
  sense-scorer --no-remapping gold.key system.key --metric wndc
        """
    )

    parser.add_argument('gold', nargs='?', help='Gold standard key file')
    parser.add_argument('test', nargs='?', help='Key file to be scored')
    parser.add_argument('remapped', nargs='?', help='Where to write the remapped test key')
    parser.add_argument('--no-remapping', action='store_true',
                        help='Score the test labels as they are')
    parser.add_argument('--metric', choices=sorted(METRICS), default='jaccard',
                        help='Agreement metric (default: jaccard)')
    parser.add_argument('--folds', type=int, default=DEFAULT_N_FOLDS,
                        help='Number of cross-validation folds')
    parser.add_argument('--seed', type=int, default=DEFAULT_SEED,
                        help='Seed of the fold shuffle')
    parser.add_argument('--verbose', action='store_true', help='Print progress to stderr')
    return parser


def main(argv=None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.test is None:
        print(USAGE_TEXT)
        return 0

    scorer = Scorer(
        args.metric,
        n_folds=args.folds,
        seed=args.seed,
        perform_remapping=not args.no_remapping,
        verbose=args.verbose,
    )
    report = scorer.score_files(args.gold, args.test, output_path=args.remapped)
    print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
