"""
Command line for permutation tests.

Examples:
  permtest test --sample1 1.2,3.4,2.2 --sample2 0.9,1.1,1.0 --exact
  permtest test --input data.csv --group-col group --metric revenue --permutations 10000 --plot null.png
  permtest precision --precision 0.01 --alpha 0.05 --ci 2
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import SIDEDNESS, TestOptions
from .errors import InvalidArgument
from .power import plan_permutations
from .stats import permutation_test, student_reference
from .utils import as_report_dict, fmt_float, fmt_pvalue


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# ---- Input -------------------------------------------------------------------

def parse_values(text: str) -> np.ndarray:
    """Comma-separated numbers; 'nan' and empty fields are missing values."""
    out: List[float] = []
    for tok in text.split(","):
        tok = tok.strip()
        if not tok or tok.lower() in ("nan", "na"):
            out.append(np.nan)
            continue
        try:
            out.append(float(tok))
        except ValueError:
            raise InvalidArgument(f"Not a number: {tok!r}") from None
    return np.asarray(out, dtype=float)


def infer_group_order(groups: pd.Series) -> Tuple[str, str]:
    """
    (first, second) group labels. first becomes sample1, the experimental
    sample. Common pairs are recognized, otherwise labels are sorted.
    """
    uniq = list(pd.unique(groups.dropna()))
    if len(uniq) != 2:
        raise InvalidArgument(f"Expected exactly 2 groups, found: {uniq}")
    normalized = {str(u).lower(): str(u) for u in uniq}
    for control, treatment in [("control", "treatment"), ("a", "b"), ("0", "1")]:
        if control in normalized and treatment in normalized:
            return normalized[treatment], normalized[control]
    first, second = sorted(map(str, uniq))
    return first, second


def samples_from_csv(
    path: Path,
    group_col: str,
    metric_col: str,
    order: Optional[Sequence[str]] = None,
) -> Tuple[np.ndarray, np.ndarray, Tuple[str, str]]:
    df = pd.read_csv(path)
    missing = [c for c in (group_col, metric_col) if c not in df.columns]
    if missing:
        raise InvalidArgument(f"Missing required columns: {missing}")

    labels = df[group_col].astype(str).where(df[group_col].notna())
    if order:
        first, second = order
    else:
        first, second = infer_group_order(labels)

    metric = pd.to_numeric(df[metric_col], errors="coerce")
    x1 = metric[labels == first].to_numpy(dtype=float)
    x2 = metric[labels == second].to_numpy(dtype=float)
    return x1, x2, (first, second)


# ---- Commands ----------------------------------------------------------------

def cmd_test(args) -> int:
    if args.input is not None:
        x1, x2, (first, second) = samples_from_csv(
            args.input, args.group_col, args.metric, args.order
        )
    elif args.sample1 is not None and args.sample2 is not None:
        x1, x2 = parse_values(args.sample1), parse_values(args.sample2)
        first, second = "sample1", "sample2"
    else:
        raise InvalidArgument("Provide --input, or both --sample1 and --sample2")

    options = TestOptions(
        sidedness=args.sidedness,
        exact=args.exact,
        plot_result=args.plot is not None,
        show_progress=args.progress,
        seed=args.seed,
        n_jobs=args.jobs,
        batch_size=args.batch_size,
    )

    plotter = None
    if args.plot is not None:
        from .viz import plot_null_distribution

        def plotter(null, observed, effect, p):
            plot_null_distribution(null, observed, effect, p, output_path=args.plot)

    res = permutation_test(x1, x2, args.permutations, options=options, plotter=plotter)
    ref = student_reference(x1, x2, sidedness=args.sidedness)

    print(f"\nPermutation test: {first} (n={len(x1)}) vs {second} (n={len(x2)})")
    print(f"Mode: {'exact' if res.exact else 'random'}, {res.n_permutations} permutations, "
          f"sidedness={res.sidedness}")
    print(f"Observed difference: {fmt_float(res.observed_difference)}")
    print(f"Effect size (Hedges' g): {fmt_float(res.effect_size, 2)}")
    print(f"p-value: {fmt_pvalue(res.p_value)}")
    print(f"Reference {ref.method}: t={fmt_float(ref.t, 3)}, p={fmt_pvalue(ref.p_value)}")

    if args.json:
        report = {
            "inputs": {"first": first, "second": second, "n1": len(x1), "n2": len(x2)},
            "result": {k: v for k, v in as_report_dict(res).items() if k != "null_distribution"},
            "reference": as_report_dict(ref),
        }
        Path(args.json).write_text(json.dumps(report, indent=2))
        print(f"\nWrote report: {args.json}")
    return 0


def cmd_precision(args) -> int:
    plan = plan_permutations(args.precision, args.alpha, args.ci)
    print(f"Permutations needed: {plan.n_permutations} "
          f"(p within +/- {plan.precision} at ~{plan.coverage:.0%} confidence, alpha={plan.alpha})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="permtest",
        description="Permutation test for a difference in means between two samples",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # test
    p_test = subparsers.add_parser("test", help="Run a permutation test")
    p_test.add_argument("--sample1", type=str, help="Comma-separated values of the experimental sample")
    p_test.add_argument("--sample2", type=str, help="Comma-separated values of the control sample")
    p_test.add_argument("--input", type=Path, help="CSV with one row per observation")
    p_test.add_argument("--group-col", default="group", help="Group column in --input")
    p_test.add_argument("--metric", default="value", help="Metric column in --input")
    p_test.add_argument("--order", nargs=2, metavar=("FIRST", "SECOND"),
                        help="Group labels for sample1 and sample2 (default: inferred)")
    p_test.add_argument("--permutations", type=int, default=10000)
    p_test.add_argument("--sidedness", choices=SIDEDNESS, default="both")
    p_test.add_argument("--exact", action="store_true", help="Enumerate all partitions")
    p_test.add_argument("--seed", type=int, default=None)
    p_test.add_argument("--jobs", type=int, default=1, help="Parallel workers (-1 = all cores)")
    p_test.add_argument("--batch-size", type=int, default=1000)
    p_test.add_argument("--progress", type=int, default=0, metavar="N",
                        help="Update a progress bar every N permutations (0 = off)")
    p_test.add_argument("--plot", type=Path, default=None, help="Save null distribution plot here")
    p_test.add_argument("--json", type=Path, default=None, help="Write a JSON report here")
    p_test.set_defaults(func=cmd_test)

    # precision
    p_prec = subparsers.add_parser("precision", help="Estimate permutations needed for a precision")
    p_prec.add_argument("--precision", type=float, required=True)
    p_prec.add_argument("--alpha", type=float, default=0.05)
    p_prec.add_argument("--ci", type=int, choices=(1, 2, 3), default=2,
                        help="1, 2 or 3 for ~68%%, ~95%%, ~99%% confidence")
    p_prec.set_defaults(func=cmd_precision)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except InvalidArgument as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
