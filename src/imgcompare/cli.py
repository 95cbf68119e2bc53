"""imgcompare CLI.

This is the entry point used by:
- `python -m imgcompare`
- the console script `imgcompare` (installed via pyproject.toml)

Examples
--------
imgcompare hash photo.jpg --strategy gradient
imgcompare compare a.jpg b.jpg --rotation 90 --precision 5
imgcompare detect a.jpg https://example.com/b.webp
imgcompare batch a.jpg /data/candidates --detect --out report.csv
imgcompare square portrait.jpg --out portrait-square.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import structlog
from tqdm import tqdm

from .comparator import ImageComparator
from .config import ComparatorConfig, ComparisonMode
from .exceptions import ImageComparatorError
from .hashing import HashStrategy
from .io_utils import is_url, iter_images, write_report_csv, write_report_xlsx


def _add_common(p: argparse.ArgumentParser, precision: bool = True, legacy: bool = True) -> None:
    p.add_argument(
        "--strategy",
        choices=[s.value for s in HashStrategy],
        default=HashStrategy.AVERAGE.value,
        help="Hash encoder (default: average).",
    )
    p.add_argument(
        "--size",
        type=int,
        default=8,
        help="Thumbnail side; the hash has size*size bits (default: 8).",
    )
    if precision:
        p.add_argument(
            "--precision",
            type=int,
            default=3,
            help="Decimal digits kept in percentages (default: 3).",
        )
    if not legacy:
        return
    p.add_argument(
        "--no-color",
        action="store_true",
        help="Legacy mode: single-pass hash, no colour weighting, no rotation.",
    )


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        prog="imgcompare",
        description="Perceptual image hashing and similarity scoring.",
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for diagnostics on stderr (default: WARNING).",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Seconds to wait when an image is given as a URL (default: 10).",
    )
    sub = p.add_subparsers(dest="command", required=True)

    ph = sub.add_parser("hash", help="Print the hash of an image as a bit string.")
    ph.add_argument("image", help="Image path or URL.")
    ph.add_argument("--rotation", type=int, choices=[0, 90, 180, 270], default=0)
    ph.add_argument("--fast", action="store_true", help="Single-pass legacy hash (no rotation).")
    _add_common(ph, precision=False, legacy=False)

    pc = sub.add_parser("compare", help="Similarity of two images (percentage).")
    pc.add_argument("image_a")
    pc.add_argument("image_b")
    pc.add_argument("--rotation", type=int, choices=[0, 90, 180, 270], default=0)
    _add_common(pc)

    pd = sub.add_parser("detect", help="Best similarity over the four right-angle rotations.")
    pd.add_argument("image_a")
    pd.add_argument("image_b")
    _add_common(pd)

    pb = sub.add_parser("batch", help="Score one source image against many candidates.")
    pb.add_argument("source")
    pb.add_argument(
        "candidates",
        nargs="+",
        help="Candidate images, URLs or folders (folders are scanned recursively).",
    )
    pb.add_argument("--detect", action="store_true", help="Use rotation detection.")
    pb.add_argument("--rotation", type=int, choices=[0, 90, 180, 270], default=0)
    pb.add_argument("--out", type=Path, default=None, help="Write a CSV report here.")
    pb.add_argument(
        "--report-xlsx",
        action="store_true",
        help="Also write an .xlsx next to the CSV report (requires openpyxl).",
    )
    pb.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used for scoring (default: 1; 0 = auto).",
    )
    _add_common(pb)

    ps = sub.add_parser("square", help="Pad an image onto a white square canvas.")
    ps.add_argument("image")
    ps.add_argument("--out", type=Path, required=True, help="Output image path.")

    return p.parse_args(argv)


def configure_logging(level: str) -> None:
    """Send structlog output to stderr, filtered at *level*."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _build_comparator(args: argparse.Namespace) -> ImageComparator:
    mode = ComparisonMode.LEGACY if getattr(args, "no_color", False) else ComparisonMode.STANDARD
    config = ComparatorConfig(
        hash_strategy=HashStrategy.coerce(getattr(args, "strategy", HashStrategy.AVERAGE)),
        mode=mode,
        size=getattr(args, "size", 8),
        precision=getattr(args, "precision", 3),
        workers=getattr(args, "workers", 1),
        request_timeout=args.timeout,
    )
    return ImageComparator(config)


def _expand_candidates(items: Sequence[str]) -> Dict[str, str]:
    """Map report keys to candidate inputs, expanding folders."""
    out: Dict[str, str] = {}
    for item in items:
        if not is_url(item) and Path(item).expanduser().is_dir():
            for p in iter_images(Path(item)):
                out[str(p)] = str(p)
        else:
            out[item] = item
    return out


def _run_batch(comparator: ImageComparator, args: argparse.Namespace) -> int:
    candidates = _expand_candidates(args.candidates)
    if not candidates:
        raise SystemExit("No candidate images found. Check extensions and paths.")

    source = comparator.load(args.source)
    mode = "detect" if args.detect else f"compare@{args.rotation}"

    with tqdm(total=len(candidates), desc="Scoring", unit="img") as bar:
        if args.detect:
            scores = comparator.detect_array(source, candidates, progress=lambda _key: bar.update())
        else:
            scores = comparator.compare_array(
                source, candidates, rotation=args.rotation, progress=lambda _key: bar.update()
            )

    rows: List[dict] = []
    for candidate, similarity in scores.items():
        rows.append(
            {
                "source": args.source,
                "candidate": candidate,
                "similarity": similarity,
                "mode": mode,
            }
        )

    for r in sorted(rows, key=lambda r: r["similarity"], reverse=True):
        print(f"{r['similarity']}\t{r['candidate']}")

    if args.out is not None:
        write_report_csv(rows, args.out)
        print(f"Report: {args.out}")
        if args.report_xlsx:
            ok = write_report_xlsx(rows, args.out.with_suffix(".xlsx"))
            if not ok:
                print(
                    "Note: openpyxl is not installed, so the .xlsx report was not created. "
                    "Install with: pip install imgcompare[report]"
                )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run imgcompare.

    Returns
    -------
    int
        Process exit code (0 success, 2 on image/hash/config errors).
    """
    args = _parse_args(argv)
    configure_logging(args.log_level)

    try:
        comparator = _build_comparator(args)

        if args.command == "hash":
            if args.fast:
                bits = comparator.fast_hash_image(args.image)
            else:
                bits = comparator.hash_image(args.image, rotation=args.rotation)
            print(comparator.convert_hash_to_string(bits))
        elif args.command == "compare":
            print(comparator.compare(args.image_a, args.image_b, rotation=args.rotation))
        elif args.command == "detect":
            print(comparator.detect(args.image_a, args.image_b))
        elif args.command == "batch":
            return _run_batch(comparator, args)
        elif args.command == "square":
            out: Path = args.out.expanduser()
            out.parent.mkdir(parents=True, exist_ok=True)
            comparator.square_image(args.image).save(out)
            print(f"Saved: {out}")
    except ImageComparatorError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
