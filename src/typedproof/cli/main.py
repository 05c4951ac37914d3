"""
Command-line verifier for typing proofs.

    typedproof verify PROOF.json
    typedproof verify PROOF.zip --sampled 5 --format json

Exit status is 0 for a valid proof, 1 for an invalid proof or any error
while processing it, and 2 for usage errors.
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
import zipfile
from pathlib import Path
from typing import Any, Sequence

import orjson

from .. import __version__
from ..core import diagnostics
from ..core.archive import ProofSource, load_proof_source
from ..core.errors import TypedProofError
from ..core.export import is_multi_file, parse_proof
from ..core.screenshots import cross_check
from ..core.settings import Settings
from ..core.verify import (
    MultiFileVerificationReport,
    ProofVerificationReport,
    verify_document,
)
from ..metrics.metrics import MetricsCollector

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typedproof", description="Verify typing proof documents."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    verify = sub.add_parser("verify", help="Verify a proof JSON file or ZIP archive")
    verify.add_argument("path", type=Path, help="Proof .json or .zip")
    verify.add_argument(
        "--sampled",
        type=int,
        metavar="N",
        default=None,
        help="Sampled verification over N random checkpoint segments",
    )
    verify.add_argument("--format", choices=("text", "json"), default="text")
    verify.add_argument("--seed", type=int, default=None, help="Seed for segment sampling")
    verify.add_argument("--verbose", action="store_true", help="Emit internal diagnostics")
    verify.add_argument("--quiet", action="store_true", help="Only set the exit status")
    return parser


def _attach_screenshots(
    report: ProofVerificationReport | MultiFileVerificationReport, source: ProofSource
) -> None:
    if source.screenshots is None or not isinstance(report, ProofVerificationReport):
        return
    try:
        events = parse_proof(source.document).events
    except TypedProofError:
        return
    report.screenshots = cross_check(events, source.screenshots, source.images)


def _render_single(report: ProofVerificationReport, name: str) -> list[str]:
    lines = [
        f"{name}: {'PASSED' if report.valid else 'FAILED'}",
        f"  chain:       {'valid' if report.chain_valid else 'INVALID'}",
        f"  metadata:    {'valid' if report.metadata_valid else 'INVALID'}",
        f"  pure typing: {'yes' if report.is_pure_typing else 'no'}",
        f"  events:      {report.event_count}"
        f" (paste {report.paste_events}, drop {report.drop_events})",
    ]
    if report.posw_stats is not None:
        stats = report.posw_stats
        lines.append(
            f"  posw:        {stats.iterations} iterations per event, "
            f"total {stats.total_time_ms:.1f} ms, avg {stats.average_time_ms:.2f} ms, "
            f"max {stats.max_time_ms:.2f} ms"
        )
    for label, attestation in (
        ("create", report.attestation_info.create),
        ("export", report.attestation_info.export),
    ):
        if attestation is not None:
            lines.append(
                f"  attestation: {label} "
                f"{'verified' if attestation.verified else 'NOT verified'} "
                f"(score {attestation.score:.2f}, action {attestation.action}, "
                f"{attestation.timestamp})"
            )
    if report.chain is not None and report.chain.sampled_result is not None:
        sampled = report.chain.sampled_result
        lines.append(
            f"  sampled:     {len(sampled.sampled_segments)} of "
            f"{sampled.total_segments} segments, "
            f"{sampled.total_events_verified} events checked"
        )
    if report.error_at is not None:
        lines.append(f"  first divergent event: #{report.error_at}")
    if not report.valid:
        reason = report.reason.value if report.reason else "UNKNOWN"
        lines.append(f"  reason:      {reason}: {report.error_message}")
    if report.screenshots is not None:
        lines.append(
            f"  screenshots: {report.screenshots.verified_count}/"
            f"{len(report.screenshots.checks)} verified"
            + ("" if report.screenshots.valid else " (mismatches found)")
        )
    return lines


def render_text(
    report: ProofVerificationReport | MultiFileVerificationReport, name: str
) -> str:
    if isinstance(report, MultiFileVerificationReport):
        lines = [
            f"{name}: {'PASSED' if report.valid else 'FAILED'} "
            f"({len(report.files)} files, {report.tab_switches} tab switches)",
            f"  overall pure typing: {'yes' if report.overall_pure_typing else 'no'}",
        ]
        for file_name, file_report in report.files.items():
            lines.extend("  " + line for line in _render_single(file_report, file_name))
        return "\n".join(lines)
    return "\n".join(_render_single(report, name))


async def run_verify(args: argparse.Namespace) -> int:
    if args.verbose:
        diagnostics.set_enabled(True)
    if args.sampled is not None and args.sampled < 1:
        print("Error: --sampled must be at least 1", file=sys.stderr)
        return EXIT_USAGE

    settings = Settings()
    metrics = MetricsCollector(enabled=settings.core.enable_metrics)
    kwargs: dict[str, Any] = {"mode": "full"}
    if args.sampled is not None:
        kwargs = {
            "mode": "sampled",
            "sample_count": args.sampled,
            "rng": random.Random(args.seed),
        }

    try:
        source = await asyncio.to_thread(load_proof_source, args.path)
        report = await asyncio.to_thread(
            lambda: verify_document(source.document, **kwargs)
        )
        _attach_screenshots(report, source)
    except (TypedProofError, OSError, zipfile.BadZipFile) as e:
        diagnostics.warn("cli", "verification aborted", path=str(args.path), error=str(e))
        if not args.quiet:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID
    await metrics.record_verification(
        valid=report.valid, duration_seconds=report.duration_ms / 1000.0
    )

    if not args.quiet:
        if args.format == "json":
            out = report.to_dict()
            out["path"] = str(args.path)
            out["multiFile"] = is_multi_file(source.document)
            sys.stdout.write(orjson.dumps(out, option=orjson.OPT_INDENT_2).decode() + "\n")
        else:
            print(render_text(report, args.path.name))
    return EXIT_VALID if report.valid else EXIT_INVALID


async def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_USAGE
    if args.command == "verify":
        return await run_verify(args)
    parser.print_usage(sys.stderr)
    return EXIT_USAGE


def cli_main(argv: Sequence[str] | None = None) -> int:
    """CLI main function for non-async entry."""
    return asyncio.run(main(argv))


if __name__ == "__main__":
    sys.exit(cli_main())
