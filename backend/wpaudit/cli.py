"""
Command-line entry point: wp-modernization-audit.

Exit codes: 0 on success, 1 on invalid arguments, 2 when the audit is
aborted or fails.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from wpaudit.core.config import settings
from wpaudit.core.exceptions import AuditError, ValidationError
from wpaudit.core.logging import get_logger, setup_logging
from wpaudit.pipeline.audit import AuditAborted
from wpaudit.pipeline.runner import AuditConfig, AuditReport, run_audit
from wpaudit.report.common import RATING_EMOJI, RATING_LABELS, category_rows
from wpaudit.report.writer import RENDERERS, write_report

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILED = 2


class AuditArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on bad arguments; this tool reserves 2 for failed audits."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = AuditArgumentParser(
        prog="wp-modernization-audit",
        description="Audit a WordPress site for performance, SEO, security and modernization readiness.",
    )
    parser.add_argument("--url", required=True, help="WordPress site URL to audit")
    parser.add_argument("--pages", nargs="+", default=["/"], help="Paths to audit, relative to --url")
    parser.add_argument("--auto-pages", action="store_true", help="Select pages from the sitemap instead of --pages")
    parser.add_argument(
        "--max-pages",
        type=positive_int,
        default=settings.AUDIT_MAX_PAGES,
        help="Maximum pages taken from the sitemap with --auto-pages",
    )
    parser.add_argument("--api-url", help="Override the WordPress REST API root URL")
    parser.add_argument(
        "--format",
        choices=sorted(RENDERERS),
        default=settings.AUDIT_DEFAULT_FORMAT,
        help="Report format",
    )
    parser.add_argument("--out", help="Output file path")
    parser.add_argument("--pagespeed-key", help="PageSpeed Insights API key (enables Core Web Vitals)")
    parser.add_argument("--strategy", choices=["mobile", "desktop"], default=settings.PAGESPEED_STRATEGY)
    parser.add_argument("--verbose", action="store_true", help="Print debug logging")
    return parser


def print_summary(report: AuditReport) -> None:
    scores = report.result.scores
    print("\n📊 Audit Complete!\n")
    print(f"Overall Score: {scores.overall}/100")
    print(f"Rating: {RATING_EMOJI[scores.rating]} {RATING_LABELS[scores.rating]}\n")
    print(f"Pages audited: {len(report.pages)}")
    if report.failed_paths:
        print(f"Pages skipped: {', '.join(report.failed_paths)}")
    print("\nCategory Scores:")
    for row in category_rows(report.result):
        print(f"  {row['label'] + ':':<30} {row['score']}/{row['max']}")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else "WARNING", log_format="console")

    config = AuditConfig(
        url=args.url,
        pages=args.pages,
        auto_pages=args.auto_pages,
        max_pages=args.max_pages,
        api_url=args.api_url,
        pagespeed_key=args.pagespeed_key,
        strategy=args.strategy,
    )

    print("\n🔍 WordPress Modernization Audit\n")
    print(f"Auditing: {config.url}")
    print("Pages: " + ("from sitemap" if config.auto_pages else ", ".join(config.pages)))

    try:
        outcome = asyncio.run(run_audit(config))
    except ValidationError as e:
        print(f"Error: {e.message} ({e.detail})", file=sys.stderr)
        return EXIT_USAGE
    except AuditError as e:
        logger.error("Audit failed", error=e.message, detail=e.detail)
        print(f"Audit failed: {e.message}", file=sys.stderr)
        return EXIT_FAILED

    if isinstance(outcome, AuditAborted):
        print(f"Audit aborted: {outcome.reason}", file=sys.stderr)
        if outcome.failed_paths:
            print(f"Failed pages: {', '.join(outcome.failed_paths)}", file=sys.stderr)
        return EXIT_FAILED

    print_summary(outcome)

    try:
        path = write_report(outcome, args.format, args.out)
    except AuditError as e:
        print(f"Could not write report: {e.message} ({e.detail})", file=sys.stderr)
        return EXIT_FAILED

    print(f"✅ Report saved to: {path}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
