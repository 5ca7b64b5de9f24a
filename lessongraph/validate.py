"""
CLI: validate a curriculum content directory.

Usage::

    lessongraph validate ./content \\
        --report ./data/curriculum_report.json \\
        [--config ./lessongraph.json] [--strict] [--ext .md --ext .markdown]

    python -m lessongraph validate ./content

Prints every finding to stderr and the learning order to stdout.
Exit code 0 when the curriculum passes, 1 when it does not, 2 on usage or
configuration errors.
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from lessongraph.config import ConfigError, ValidatorConfig, load_config, save_config
from lessongraph.pipeline import validate_content_dir, write_report
from lessongraph.utils import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="lessongraph",
        description="Validate curriculum front matter and resolve the learning order.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Validate a content directory.")
    validate.add_argument("content_dir", nargs="?", default=None)
    validate.add_argument(
        "--config", default=None,
        help="Apply a saved JSON config.",
    )
    validate.add_argument(
        "--save-config", default=None,
        help="Save the effective settings to a JSON config and exit.",
    )
    validate.add_argument(
        "--report", default=None,
        help="Write the full JSON report to this path.",
    )
    validate.add_argument(
        "--strict", action="store_true",
        help="Treat warnings as failures.",
    )
    validate.add_argument(
        "--ext", action="append", default=None, dest="extensions",
        help="Content file extension (repeatable, default .md).",
    )
    validate.add_argument("--entry-phase", type=int, default=None)
    validate.add_argument(
        "--include-draft-aliases", action="store_true",
        help="Also build redirects for draft documents.",
    )
    validate.add_argument("-v", "--verbose", action="store_true")
    validate.add_argument(
        "-q", "--quiet", action="store_true",
        help="Only log warnings and do not print the learning order.",
    )

    args = parser.parse_args(argv)
    if args.content_dir is None and args.save_config is None:
        parser.error("content_dir is required unless --save-config is given")
    return args


def _effective_config(args) -> ValidatorConfig:
    """Config file values overridden by explicit flags."""
    config = load_config(args.config) if args.config else ValidatorConfig()
    values = config.model_dump()
    if args.strict:
        values["strict"] = True
    if args.include_draft_aliases:
        values["include_drafts_in_aliases"] = True
    if args.extensions:
        values["extensions"] = args.extensions
    if args.entry_phase is not None:
        values["entry_phase"] = args.entry_phase
    try:
        return ValidatorConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc


def run(args) -> int:
    """Execute the parsed command and return the exit code."""
    try:
        config = _effective_config(args)
    except ConfigError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    if args.save_config:
        save_config(config, args.save_config)
        return EXIT_OK

    logger.info(
        "Validating %s (extensions=%s, entry_phase=%d, strict=%s)",
        args.content_dir, ",".join(config.extensions),
        config.entry_phase, config.strict,
    )
    try:
        report = validate_content_dir(args.content_dir, config)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    for finding in report.findings:
        print(finding.format(), file=sys.stderr)

    if not args.quiet:
        for slug in report.order:
            print(slug)

    if args.report:
        try:
            write_report(report, args.report)
        except OSError as exc:
            logger.error("Cannot write report to %s: %s", args.report, exc)
            return EXIT_USAGE

    print(
        "%s: %d fatal, %d warning(s), %d document(s) in order."
        % ("PASSED" if report.passed else "FAILED",
           report.fatal_count, report.warning_count, len(report.order)),
        file=sys.stderr,
    )
    return EXIT_OK if report.passed else EXIT_INVALID


def main(argv=None):
    """CLI entry-point."""
    args = _parse_args(argv)
    if args.verbose:
        setup_logging(level=logging.DEBUG)
    elif args.quiet:
        setup_logging(level=logging.WARNING)
    else:
        setup_logging()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
