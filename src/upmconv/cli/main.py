"""Convert a .unitypackage into a UPM/VPM zip package."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import yaml

from upmconv.errors import ConversionError
from upmconv.pipeline.converter import convert_files
from upmconv.utils.config import AppConfig, ConvertConfig
from upmconv.utils.logging import configure_logging


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="upmconv", description=__doc__)
    parser.add_argument("package", metavar="UNITY_PACKAGE", help="Path to the .unitypackage file")
    parser.add_argument("manifest", metavar="PACKAGE_JSON", help="Path to the package.json describing the package")
    parser.add_argument("output", metavar="UPM_PACKAGE", help="Path to write the converted package")
    parser.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML config file; may be given more than once, later files override earlier ones",
    )
    parser.add_argument("--strict", action="store_true", help="Fail on the first malformed asset group")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser


def _load_config(args: argparse.Namespace) -> ConvertConfig:
    cfg = AppConfig.from_files(*args.config)
    config = ConvertConfig.from_app_config(cfg)
    if args.strict:
        config.strict = True
    return config


def run(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    try:
        configure_logging(args.log_level)
        config = _load_config(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"error: config failed: {exc}", file=sys.stderr)
        return 1

    try:
        result = convert_files(args.package, args.manifest, args.output, config)
    except ConversionError as exc:
        print(f"error: {exc.stage} failed: {exc}", file=sys.stderr)
        return 1

    if result.warnings:
        print(f"warning: skipped {len(result.warnings)} asset group(s):", file=sys.stderr)
        for warning in result.warnings:
            print(f"  {warning}", file=sys.stderr)
    print(f"Wrote {result.entries_written} entries under {result.root_name}/ to {args.output}")
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
