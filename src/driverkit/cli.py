# src/driverkit/cli.py
"""
Command-line interface for builder image resolution.

Usage:
    driverkit-images resolve --target ubuntu-generic --architecture amd64 --gcc-version 8
    driverkit-images list --target centos --architecture x86_64 --images-file images.yaml --format yaml

Exit codes:
    0: success
    1: resolution failed (no images, image not found, corrupt manifest)
    2: invalid options or configuration
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from .builder.architecture import Architecture
from .builder.images import (
    BuildRequest,
    GCCVersion,
    ImageNotFoundError,
    ImageSelector,
    ImagesRegistry,
    Target,
    VersionParseError,
    dump_manifest,
    resolve_images,
)
from .config import DriverkitConfig, build_sources, load_config
from .exceptions import ConfigError, DriverkitError, UnsupportedArchitectureError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _add_request_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--target", "-t", help="Build target, e.g. ubuntu-generic", default=None)
    parser.add_argument(
        "--architecture", "-a", help="Build architecture (amd64, arm64, x86_64, aarch64)", default=None
    )
    parser.add_argument("--gcc-version", help="Fixed GCC version", default=None)
    parser.add_argument("--images-file", help="YAML manifest of builder images", default=None)
    parser.add_argument(
        "--repo",
        help="Registry repository to search; repeat for lower priority repos",
        action="append",
        default=None,
    )
    parser.add_argument(
        "--no-registry",
        help="Do not search any registry, use the manifest only",
        action="store_true",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="driverkit-images",
        description="Resolve the builder image for a kernel module build",
    )
    parser.add_argument("--config", "-c", help="Path to configuration file", default=None)
    parser.add_argument("--log-level", "-l", help="Log level (trace..panic)", default=None)
    parser.add_argument("--timeout", help="Timeout in seconds (min 30)", type=int, default=None)
    parser.add_argument("--proxy", help="Proxy URL for the Docker API connection", default=None)
    parser.add_argument("--log-file", help="Also write debug logs to this file", default=None)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resolve_parser = subparsers.add_parser("resolve", help="Print the image for a GCC version")
    _add_request_arguments(resolve_parser)
    resolve_parser.add_argument("--json", help="Output in JSON format", action="store_true")

    list_parser = subparsers.add_parser("list", help="Print every resolved image")
    _add_request_arguments(list_parser)
    list_parser.add_argument(
        "--format",
        "-f",
        choices=["text", "json", "yaml"],
        default="text",
        help="Output format",
    )

    return parser


def _overrides_from_args(parsed: argparse.Namespace) -> dict[str, Any]:
    images: dict[str, Any] = {"images_file": parsed.images_file}
    if parsed.no_registry:
        images["repos"] = []
    elif parsed.repo:
        images["repos"] = parsed.repo

    return {
        "log_level": parsed.log_level,
        "timeout": parsed.timeout,
        "proxy_url": parsed.proxy,
        "log_file": parsed.log_file,
        "target": parsed.target,
        "architecture": parsed.architecture,
        "gcc_version": parsed.gcc_version,
        "images": images,
    }


def _build_registry(config: DriverkitConfig, gcc_version: GCCVersion | None) -> ImagesRegistry:
    """Build the registry for the configured request."""
    sources = build_sources(config, config.target, config.architecture)
    request = BuildRequest(
        target=Target(config.target),
        architecture=config.architecture,
        gcc_version=str(gcc_version) if gcc_version else None,
        sources=sources,
    )
    return resolve_images(request)


def cmd_resolve(config: DriverkitConfig, as_json: bool) -> int:
    """Resolve and print the image for the configured GCC version."""
    if not config.gcc_version:
        print("error: --gcc-version is required for resolve", file=sys.stderr)
        return EXIT_USAGE

    try:
        gcc_version = GCCVersion.parse(config.gcc_version)
    except VersionParseError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    registry = _build_registry(config, gcc_version)
    target = Target(config.target)

    try:
        result = ImageSelector(registry).select(target, gcc_version)
    except ImageNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if as_json:
        payload = {
            **result.image.to_dict(),
            "reason": result.reason,
            "alternatives": [str(v) for v in result.alternatives],
        }
        print(json.dumps(payload, indent=2))
    else:
        print(result.image.name)

    return EXIT_OK


def cmd_list(config: DriverkitConfig, output_format: str) -> int:
    """Print the populated registry."""
    try:
        gcc_version = GCCVersion.parse(config.gcc_version) if config.gcc_version else None
    except VersionParseError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    registry = _build_registry(config, gcc_version)
    images = registry.list_images()

    if output_format == "json":
        print(json.dumps([image.to_dict() for image in images], indent=2))
    elif output_format == "yaml":
        print(dump_manifest(images), end="")
    else:
        for image in images:
            print(f"{image.target}\t{image.gcc_version}\t{image.name}")

    return EXIT_OK


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the driverkit-images CLI.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.command not in ("resolve", "list"):
        parser.print_help()
        return EXIT_OK

    try:
        config = load_config(parsed.config, overrides=_overrides_from_args(parsed))
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(level=config.options.log_level, log_file=config.options.log_file)

    if not config.target or not config.target.strip():
        print("error: a target is required (--target or config)", file=sys.stderr)
        return EXIT_USAGE

    try:
        Architecture.from_string(config.architecture)
    except UnsupportedArchitectureError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        if parsed.command == "resolve":
            return cmd_resolve(config, parsed.json)
        return cmd_list(config, parsed.format)
    except DriverkitError as e:
        logger.debug(f"Resolution failed: {e.to_dict()}")
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
