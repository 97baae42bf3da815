#!/usr/bin/env python3
"""
JVM Build System CLI Tool

Detects whether a project is built with Gradle or Maven, builds it with the
project's wrapper or a downloaded distribution, and replaces the source tree
with the single deployable artifact the build produced.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional
import logging

import yaml

from .build_system import Build, BuildContext, Buildpack, Detector, default_build_systems
from .config import BuildConfiguration
from .errors import BuildSystemError
from .layers import contribute_layers
from .logger import setup_logger
from .plan import BuildpackPlan

logger = logging.getLogger('jvmbuild')

DETECT_FAIL_CODE = 100


def validate_directory(path: str, name: str) -> Path:
    """Resolve a directory argument, failing if it does not exist."""
    directory = Path(path).resolve()
    if not directory.is_dir():
        raise FileNotFoundError(f"{name} directory does not exist: {directory}")
    return directory


def detect_phase(application_path: Path, configuration: BuildConfiguration, plan_file: Optional[Path]) -> int:
    """Run detection and write the build plan.

    Returns:
        0 if a build system was detected, otherwise DETECT_FAIL_CODE
    """
    result = Detector(default_build_systems(configuration.home)).detect(application_path)

    if not result.passed:
        logger.info("No Gradle or Maven project detected")
        return DETECT_FAIL_CODE

    document = yaml.safe_dump({'plans': [p.to_dict() for p in result.plans]}, sort_keys=False)
    if plan_file:
        plan_file.write_text(document, encoding='utf-8')
        logger.info(f"✓ Build plan written to {plan_file}")
    else:
        sys.stdout.write(document)
    return 0


def build_phase(application_path: Path, layers_path: Path, buildpack_path: Path,
                plan_file: Path, configuration: BuildConfiguration) -> None:
    """Run the build and contribute every resulting layer."""
    context = BuildContext(
        application_path=application_path,
        layers_path=layers_path,
        buildpack=Buildpack.load(buildpack_path),
        plan=BuildpackPlan.load(plan_file),
        configuration=configuration,
    )

    result = Build(default_build_systems(configuration.home)).build(context)
    if not result.layers:
        logger.warning("⚠ No build system participates in this build")
        return

    contribute_layers(layers_path, result.layers)
    if result.plan.entries:
        result.plan.dump(layers_path / "plan.yaml")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="jvmbuild",
        description="Build a JVM application with Gradle or Maven and keep only the built artifact",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check which build system applies
  jvmbuild detect --application /workspace --plan /tmp/plan.yaml

  # Build, reusing the cached artifact if the source is unchanged
  jvmbuild build --application /workspace --layers /layers --buildpack /cnb/buildpack --plan /tmp/plan.yaml

Environment:
  BP_BUILD_ARGUMENTS   arguments passed to the build tool
  BP_BUILT_MODULE      module directory holding the built artifact
  BP_BUILT_ARTIFACT    glob matching the built artifact
        """
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging, including a log file in the current directory"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version="jvmbuild v0.1.0"
    )

    subparsers = parser.add_subparsers(dest="phase", required=True)

    detect_parser = subparsers.add_parser("detect", help="Detect the project's build system")
    detect_parser.add_argument(
        "--application",
        dest="application_path",
        default=".",
        help="Path to the application source (default: current directory)"
    )
    detect_parser.add_argument(
        "--plan",
        dest="plan_file",
        help="File to write the build plan to (default: stdout)"
    )

    build_parser = subparsers.add_parser("build", help="Build the project and replace it with its artifact")
    build_parser.add_argument(
        "--application",
        dest="application_path",
        default=".",
        help="Path to the application source (default: current directory)"
    )
    build_parser.add_argument(
        "--layers",
        dest="layers_path",
        required=True,
        help="Directory where layers are contributed and persisted"
    )
    build_parser.add_argument(
        "--buildpack",
        dest="buildpack_path",
        required=True,
        help="Directory containing buildpack.yaml and pre-cached dependencies"
    )
    build_parser.add_argument(
        "--plan",
        dest="plan_file",
        required=True,
        help="Resolved buildpack plan (YAML)"
    )

    args = parser.parse_args()

    # stdout carries the build plan when detecting
    setup_logger(args.debug, stream=sys.stderr if args.phase == "detect" else sys.stdout)

    try:
        configuration = BuildConfiguration.from_environment()
        application_path = validate_directory(args.application_path, "Application")

        if args.phase == "detect":
            plan_file = Path(args.plan_file).resolve() if args.plan_file else None
            sys.exit(detect_phase(application_path, configuration, plan_file))

        layers_path = Path(args.layers_path).resolve()
        layers_path.mkdir(parents=True, exist_ok=True)
        build_phase(
            application_path,
            layers_path,
            validate_directory(args.buildpack_path, "Buildpack"),
            Path(args.plan_file).resolve(),
            configuration
        )
        logger.info("✓ Build completed successfully.")

    except KeyboardInterrupt:
        logger.warning("\n⚠ Operation cancelled by user")
        sys.exit(1)
    except (BuildSystemError, FileNotFoundError) as e:
        logger.critical(f"✗ {e}", exc_info=args.debug)
        sys.exit(1)


if __name__ == "__main__":
    main()
