"""
Main CLI interface for the Test Automation Service.

Provides command-line entry points to run a suite file end to end, check
a suite's steps, and inspect the effective configuration.
"""

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from . import __version__
from .core.config import Config
from .core.exceptions import AutomationServiceError, ValidationError
from .core.logging_config import setup_logging
from .service import TestAutomationService
from .steps.commands import Unknown, parse_step
from .storage.models import RunStatus


def load_suite_file(path: Path) -> Dict[str, Any]:
    """Load a suite definition from a YAML or JSON file."""
    if not path.exists():
        raise ValidationError(
            f"Suite file not found: {path}",
            validation_type="suite_file",
            violations=[f"missing file: {path}"],
        )
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValidationError(
            f"Suite file must contain a mapping: {path}",
            validation_type="suite_file",
            violations=["top-level value is not a mapping"],
        )
    return data


def _load_config(args: argparse.Namespace) -> Config:
    config_file = getattr(args, "config_file", None)
    if config_file:
        return Config.from_file(config_file)
    return Config.from_env()


async def _run_suite(config: Config, suite_data: Dict[str, Any], environment: Optional[str]) -> int:
    service = TestAutomationService(config)
    suite = service.create_suite(suite_data)
    response = await service.execute(suite.id, environment or suite.environment)
    run_id = response["result_id"]
    print(f"⚙️  Run {run_id} started for suite '{suite.name}'")

    await service.orchestrator.wait_idle()

    print(service.render_report(run_id))
    run = service.get_result(run_id)
    return 0 if run.status == RunStatus.PASSED else 1


def cmd_run(args: argparse.Namespace) -> int:
    """Run a suite file and wait for the outcome."""
    try:
        config = _load_config(args)
        if args.base_url:
            config.base_url = args.base_url
        config.validate()
        setup_logging(config, uuid.uuid4().hex[:16])

        suite_data = load_suite_file(Path(args.suite_file))
        exit_code = asyncio.run(_run_suite(config, suite_data, args.environment))

        if exit_code == 0:
            print("✅ Suite passed")
        else:
            print("❌ Suite failed")
        return exit_code

    except AutomationServiceError as e:
        print(f"❌ {e.message}")
        if isinstance(e, ValidationError):
            for violation in e.violations:
                print(f"   • {violation}")
        return 1
    except (ValueError, yaml.YAMLError) as e:
        print(f"❌ Unexpected error: {e}")
        return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Parse every step of a suite file and report unrecognized ones."""
    try:
        suite_data = load_suite_file(Path(args.suite_file))
    except (AutomationServiceError, ValueError, yaml.YAMLError) as e:
        print(f"❌ {e}")
        return 1

    unknown = 0
    print(f"🔍 Suite: {suite_data.get('name', '(unnamed)')}")
    for case in suite_data.get("test_cases") or []:
        print(f"   Test case: {case.get('name', '(unnamed)')}")
        for raw in case.get("steps") or []:
            command = parse_step(raw)
            if isinstance(command, Unknown):
                unknown += 1
                print(f"      ❌ {raw}")
            else:
                print(f"      ✅ {raw} -> {command.__class__.__name__}")

    if unknown:
        print(f"⚠️  {unknown} unrecognized step(s)")
        return 1
    print("✅ All steps recognized")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Show the effective configuration and any validation problems."""
    try:
        config = _load_config(args)
    except AutomationServiceError as e:
        print(f"❌ {e.message}")
        return 1

    print(json.dumps(config.to_dict(), indent=2))
    try:
        config.validate()
    except ValidationError as e:
        print("❌ Configuration validation failed:")
        for violation in e.violations:
            print(f"   • {violation}")
        return 1
    print("✅ Configuration is valid")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Test Automation Service {__version__}")
    if args.verbose:
        print(f"  Python: {sys.version}")
        print(f"  Platform: {sys.platform}")
    return 0


def create_main_parser() -> argparse.ArgumentParser:
    """Create main CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="test-automation",
        description="Test Automation Service - run UI test suites against remote browsers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  test-automation run suites/login.yaml --environment staging
  test-automation validate suites/login.yaml
  test-automation config --file service.yaml
  test-automation version --verbose
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run a suite file")
    run_parser.add_argument("suite_file", help="Path to suite file (YAML or JSON)")
    run_parser.add_argument("--environment", "-e", help="Target environment")
    run_parser.add_argument("--base-url", help="Override base URL for navigation")
    run_parser.add_argument("--config-file", help="Service configuration file")
    run_parser.set_defaults(func=cmd_run)

    validate_parser = subparsers.add_parser("validate", help="Check suite steps")
    validate_parser.add_argument("suite_file", help="Path to suite file (YAML or JSON)")
    validate_parser.set_defaults(func=cmd_validate)

    config_parser = subparsers.add_parser("config", help="Show effective configuration")
    config_parser.add_argument("--file", dest="config_file", help="Configuration file")
    config_parser.set_defaults(func=cmd_config)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show detailed version information"
    )
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_main_parser()

    if args is None:
        args = sys.argv[1:]

    parsed_args = parser.parse_args(args)

    if not hasattr(parsed_args, "func"):
        parser.print_help()
        return 1

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
