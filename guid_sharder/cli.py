"""
Command line entry point.

    guid-sharder shard --config ./guid-sharder.yaml --strategy percentage \\
        --shard-percentages 10,30,60 --seed os-updates --output yaml

Flags override JAMF_* environment variables, which override the YAML config file.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from guid_sharder import __version__
from guid_sharder.application.exceptions import ApplicationError
from guid_sharder.application.shard_service import ShardService
from guid_sharder.config.logging import configure_logging
from guid_sharder.config.settings import ShardSettings, load_settings, resolve_config_file
from guid_sharder.domain.exceptions import DomainError
from guid_sharder.domain.models.shard import SOURCE_TYPES, STRATEGY_NAMES
from guid_sharder.domain.schemas.shard import ShardResult
from guid_sharder.domain.validators.config_validator import validate_shard_config
from guid_sharder.infrastructure.jamf.client import JamfProClient
from guid_sharder.infrastructure.output.writer import write_output
from guid_sharder.observability.metrics import MetricsCollector

logger = logging.getLogger("guid_sharder")

EXAMPLES = """examples:
  # Round-robin with 3 shards, deterministic via seed
  guid-sharder shard --instance-domain company.jamfcloud.com \\
    --auth-method oauth2 --client-id abc --client-secret xyz \\
    --source-type computer_inventory --strategy round-robin --shard-count 3 --seed os-updates

  # Percentage split piped to jq
  guid-sharder shard --config ./config.yaml --strategy percentage \\
    --shard-percentages 10,30,60 --output json | jq '.shards.shard_0'

  # Size-based with remainder shard, YAML output to file
  guid-sharder shard --config ./config.yaml --strategy size --shard-sizes 50,200,-1 \\
    --output yaml --output-file shards.yaml
"""


def _int_list(value: str) -> List[int]:
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {value!r}") from None


def _str_list(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _reserved_ids(value: str) -> Dict[str, List[str]]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid --reserved-ids JSON: {e}") from None
    if not isinstance(parsed, dict) or not all(isinstance(v, list) for v in parsed.values()):
        raise argparse.ArgumentTypeError('--reserved-ids must be a JSON object of lists, e.g. {"shard_0":["101"]}')
    return {str(k): [str(i) for i in v] for k, v in parsed.items()}


def _add_shard_flags(parser: argparse.ArgumentParser) -> None:
    # Defaults are suppressed so only flags the user typed override env and file values.
    opt = {"default": argparse.SUPPRESS}

    auth = parser.add_argument_group("authentication")
    auth.add_argument("--instance-domain", dest="instance_domain", help="Jamf Pro domain, e.g. company.jamfcloud.com", **opt)
    auth.add_argument("--auth-method", dest="auth_method", choices=("oauth2", "basic"), help="default: oauth2", **opt)
    auth.add_argument("--client-id", dest="client_id", help="OAuth2 client ID", **opt)
    auth.add_argument("--client-secret", dest="client_secret", help="OAuth2 client secret", **opt)
    auth.add_argument("--username", dest="basic_auth_username", help="basic auth username", **opt)
    auth.add_argument("--password", dest="basic_auth_password", help="basic auth password", **opt)

    http = parser.add_argument_group("http client")
    http.add_argument("--log-level", dest="log_level", help="debug, info, warn, error, fatal (default: warn)", **opt)
    http.add_argument("--hide-sensitive-data", dest="hide_sensitive_data", action=argparse.BooleanOptionalAction, **opt)
    http.add_argument("--max-retry-attempts", dest="max_retry_attempts", type=int, help="default: 3", **opt)
    http.add_argument("--custom-timeout", dest="custom_timeout_seconds", type=int, help="seconds, default: 60", **opt)
    http.add_argument("--token-refresh-buffer", dest="token_refresh_buffer_period_seconds", type=int, help="seconds, default: 300", **opt)
    http.add_argument("--mandatory-request-delay", dest="mandatory_request_delay_milliseconds", type=int, help="minimum milliseconds between retries", **opt)
    http.add_argument("--follow-redirects", dest="follow_redirects", action=argparse.BooleanOptionalAction, **opt)
    http.add_argument("--max-redirects", dest="max_redirects", type=int, help="default: 5", **opt)

    sharding = parser.add_argument_group("sharding")
    sharding.add_argument("--source-type", dest="source_type", help=f"one of: {', '.join(SOURCE_TYPES)}", **opt)
    sharding.add_argument("--group-id", dest="group_id", help="required for *_group_membership sources", **opt)
    sharding.add_argument("--strategy", dest="strategy", help=f"one of: {', '.join(STRATEGY_NAMES)}", **opt)
    sharding.add_argument("--shard-count", dest="shard_count", type=int, help="round-robin and rendezvous", **opt)
    sharding.add_argument("--shard-percentages", dest="shard_percentages", type=_int_list, help="e.g. 10,30,60", **opt)
    sharding.add_argument("--shard-sizes", dest="shard_sizes", type=_int_list, help="e.g. 50,200,-1", **opt)
    sharding.add_argument("--seed", dest="seed", help="seed for deterministic distribution", **opt)
    sharding.add_argument("--exclude-ids", dest="exclude_ids", type=_str_list, help="comma-separated IDs", **opt)
    sharding.add_argument(
        "--reserved-ids",
        dest="reserved_ids",
        type=_reserved_ids,
        help='JSON map of shard names to IDs, e.g. \'{"shard_0":["101","102"]}\'',
        **opt,
    )

    output = parser.add_argument_group("output")
    output.add_argument("-o", "--output", dest="output_format", choices=("json", "yaml"), help="default: json", **opt)
    output.add_argument("--output-file", dest="output_file", help="write here instead of stdout", **opt)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guid-sharder",
        description="Shard Jamf Pro device and user IDs into configurable groups for staged rollouts.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="config file path (default: ./guid-sharder.yaml or $JAMF_CONFIG_FILE)",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    shard = subcommands.add_parser(
        "shard",
        help="fetch IDs and distribute them into shards",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    shard.add_argument("--config", default=argparse.SUPPRESS, help=argparse.SUPPRESS)
    _add_shard_flags(shard)
    subcommands.add_parser("version", help="print the version")
    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {k: v for k, v in vars(args).items() if k not in ("config", "command")}


async def run_shard(settings: ShardSettings) -> ShardResult:
    """Validate, fetch and shard. Raises DomainError or ApplicationError; no output on failure."""
    validate_shard_config(settings)
    request = settings.to_shard_request()
    async with JamfProClient(settings) as client:
        service = ShardService(inventory=client, logger=logger, metrics=MetricsCollector())
        return await service.run(request, settings.source_type, settings.group_id)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "version":
        print(f"guid-sharder {__version__}")
        return 0

    try:
        settings = load_settings(args.config, **_overrides(args))
        configure_logging(settings.log_level)
        logger.info("config_loaded", extra={"config_file": resolve_config_file(args.config)})
        logger.debug("settings_resolved", extra={"settings": settings.redacted()})
        result = asyncio.run(run_shard(settings))
        write_output(result, settings.output_format, settings.output_file)
    except ValidationError as e:
        print(f"Error: failed to parse configuration: {e}", file=sys.stderr)
        return 1
    except (DomainError, ApplicationError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
