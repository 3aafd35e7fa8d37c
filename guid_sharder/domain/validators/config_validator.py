"""
Cross-field validators for shard configuration. Pure functions, no I/O.

Every check appends to a caller-owned issue list instead of raising, so a user
sees every problem in one pass. Only the public validate_* entry points raise,
and they raise once with the whole list.
"""

import re
from typing import Dict, List, Protocol, Sequence

from guid_sharder.domain.exceptions import ConfigValidationError
from guid_sharder.domain.models.shard import (
    GROUP_SOURCE_TYPES,
    SOURCE_TYPES,
    STRATEGY_NAMES,
    Strategy,
)
from guid_sharder.domain.schemas.shard import ShardCreateRequest

NUMERIC_ID_RE = re.compile(r"[0-9]+")
SHARD_NAME_RE = re.compile(r"shard_[0-9]+")

OUTPUT_FORMATS = ("json", "yaml")


class ShardConfig(Protocol):
    """Attributes the validators read. ShardSettings satisfies this."""

    instance_domain: str
    auth_method: str
    client_id: str
    client_secret: str
    basic_auth_username: str
    basic_auth_password: str
    source_type: str
    group_id: str
    strategy: str
    shard_count: int
    shard_percentages: List[int]
    shard_sizes: List[int]
    exclude_ids: List[str]
    reserved_ids: Dict[str, List[str]]
    output_format: str


def quoted_list(items: Sequence[str]) -> str:
    """Format items as a readable quoted list, e.g. ["json", "yaml"]."""
    return "[" + ", ".join(f'"{s}"' for s in items) + "]"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def validate_auth(cfg: ShardConfig, issues: List[str]) -> None:
    """Check that a complete and consistent credential set is present."""
    if not cfg.instance_domain:
        issues.append("instance_domain is required")

    if cfg.auth_method == "oauth2":
        if not cfg.client_id:
            issues.append("client_id is required when auth_method is 'oauth2'")
        if not cfg.client_secret:
            issues.append("client_secret is required when auth_method is 'oauth2'")
        if cfg.basic_auth_username or cfg.basic_auth_password:
            issues.append(
                "basic_auth_username / basic_auth_password are set but auth_method is 'oauth2'; "
                "these fields are ignored, remove them or switch auth_method to 'basic'"
            )
    elif cfg.auth_method == "basic":
        if not cfg.basic_auth_username:
            issues.append("basic_auth_username is required when auth_method is 'basic'")
        if not cfg.basic_auth_password:
            issues.append("basic_auth_password is required when auth_method is 'basic'")
        if cfg.client_id or cfg.client_secret:
            issues.append(
                "client_id / client_secret are set but auth_method is 'basic'; "
                "these fields are ignored, remove them or switch auth_method to 'oauth2'"
            )
    elif not cfg.auth_method:
        issues.append("auth_method is required: must be 'oauth2' or 'basic'")
    else:
        issues.append(f"auth_method {cfg.auth_method!r} is not valid: must be 'oauth2' or 'basic'")


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------

def validate_source(cfg: ShardConfig, issues: List[str]) -> None:
    """Check source_type membership and group_id requirements."""
    source_valid = cfg.source_type in SOURCE_TYPES
    if not source_valid:
        if not cfg.source_type:
            issues.append(f"source_type is required: must be one of {quoted_list(SOURCE_TYPES)}")
        else:
            issues.append(
                f"source_type {cfg.source_type!r} is not valid: must be one of {quoted_list(SOURCE_TYPES)}"
            )

    group_required = cfg.source_type in GROUP_SOURCE_TYPES
    if group_required and not cfg.group_id:
        issues.append(f"group_id is required when source_type is {cfg.source_type!r}")

    if cfg.group_id:
        if not NUMERIC_ID_RE.fullmatch(cfg.group_id):
            issues.append(f"group_id {cfg.group_id!r} must be a numeric ID (e.g. \"42\")")
        if not group_required and source_valid:
            issues.append(
                f"group_id is set ({cfg.group_id!r}) but source_type {cfg.source_type!r} does not use a group; "
                "set source_type to 'computer_group_membership' or 'mobile_device_group_membership', "
                "or remove group_id"
            )


# ---------------------------------------------------------------------------
# Sharding parameters
# ---------------------------------------------------------------------------

def validate_sharding_parameters(
    strategy: str,
    shard_count: int,
    percentages: Sequence[int],
    sizes: Sequence[int],
    issues: List[str],
) -> None:
    """
    Exactly one of shard_count / shard_percentages / shard_sizes, a known strategy,
    strategy-parameter compatibility, then each parameter's own constraints.
    """
    has_count = shard_count > 0
    has_pct = len(percentages) > 0
    has_sizes = len(sizes) > 0

    set_names = []
    if has_count:
        set_names.append(f"shard_count ({shard_count})")
    if has_pct:
        set_names.append(f"shard_percentages ({list(percentages)})")
    if has_sizes:
        set_names.append(f"shard_sizes ({list(sizes)})")

    if not set_names:
        issues.append(
            "exactly one of shard_count, shard_percentages, or shard_sizes must be set; none were provided"
        )
    elif len(set_names) > 1:
        issues.append(
            "exactly one of shard_count, shard_percentages, or shard_sizes must be set; "
            f"multiple were provided: {'; '.join(set_names)}"
        )
        return

    if strategy not in STRATEGY_NAMES:
        if not strategy:
            issues.append(f"strategy is required: must be one of {quoted_list(STRATEGY_NAMES)}")
        else:
            issues.append(f"strategy {strategy!r} is not valid: must be one of {quoted_list(STRATEGY_NAMES)}")
        return

    if strategy in (Strategy.ROUND_ROBIN.value, Strategy.RENDEZVOUS.value):
        if not has_count:
            issues.append(
                f"strategy {strategy!r} requires shard_count; use shard_count, not shard_percentages or shard_sizes"
            )
        if has_pct:
            issues.append(
                f"shard_percentages is set but strategy is {strategy!r}; "
                "shard_percentages is only valid with strategy 'percentage'"
            )
        if has_sizes:
            issues.append(
                f"shard_sizes is set but strategy is {strategy!r}; shard_sizes is only valid with strategy 'size'"
            )
    elif strategy == Strategy.PERCENTAGE.value:
        if not has_pct:
            issues.append(
                "strategy 'percentage' requires shard_percentages; use shard_percentages, not shard_count or shard_sizes"
            )
        if has_count:
            issues.append(
                "shard_count is set but strategy is 'percentage'; "
                "shard_count is only valid with strategies 'round-robin' or 'rendezvous'"
            )
        if has_sizes:
            issues.append(
                "shard_sizes is set but strategy is 'percentage'; shard_sizes is only valid with strategy 'size'"
            )
    elif strategy == Strategy.SIZE.value:
        if not has_sizes:
            issues.append(
                "strategy 'size' requires shard_sizes; use shard_sizes, not shard_count or shard_percentages"
            )
        if has_count:
            issues.append(
                "shard_count is set but strategy is 'size'; "
                "shard_count is only valid with strategies 'round-robin' or 'rendezvous'"
            )
        if has_pct:
            issues.append(
                "shard_percentages is set but strategy is 'size'; "
                "shard_percentages is only valid with strategy 'percentage'"
            )

    if shard_count < 0:
        issues.append(f"shard_count must be at least 1, got {shard_count}")

    if has_pct:
        for i, p in enumerate(percentages):
            if p < 0:
                issues.append(f"shard_percentages[{i}] is {p}; each percentage must be >= 0")
        total = sum(percentages)
        if total != 100:
            issues.append(f"shard_percentages must sum to exactly 100, got {total} ({list(percentages)})")

    if has_sizes:
        last = len(sizes) - 1
        for i, s in enumerate(sizes):
            if s != -1 and s < 1:
                issues.append(f"shard_sizes[{i}] is {s}; each size must be >= 1 or exactly -1 (remainder)")
            if s == -1 and i != last:
                issues.append(
                    f"shard_sizes[{i}] is -1 (remainder) but is not the last element; "
                    "-1 is only valid in the final position"
                )


# ---------------------------------------------------------------------------
# ID formats and conflicts
# ---------------------------------------------------------------------------

def validate_id_formats(
    exclude_ids: Sequence[str],
    reserved_ids: Dict[str, List[str]],
    issues: List[str],
) -> None:
    """Every ID-like value must be numeric; reservation keys must look like shard_N."""
    for i, identifier in enumerate(exclude_ids):
        if not NUMERIC_ID_RE.fullmatch(identifier):
            issues.append(f"exclude_ids[{i}] {identifier!r} must be a numeric ID (e.g. \"42\")")

    for key, ids in reserved_ids.items():
        if not SHARD_NAME_RE.fullmatch(key):
            issues.append(
                f"reserved_ids key {key!r} is not valid; keys must be in the format 'shard_0', 'shard_1', etc."
            )
        for i, identifier in enumerate(ids):
            if not NUMERIC_ID_RE.fullmatch(identifier):
                issues.append(f"reserved_ids[{key!r}][{i}] {identifier!r} must be a numeric ID (e.g. \"42\")")


def validate_id_conflicts(
    exclude_ids: Sequence[str],
    reserved_ids: Dict[str, List[str]],
    issues: List[str],
) -> None:
    """Flag IDs both excluded and reserved, and IDs reserved more than once."""
    if not exclude_ids and not reserved_ids:
        return

    exclude_set = set(exclude_ids)
    seen_reserved: Dict[str, str] = {}

    for name, ids in reserved_ids.items():
        for identifier in ids:
            if identifier in exclude_set:
                issues.append(
                    f"ID {identifier!r} appears in both exclude_ids and reserved_ids[{name!r}]; "
                    "exclusion takes precedence and the ID will be absent from all shards; "
                    "remove it from reserved_ids or from exclude_ids"
                )
            previous = seen_reserved.get(identifier)
            if previous is None:
                seen_reserved[identifier] = name
            elif previous == name:
                issues.append(
                    f"ID {identifier!r} is listed more than once in reserved_ids[{name!r}]; "
                    "each ID may only be reserved once"
                )
            else:
                issues.append(
                    f"ID {identifier!r} is reserved in multiple shards: {previous!r} and {name!r}; "
                    "each ID may only be pinned to one shard"
                )


def validate_output(output_format: str, issues: List[str]) -> None:
    """output_format must be json or yaml."""
    if output_format in OUTPUT_FORMATS:
        return
    if not output_format:
        issues.append("output_format is required: must be 'json' or 'yaml'")
    else:
        issues.append(f"output_format {output_format!r} is not valid: must be 'json' or 'yaml'")


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def collect_config_issues(cfg: ShardConfig) -> List[str]:
    """Run every configuration check and return all problems found, in check order."""
    issues: List[str] = []
    validate_auth(cfg, issues)
    validate_source(cfg, issues)
    validate_sharding_parameters(
        cfg.strategy, cfg.shard_count, cfg.shard_percentages, cfg.shard_sizes, issues
    )
    validate_id_formats(cfg.exclude_ids, cfg.reserved_ids, issues)
    validate_id_conflicts(cfg.exclude_ids, cfg.reserved_ids, issues)
    validate_output(cfg.output_format, issues)
    return issues


def collect_request_issues(request: ShardCreateRequest) -> List[str]:
    """Checks that apply to an API request: parameters, ID formats, conflicts."""
    issues: List[str] = []
    validate_sharding_parameters(
        request.strategy,
        request.shard_count,
        request.shard_percentages,
        request.shard_sizes,
        issues,
    )
    for i, identifier in enumerate(request.ids):
        if not NUMERIC_ID_RE.fullmatch(identifier):
            issues.append(f"ids[{i}] {identifier!r} must be a numeric ID (e.g. \"42\")")
    validate_id_formats(request.exclude_ids, request.reserved_ids, issues)
    validate_id_conflicts(request.exclude_ids, request.reserved_ids, issues)
    return issues


def _raise_if_any(issues: List[str]) -> None:
    if issues:
        raise ConfigValidationError(issues)


def validate_shard_config(cfg: ShardConfig) -> None:
    """Raise ConfigValidationError listing every configuration problem, if there are any."""
    _raise_if_any(collect_config_issues(cfg))


def validate_shard_create_request(request: ShardCreateRequest) -> None:
    """Raise ConfigValidationError listing every request problem, if there are any."""
    _raise_if_any(collect_request_issues(request))
