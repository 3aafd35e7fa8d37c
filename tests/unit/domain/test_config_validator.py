"""Unit tests for configuration and request validation."""

from types import SimpleNamespace

import pytest

from guid_sharder.domain.exceptions import ConfigValidationError
from guid_sharder.domain.schemas.shard import ShardCreateRequest
from guid_sharder.domain.validators.config_validator import (
    collect_config_issues,
    collect_request_issues,
    validate_shard_config,
    validate_shard_create_request,
    validate_sharding_parameters,
)


def _cfg(**overrides):
    values = dict(
        instance_domain="company.jamfcloud.com",
        auth_method="oauth2",
        client_id="abc",
        client_secret="xyz",
        basic_auth_username="",
        basic_auth_password="",
        source_type="computer_inventory",
        group_id="",
        strategy="round-robin",
        shard_count=3,
        shard_percentages=[],
        shard_sizes=[],
        exclude_ids=[],
        reserved_ids={},
        output_format="json",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _params(strategy="round-robin", shard_count=0, percentages=(), sizes=()):
    issues = []
    validate_sharding_parameters(strategy, shard_count, list(percentages), list(sizes), issues)
    return issues


def test_valid_config_has_no_issues():
    assert collect_config_issues(_cfg()) == []
    validate_shard_config(_cfg())


def test_all_issues_reported_at_once():
    cfg = _cfg(instance_domain="", client_secret="", output_format="xml", exclude_ids=["abc"])
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_shard_config(cfg)
    issues = exc_info.value.issues
    assert "instance_domain is required" in issues
    assert "client_secret is required when auth_method is 'oauth2'" in issues
    assert any("output_format 'xml'" in i for i in issues)
    assert any("exclude_ids[0] 'abc'" in i for i in issues)
    assert exc_info.value.message.startswith("configuration validation failed with 4 error(s):")


# ---------- auth ----------


def test_basic_auth_requires_username_and_password():
    issues = collect_config_issues(_cfg(auth_method="basic", client_id="", client_secret=""))
    assert issues == [
        "basic_auth_username is required when auth_method is 'basic'",
        "basic_auth_password is required when auth_method is 'basic'",
    ]


def test_mixed_credentials_flagged():
    issues = collect_config_issues(_cfg(basic_auth_username="admin"))
    assert len(issues) == 1
    assert "auth_method is 'oauth2'" in issues[0]


def test_unknown_auth_method():
    issues = collect_config_issues(_cfg(auth_method="kerberos"))
    assert issues == ["auth_method 'kerberos' is not valid: must be 'oauth2' or 'basic'"]


# ---------- source ----------


def test_group_source_requires_group_id():
    issues = collect_config_issues(_cfg(source_type="computer_group_membership"))
    assert issues == ["group_id is required when source_type is 'computer_group_membership'"]


def test_group_id_must_be_numeric():
    issues = collect_config_issues(_cfg(source_type="mobile_device_group_membership", group_id="abc"))
    assert len(issues) == 1
    assert "group_id 'abc' must be a numeric ID" in issues[0]


def test_group_id_without_group_source():
    issues = collect_config_issues(_cfg(group_id="12"))
    assert len(issues) == 1
    assert "does not use a group" in issues[0]


def test_unknown_source_type():
    issues = collect_config_issues(_cfg(source_type="printers"))
    assert len(issues) == 1
    assert issues[0].startswith("source_type 'printers' is not valid")


# ---------- sharding parameters ----------


def test_no_parameter_set():
    issues = _params()
    assert issues[0] == (
        "exactly one of shard_count, shard_percentages, or shard_sizes must be set; none were provided"
    )
    assert "strategy 'round-robin' requires shard_count" in issues[1]


def test_multiple_parameters_stop_further_checks():
    issues = _params(strategy="nope", shard_count=2, percentages=[50, 40])
    assert len(issues) == 1
    assert "multiple were provided: shard_count (2); shard_percentages ([50, 40])" in issues[0]


def test_unknown_strategy():
    issues = _params(strategy="weighted", shard_count=2)
    assert issues == [
        'strategy \'weighted\' is not valid: must be one of ["round-robin", "percentage", "size", "rendezvous"]'
    ]


@pytest.mark.parametrize(
    "kwargs,fragment",
    [
        ({"strategy": "round-robin", "sizes": [1, -1]}, "strategy 'round-robin' requires shard_count"),
        ({"strategy": "rendezvous", "percentages": [100]}, "shard_percentages is set but strategy is 'rendezvous'"),
        ({"strategy": "percentage", "shard_count": 2}, "strategy 'percentage' requires shard_percentages"),
        ({"strategy": "size", "percentages": [100]}, "strategy 'size' requires shard_sizes"),
    ],
)
def test_strategy_parameter_mismatch(kwargs, fragment):
    issues = _params(**kwargs)
    assert any(fragment in i for i in issues)


def test_percentages_must_sum_to_100():
    issues = _params(strategy="percentage", percentages=[10, 20])
    assert issues == ["shard_percentages must sum to exactly 100, got 30 ([10, 20])"]


def test_negative_percentage():
    issues = _params(strategy="percentage", percentages=[-10, 110])
    assert issues == ["shard_percentages[0] is -10; each percentage must be >= 0"]


def test_remainder_must_be_last():
    issues = _params(strategy="size", sizes=[-1, 10])
    assert len(issues) == 1
    assert "shard_sizes[0] is -1 (remainder) but is not the last element" in issues[0]


def test_size_must_be_positive():
    issues = _params(strategy="size", sizes=[0, -2])
    assert issues == [
        "shard_sizes[0] is 0; each size must be >= 1 or exactly -1 (remainder)",
        "shard_sizes[1] is -2; each size must be >= 1 or exactly -1 (remainder)",
    ]


def test_valid_size_and_percentage():
    assert _params(strategy="size", sizes=[50, 200, -1]) == []
    assert _params(strategy="percentage", percentages=[10, 30, 60]) == []


# ---------- IDs ----------


def test_bad_reservation_key_and_id():
    issues = collect_config_issues(_cfg(reserved_ids={"first": ["1"], "shard_1": ["x"]}))
    assert any("reserved_ids key 'first' is not valid" in i for i in issues)
    assert any("reserved_ids['shard_1'][0] 'x' must be a numeric ID" in i for i in issues)


def test_excluded_and_reserved_conflict():
    issues = collect_config_issues(_cfg(exclude_ids=["5"], reserved_ids={"shard_0": ["5"]}))
    assert len(issues) == 1
    assert "appears in both exclude_ids and reserved_ids['shard_0']" in issues[0]


def test_id_reserved_in_two_shards():
    issues = collect_config_issues(_cfg(reserved_ids={"shard_0": ["7"], "shard_2": ["7"]}))
    assert len(issues) == 1
    assert "'shard_0' and 'shard_2'" in issues[0]


def test_id_repeated_within_one_shard():
    issues = collect_config_issues(_cfg(reserved_ids={"shard_0": ["7", "7"]}))
    assert issues == [
        "ID '7' is listed more than once in reserved_ids['shard_0']; each ID may only be reserved once"
    ]


# ---------- API request ----------


def test_request_ids_must_be_numeric():
    request = ShardCreateRequest(ids=["1", "two"], strategy="round-robin", shard_count=2)
    assert collect_request_issues(request) == ["ids[1] 'two' must be a numeric ID (e.g. \"42\")"]


def test_request_validation_raises_with_all_issues():
    request = ShardCreateRequest(ids=["1"], strategy="percentage", shard_percentages=[10], exclude_ids=["x"])
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_shard_create_request(request)
    assert len(exc_info.value.issues) == 2


@pytest.mark.parametrize("bad", ["42\n", "٣", "１２", " 7", "-1", ""])
def test_ids_must_be_plain_ascii_digits(bad):
    request = ShardCreateRequest(ids=["10", bad], strategy="round-robin", shard_count=1)
    assert collect_request_issues(request) == [f"ids[1] {bad!r} must be a numeric ID (e.g. \"42\")"]


@pytest.mark.parametrize("bad", ["42\n", "٣"])
def test_exclude_and_group_ids_must_be_plain_ascii_digits(bad):
    issues = collect_config_issues(
        _cfg(source_type="computer_group_membership", group_id=bad, exclude_ids=[bad])
    )
    assert any(i.startswith(f"group_id {bad!r} must be a numeric ID") for i in issues)
    assert any(i.startswith(f"exclude_ids[0] {bad!r} must be a numeric ID") for i in issues)


def test_shard_name_with_trailing_newline_rejected():
    issues = collect_config_issues(_cfg(reserved_ids={"shard_0\n": ["1"]}))
    assert any("reserved_ids key 'shard_0\\n' is not valid" in i for i in issues)
