"""Output writer tests: JSON and YAML rendering, stdout vs file, failures."""

import io
import json
from datetime import datetime, timezone

import pytest
import yaml

from guid_sharder.application.exceptions import OutputWriteError
from guid_sharder.domain.schemas.shard import ShardMetadata, ShardResult
from guid_sharder.infrastructure.output.writer import render, write_output


@pytest.fixture
def result():
    return ShardResult(
        metadata=ShardMetadata(
            generated_at=datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc),
            source_type="computer_group_membership",
            group_id="42",
            strategy="round-robin",
            seed="os-updates",
            total_ids_fetched=5,
            excluded_id_count=1,
            reserved_id_count=1,
            unreserved_ids_distributed=3,
            shard_count=2,
        ),
        shards={"shard_0": ["2", "10"], "shard_1": ["3", "4"]},
    )


def test_render_json(result):
    text = render(result, "json")
    assert text.endswith("}\n")
    assert text.startswith('{\n  "metadata"')
    data = json.loads(text)
    assert data["metadata"]["group_id"] == "42"
    assert data["metadata"]["generated_at"] == "2025-01-15T10:30:00Z"
    assert data["shards"]["shard_0"] == ["2", "10"]


def test_render_yaml_keeps_key_order(result):
    text = render(result, "yaml")
    assert text.startswith("metadata:\n")
    assert text.index("metadata:") < text.index("shards:")
    data = yaml.safe_load(text)
    assert data["shards"] == {"shard_0": ["2", "10"], "shard_1": ["3", "4"]}
    assert data["metadata"]["seed"] == "os-updates"


def test_render_omits_group_id_when_unset(result):
    result.metadata.group_id = None
    assert "group_id" not in json.loads(render(result, "json"))["metadata"]


def test_render_unknown_format(result):
    with pytest.raises(OutputWriteError, match="output_format 'xml' is not valid"):
        render(result, "xml")


def test_write_to_stdout(result):
    stdout, stderr = io.StringIO(), io.StringIO()
    write_output(result, "json", "", stdout=stdout, stderr=stderr)
    assert json.loads(stdout.getvalue())["metadata"]["shard_count"] == 2
    assert stderr.getvalue() == ""


def test_write_to_file(result, tmp_path):
    path = tmp_path / "shards.yaml"
    stdout, stderr = io.StringIO(), io.StringIO()
    write_output(result, "yaml", str(path), stdout=stdout, stderr=stderr)
    assert yaml.safe_load(path.read_text())["metadata"]["strategy"] == "round-robin"
    assert stdout.getvalue() == ""
    assert stderr.getvalue() == f"Output written to {path}\n"


def test_write_failure_raises(result, tmp_path):
    target = tmp_path / "missing" / "shards.json"
    with pytest.raises(OutputWriteError, match="failed to write output"):
        write_output(result, "json", str(target), stdout=io.StringIO(), stderr=io.StringIO())


def test_render_failure_leaves_no_file(result, tmp_path):
    target = tmp_path / "shards.xml"
    with pytest.raises(OutputWriteError):
        write_output(result, "xml", str(target), stdout=io.StringIO(), stderr=io.StringIO())
    assert not target.exists()
