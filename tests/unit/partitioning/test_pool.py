"""Pool partitioner: exclusions, reservations, typed errors."""

import pytest

from guid_sharder.domain.exceptions import DuplicateReservationError, InvalidReservationError
from guid_sharder.partitioning.pool import apply_exclusions, partition


def test_exclusions_removed_and_order_kept():
    assert apply_exclusions(["5", "1", "3", "2"], ["1", "2"]) == ("5", "3")


def test_partition_counts():
    pool = [str(i) for i in range(1, 11)]
    result = partition(pool, ["1", "2"], {0: ("3",), 1: ("4", "5")}, shard_count=2)

    assert result.total_fetched == 10
    assert result.excluded_count == 2
    assert result.reserved_count == 3
    assert result.distributable_count == 5
    assert result.distributable == ("6", "7", "8", "9", "10")
    assert result.filtered == ("3", "4", "5", "6", "7", "8", "9", "10")
    assert result.reserved_by_shard == {0: ("3",), 1: ("4", "5")}
    assert result.reserved_count_by_shard == {0: 1, 1: 2}


def test_reservation_out_of_range_raises():
    with pytest.raises(InvalidReservationError) as exc_info:
        partition(["1", "2"], [], {3: ("1",)}, shard_count=3)
    message = exc_info.value.message
    assert "shard_3" in message
    assert "shard_0 to shard_2" in message


def test_negative_reservation_index_raises():
    with pytest.raises(InvalidReservationError):
        partition(["1"], [], {-1: ("1",)}, shard_count=2)


def test_duplicate_reservation_names_both_shards():
    with pytest.raises(DuplicateReservationError) as exc_info:
        partition(["1", "2"], [], {0: ("7",), 2: ("7",)}, shard_count=3)
    err = exc_info.value
    assert err.identifier == "7"
    assert err.first_shard == "shard_0"
    assert err.second_shard == "shard_2"
    assert "'7'" in err.message


def test_repeated_id_within_one_shard_raises():
    with pytest.raises(DuplicateReservationError) as exc_info:
        partition(["1", "2"], [], {1: ("2", "2")}, shard_count=2)
    err = exc_info.value
    assert err.identifier == "2"
    assert err.first_shard == err.second_shard == "shard_1"


def test_excluded_and_reserved_id_absent_everywhere():
    result = partition(["1", "2", "3"], ["2"], {0: ("2", "3")}, shard_count=2)
    assert result.reserved_by_shard[0] == ("3",)
    assert "2" not in result.distributable
    assert result.excluded_count == 1
    assert result.reserved_count == 1


def test_reserved_id_missing_from_pool_is_still_pinned():
    result = partition(["1", "2"], [], {0: ("99",)}, shard_count=1)
    assert result.reserved_by_shard[0] == ("99",)
    assert result.reserved_count == 0
    assert result.distributable == ("1", "2")


def test_zero_shard_count_treated_as_one():
    result = partition(["1"], [], {0: ("1",)}, shard_count=0)
    assert result.reserved_by_shard == {0: ("1",)}
