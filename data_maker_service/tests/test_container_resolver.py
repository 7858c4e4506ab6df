# pylint: disable=import-error
import threading
from unittest.mock import MagicMock, call

import pytest
from faker import Faker
from data_maker_service.container_resolver import (
    ContainerResolver,
    parse_container_names,
)
from data_maker_service.exceptions import OperationCancelledError
from s3_service.exceptions import RequiredBucketNotFoundException
from s3_service.s3 import S3Service

fake = Faker()


@pytest.fixture(name="storage")
def fixture_storage() -> MagicMock:
    return MagicMock(spec=S3Service)


def test_integer_generates_containers(storage: MagicMock) -> None:
    containers = ContainerResolver(storage, "3").resolve_targets(5)

    assert len(containers) == 3
    assert len(set(containers)) == 3
    assert all(name == name.lower() for name in containers)
    storage.create_bucket_if_not_exists.assert_has_calls(
        [call(name) for name in containers]
    )


def test_names_are_trimmed_and_deduplicated(storage: MagicMock) -> None:
    containers = ContainerResolver(storage, "a, b, b, a").resolve_targets(5)

    assert containers == ["a", "b"]
    assert storage.create_bucket_if_not_exists.call_count == 2


@pytest.mark.parametrize("value", [None, "", "   "])
def test_absent_setting_uses_default_count(
    storage: MagicMock, value: str | None
) -> None:
    containers = ContainerResolver(storage, value).resolve_targets(5)

    assert len(containers) == 5


def test_empty_names_are_dropped() -> None:
    assert parse_container_names("logs,, data ,", 5) == ["logs", "data"]


def test_zero_containers() -> None:
    assert parse_container_names("0", 5) == []


def test_cancelled_before_creation(storage: MagicMock) -> None:
    cancel_event = threading.Event()
    cancel_event.set()

    with pytest.raises(OperationCancelledError):
        ContainerResolver(storage, fake.word()).resolve_targets(5, cancel_event)

    storage.create_bucket_if_not_exists.assert_not_called()


def test_created_bucket_is_verified(storage: MagicMock) -> None:
    storage.create_bucket_if_not_exists.side_effect = [True, False]

    containers = ContainerResolver(storage, "new,old").resolve_targets(5)

    assert containers == ["new", "old"]
    storage.has_bucket.assert_called_once_with("new", throw=True)


def test_created_bucket_missing_raises(storage: MagicMock) -> None:
    storage.create_bucket_if_not_exists.return_value = True
    storage.has_bucket.side_effect = RequiredBucketNotFoundException

    with pytest.raises(RequiredBucketNotFoundException):
        ContainerResolver(storage, fake.word()).resolve_targets(5)
