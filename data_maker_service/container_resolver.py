import threading
from uuid import uuid4

from s3_service.s3 import S3Service

from .local_storage import raise_if_cancelled
from .logger import logger


def parse_container_names(value: str | None, default_count: int) -> list[str]:
    """Turn the ``BlobContainers`` setting into an ordered list of bucket names.

    An empty value means ``default_count`` generated names, an integer
    means that many generated names, anything else is a comma separated
    list of explicit names (trimmed, de-duplicated, first occurrence wins).
    """
    value = (value or "").strip()
    if not value:
        logger.info("Creating default %d containers", default_count)
        return [generate_container_name() for _ in range(default_count)]

    try:
        count = int(value)
    except ValueError:
        names = [name.strip() for name in value.split(",")]
        unique = list(dict.fromkeys(name for name in names if name))
        logger.info("Using containers named %s", ", ".join(unique))
        return unique

    logger.info("Creating %d containers", count)
    return [generate_container_name() for _ in range(max(count, 0))]


def generate_container_name() -> str:
    return str(uuid4()).lower()


class ContainerResolver:
    def __init__(self, storage: S3Service, containers_setting: str | None) -> None:
        self.storage = storage
        self.containers_setting = containers_setting

    def resolve_targets(
        self, default_count: int, cancel_event: threading.Event | None = None
    ) -> list[str]:
        """Resolve the target buckets and make sure each one exists."""
        containers = parse_container_names(self.containers_setting, default_count)
        for container in containers:
            raise_if_cancelled(cancel_event)
            if self.storage.create_bucket_if_not_exists(container):
                self.storage.has_bucket(container, throw=True)
        return containers
