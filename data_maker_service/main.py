import logging.config
import os
import signal
import sys
import threading
from types import FrameType

from s3_service.s3_multipart import S3MultipartService

from .container_resolver import ContainerResolver
from .data_maker import DataMaker
from .local_storage import LocalArtifactStore
from .logger import logger
from .settings import DataMakerSettings


def configure_logging(level: str) -> None:
    level = level.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "botocore": {"level": "WARNING"},
                "urllib3": {"level": "WARNING"},
            },
        }
    )


def install_signal_handlers(cancel_event: threading.Event) -> None:
    def request_cancellation(signum: int, _frame: FrameType | None) -> None:
        logger.info("Worker cancelling", extra={"signal": signal.Signals(signum).name})
        cancel_event.set()

    signal.signal(signal.SIGINT, request_cancellation)
    signal.signal(signal.SIGTERM, request_cancellation)


def main() -> int:
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    settings = DataMakerSettings()
    configure_logging(settings.log_level)
    settings.log_effective_values()

    cancel_event = threading.Event()
    install_signal_handlers(cancel_event)

    storage = S3MultipartService(settings.to_s3_config())
    data_maker = DataMaker(
        storage=storage,
        resolver=ContainerResolver(storage, settings.blob_containers),
        local_store=LocalArtifactStore(settings.working_directory),
    )

    logger.info("Worker running")
    try:
        summary = data_maker.run(settings.to_run_parameters(), cancel_event)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Worker unhandled exception")
        return 1
    logger.info("Worker ending", extra={"state": summary.state.value})
    return 0


if __name__ == "__main__":
    sys.exit(main())
