from dataclasses import dataclass

from .run_parameters import ContentMode  # pylint: disable=relative-beyond-top-level


@dataclass(frozen=True)
class FileTask:
    sequence_number: int
    container: str
    object_size: int
    object_name: str
    content_mode: ContentMode

    @property
    def randomized(self) -> bool:
        return self.content_mode is ContentMode.RANDOMIZED

    def build_metadata(self, digest: str) -> dict[str, str]:
        """Metadata stored with the object; values are strings for S3."""
        return {
            "Md5Hash": digest,
            "Randomized": str(self.randomized),
            "FileNum": str(self.sequence_number),
            "FileSize": str(self.object_size),
        }
