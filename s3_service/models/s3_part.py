from typing import TypedDict


class S3Part(TypedDict):
    ETag: str
    PartNumber: int
