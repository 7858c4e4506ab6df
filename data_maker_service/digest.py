import base64
import hashlib
from typing import BinaryIO

DIGEST_BLOCK_SIZE = 1024 * 1024


def compute_digest(file_obj: BinaryIO, block_size: int = DIGEST_BLOCK_SIZE) -> str:
    """Base64 MD5 of everything left to read in ``file_obj``."""
    md5 = hashlib.md5(usedforsecurity=False)
    for block in iter(lambda: file_obj.read(block_size), b""):
        md5.update(block)
    return base64.b64encode(md5.digest()).decode("ascii")
