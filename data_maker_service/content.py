import random
from typing import Iterator
from uuid import uuid4

from .models.run_parameters import ContentMode

KiB = 1024
MiB = KiB * 1024

CONTENT_CHUNK_SIZE = 4 * MiB


def synthesize_chunks(
    length: int,
    mode: ContentMode,
    chunk_size: int = CONTENT_CHUNK_SIZE,
    rng: random.Random | None = None,
) -> Iterator[bytes]:
    """Yield chunks of at most ``chunk_size`` bytes totalling exactly ``length``.

    Sparse content is all zeros. Randomized content comes from a
    non-cryptographic generator; it only has to be non-trivial.
    """
    if length < 0:
        raise ValueError("length must not be negative")
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    rng = rng or random.Random()
    remaining = length
    while remaining > 0:
        size = min(chunk_size, remaining)
        if mode is ContentMode.RANDOMIZED:
            yield rng.randbytes(size)
        else:
            yield bytes(size)
        remaining -= size


def draw_object_size(
    min_size: int, max_size: int, rng: random.Random | None = None
) -> int:
    """Uniform size in [min_size, max_size); equal bounds give min_size."""
    if max_size <= min_size:
        return min_size
    return (rng or random).randrange(min_size, max_size)


def new_object_name(extension: str = "dat") -> str:
    return f"{uuid4()}.{extension}"
