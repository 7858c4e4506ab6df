class RequiredBucketNotFoundException(Exception):
    """Raised when a bucket the caller depends on does not exist."""
