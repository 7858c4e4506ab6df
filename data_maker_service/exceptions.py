class ObjectTooLargeError(Exception):
    """The object is larger than the backend can store, even in parts."""


class LocalStorageError(Exception):
    """Writing, reading or deleting a local transient artifact failed."""


class BackendUploadError(Exception):
    """The storage backend rejected or failed an upload call."""


class OperationCancelledError(Exception):
    """The run was cancelled while the operation was in progress."""


class NoTargetContainersError(Exception):
    """No target container could be resolved for the run."""


class BackendUnavailableError(Exception):
    """The storage backend did not answer the pre-flight check."""
