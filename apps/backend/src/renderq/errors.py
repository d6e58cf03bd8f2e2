"""Custom exceptions for renderq."""


class RenderQueueError(Exception):
    """Base exception for renderq."""

    pass


class JobNotFoundError(RenderQueueError):
    """Job id is unknown or the entry was evicted."""

    def __init__(self, job_id: str):
        super().__init__(f"Render job {job_id} not found")
        self.job_id = job_id


class RenderError(RenderQueueError):
    """Render engine execution failed."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class RenderCancelledError(RenderError):
    """Render aborted after its cancel signal fired."""

    pass


class GofileUploadError(RenderQueueError):
    """Gofile upload request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UploadError(RenderQueueError):
    """Neither upload provider could store the artifact."""

    def __init__(self, message: str, primary_error: str | None = None):
        super().__init__(message)
        self.primary_error = primary_error
