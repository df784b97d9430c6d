class UpstreamError(Exception):
    """A third-party API answered with a non-2xx status or could not be reached."""

    def __init__(self, service: str, message: str, status: int = None):
        self.service = service
        self.status = status
        super().__init__(f"{service} error: {message}")
