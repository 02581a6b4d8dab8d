class InvalidRequest(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(Exception):
    def __init__(self, setting: str):
        self.setting = setting
        self.message = f"{setting} is not configured"
        super().__init__(self.message)


class UpstreamError(Exception):
    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        self.service = service
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(f"{service}: {message}")


class RateLimitError(UpstreamError):
    def __init__(self, service: str, body: str | None = None):
        super().__init__(service, "rate limit exceeded", status_code=429, body=body)


class EmptyResult(Exception):
    def __init__(self, service: str):
        self.service = service
        self.message = f"{service} returned no usable content"
        super().__init__(self.message)


class DispatchFailed(Exception):
    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Batch call submission failed (status={status_code}): {body}")


class CallTimeout(Exception):
    def __init__(self, batch_id: str, timeout: float, pending: list[str]):
        self.batch_id = batch_id
        self.timeout = timeout
        self.pending = pending
        super().__init__(
            f"Batch {batch_id} timed out after {timeout:.0f}s "
            f"waiting for {', '.join(pending)}"
        )
