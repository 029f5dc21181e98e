from fastapi import status
from libs.result import Error


class ClientError(Exception):
    """Business failure the caller can act on; rendered with its code and details"""

    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)

    @property
    def code(self) -> str:
        return self.base_error.code


class ServerError(Exception):
    """Internal failure; the message only leaves the process in DEV_MODE"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)

    @property
    def code(self) -> str:
        return self.base_error.code
