class InvalidEventError(Exception):
    """Raised when an incoming conversion event cannot be dispatched.

    The message is client-facing and returned verbatim as the response body.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
