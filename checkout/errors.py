class CheckoutError(Exception):
    """Base class for every error raised by the checkout service."""


class GatewayError(CheckoutError):
    pass


class GatewayRequestError(GatewayError):
    """The payment gateway rejected the request as malformed."""


class GatewayUnavailable(GatewayError):
    """The payment gateway could not be reached or failed on its side."""


class SessionNotFound(GatewayError):
    pass


class SignatureInvalid(GatewayError):
    """A webhook payload could not be verified and must not be trusted."""


class StorageError(CheckoutError):
    pass


class StorageUnavailable(StorageError):
    """The order database cannot be opened or its schema created."""


class StorageWriteError(StorageError):
    pass


class DuplicateOrder(StorageWriteError):
    """An order for this external reference has already been recorded."""

    def __init__(self, session_id: str):
        super().__init__(f"Order already recorded for session {session_id}")
        self.session_id = session_id
