# errors.py


class MusicPlatformError(Exception):
    pass


class NoWalletAvailable(MusicPlatformError):
    def __init__(self, message="No wallet found. Please install Petra wallet."):
        super().__init__(message)


class NotConnected(MusicPlatformError):
    def __init__(self, message="No wallet connected"):
        super().__init__(message)


class AdapterFailure(MusicPlatformError):
    """Anything that went wrong talking to the ledger. `cause` is the upstream error."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class TransactionFailed(AdapterFailure):
    def __init__(self, function, cause=None):
        super().__init__(f"Transaction {function} failed: {cause}", cause)
        self.function = function
