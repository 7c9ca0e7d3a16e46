"""
Exception types raised and collected by the sweeps
"""


class FeedarrError(Exception):
    """Base class for all Feedarr errors"""


class ConfigError(FeedarrError):
    """Configuration is missing or invalid"""


class FetchError(FeedarrError):
    """A feed could not be retrieved or its envelope could not be read"""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class ItemProcessingError(FeedarrError):
    """Processing of a single feed item failed"""

    def __init__(self, title: str, cause: BaseException):
        super().__init__(f"{title}: {cause}")
        self.title = title
        self.cause = cause


class SubmissionError(FeedarrError):
    """The download client refused or failed a submission"""

    def __init__(self, title: str, message: str = "download client rejected release"):
        super().__init__(f"{title}: {message}")
        self.title = title


class SearchDispatchError(FeedarrError):
    """A backlog search command could not be dispatched"""

    def __init__(self, command, cause: BaseException):
        super().__init__(f"{command}: {cause}")
        self.command = command
        self.cause = cause


class HistoryWriteError(FeedarrError):
    """A submitted release could not be written to the history"""

    def __init__(self, title: str, cause: BaseException):
        super().__init__(f"{title}: {cause}")
        self.title = title
        self.cause = cause
