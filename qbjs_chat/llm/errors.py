# Role: Typed backend failures. Network/API trouble and a reply that breaks the {"code": ...} contract are kept
# apart so callers can show "try again later" vs "the model returned something unusable".


class BackendError(RuntimeError):
    """Base class for failures of the code-generation backend."""


class BackendUnavailableError(BackendError):
    """The backend could not be reached or rejected the request."""


class BackendContractError(BackendError):
    """The backend answered, but not with a JSON object holding a string `code` field."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text
