"""Exception taxonomy for document processing.

Distinguishes between errors that abort an upload (extraction, validation)
and errors that only degrade optional features (annotation suggestions).
"""


class DocumentProcessingError(Exception):
    """Base class for document processing errors."""

    pass


class ExtractionError(DocumentProcessingError):
    """The PDF could not be decoded, or one of its pages failed to decode.

    Fatal for the whole document: nothing from the upload is persisted.
    """

    pass


class UploadValidationError(DocumentProcessingError):
    """The uploaded file was rejected before extraction (type or size)."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class DocumentNotFoundError(DocumentProcessingError):
    """The document does not exist or belongs to another user."""

    pass


class FragmentLookupError(DocumentProcessingError):
    """The text fragment store could not be queried.

    Recovered inside the annotation resolver; never reaches the chat flow.
    """

    pass


class TutorServiceError(Exception):
    """The text completion service failed to produce an answer."""

    pass


# Errors raised by the fragment store driver that we treat as lookup failures
FRAGMENT_LOOKUP_ERRORS = (
    ConnectionError,
    TimeoutError,
    OSError,
)
