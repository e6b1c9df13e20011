class AnalyzerError(Exception):
    """Base class for errors raised while turning a document into a report."""


class InvalidInputError(AnalyzerError):
    """Raised when the request carries no usable input, or more than one."""


class DocumentExtractionError(AnalyzerError):
    """Raised when text cannot be extracted from a file or fetched URL."""


class UnsupportedFileTypeError(DocumentExtractionError, InvalidInputError):
    """Raised for uploads in a known binary format that has no extractor."""


class EncryptedDocumentError(DocumentExtractionError):
    """Raised for password-protected PDFs."""


class CompletionTransportError(AnalyzerError):
    """Raised when the completion endpoint is unreachable, times out or answers non-2xx."""
