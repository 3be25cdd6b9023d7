from __future__ import annotations


class ArticleError(Exception):
    """Base class for article intake failures."""


class ValidationError(ArticleError):
    """A required field is missing or blank."""


class ExtractionFailure(ArticleError):
    """A document could not be decoded. Never escapes TextExtractor.extract."""


class DoiNotFound(ArticleError):
    def __init__(self, doi: str, reason: str = "") -> None:
        self.doi = doi
        self.reason = reason
        msg = f"DOI metadata could not be retrieved: {doi}"
        super().__init__(f"{msg} ({reason})" if reason else msg)


class NotFound(ArticleError):
    def __init__(self, article_id: str) -> None:
        self.article_id = article_id
        super().__init__(f"Article not found: {article_id}")


class BlobNotFound(ArticleError):
    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"File not found: {ref}")


class BlobDeletionFailed(ArticleError):
    def __init__(self, ref: str, cause: Exception) -> None:
        self.ref = ref
        self.cause = cause
        super().__init__(f"Could not delete file {ref}: {cause}")
