"""Exception hierarchy for gwas-sumstats."""


class GwasSumstatsError(Exception):
    """Base class for all gwas-sumstats errors."""

    pass


class MalformedURLError(GwasSumstatsError):
    """Base URL or composed request URL is not a valid absolute URL."""

    pass


class HttpStatusError(GwasSumstatsError):
    """The API answered with a non-2xx status code."""

    def __init__(self, status: int, body: str, url: str | None = None):
        self.status = status
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status}: {body}")


class UnexpectedContentTypeError(GwasSumstatsError):
    """The API answered with something other than JSON."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Expected JSON response, got: {content_type}")


class DecodeError(GwasSumstatsError):
    """Response body is not valid JSON or does not have the expected shape."""

    pass


class UnsupportedEntityKindError(GwasSumstatsError):
    """Entity lookup was asked for a kind other than chromosome, study or trait."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Invalid entity type: {tag}")


class InvalidScopeError(GwasSumstatsError):
    """Association scope has a kind without an id, an id without a kind, or an unknown kind."""

    pass


class InvalidFileScopeError(GwasSumstatsError):
    """Summary statistics file listing was requested for an unsupported combination."""

    pass


class LengthMismatchError(GwasSumstatsError):
    """Download URLs and destination paths differ in length."""

    def __init__(self, n_urls: int, n_paths: int):
        self.n_urls = n_urls
        self.n_paths = n_paths
        super().__init__(
            f"file_urls and output_paths must have the same length ({n_urls} != {n_paths})"
        )


class DownloadError(GwasSumstatsError):
    """A single file in a batch could not be fetched or written."""

    def __init__(self, url: str, cause: BaseException | str):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to download {url}: {cause}")


class ConfigValidationError(GwasSumstatsError):
    """Raised when configuration validation fails."""

    pass
