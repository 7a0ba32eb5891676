"""Client and bulk downloader for the GWAS Catalog summary statistics API."""

from .client import DEFAULT_BASE_URL, GwasClient, build_filter, check_response
from .downloader import (
    BatchDownloader,
    DownloadConfig,
    DownloadReport,
    DownloadTask,
    TaskOutcome,
    download_all,
    download_summary_stats_files,
)
from .errors import (
    ConfigValidationError,
    DecodeError,
    DownloadError,
    GwasSumstatsError,
    HttpStatusError,
    InvalidFileScopeError,
    InvalidScopeError,
    LengthMismatchError,
    MalformedURLError,
    UnexpectedContentTypeError,
    UnsupportedEntityKindError,
)
from .filters import GwasFilter
from .models import (
    Association,
    Chromosome,
    HalEnvelope,
    Study,
    SummaryStatsFile,
    Trait,
)
from .router import (
    EntityKind,
    FileScopeKind,
    ScopeKind,
    get_entity,
    get_scoped_associations,
    list_files,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_BASE_URL",
    "Association",
    "BatchDownloader",
    "Chromosome",
    "ConfigValidationError",
    "DecodeError",
    "DownloadConfig",
    "DownloadError",
    "DownloadReport",
    "DownloadTask",
    "EntityKind",
    "FileScopeKind",
    "GwasClient",
    "GwasFilter",
    "GwasSumstatsError",
    "HalEnvelope",
    "HttpStatusError",
    "InvalidFileScopeError",
    "InvalidScopeError",
    "LengthMismatchError",
    "MalformedURLError",
    "ScopeKind",
    "Study",
    "SummaryStatsFile",
    "TaskOutcome",
    "Trait",
    "UnexpectedContentTypeError",
    "UnsupportedEntityKindError",
    "__version__",
    "build_filter",
    "check_response",
    "download_all",
    "download_summary_stats_files",
    "get_entity",
    "get_scoped_associations",
    "list_files",
]
