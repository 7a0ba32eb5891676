"""Bounded-concurrency batch download of summary statistics files.

Files are fetched by a fixed pool of asyncio workers sharing a single
``httpx.AsyncClient``. A failing file is recorded in the report and never
stops the rest of the batch.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import httpx

from .errors import DownloadError, HttpStatusError, LengthMismatchError
from .models import SummaryStatsFile

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_CHUNK_SIZE = 8192


class TaskOutcome(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class DownloadTask:
    """One file to fetch; ``index`` is its position in the input."""

    index: int
    url: str
    destination: Path
    outcome: TaskOutcome = TaskOutcome.PENDING
    error: str | None = None
    bytes_written: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "url": self.url,
            "destination": str(self.destination),
            "outcome": self.outcome.value,
            "error": self.error,
            "bytes_written": self.bytes_written,
        }


@dataclass
class DownloadReport:
    """Outcome of a batch: how many files succeeded and why the others failed."""

    tasks: list[DownloadTask] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.tasks)

    @property
    def succeeded(self) -> int:
        return sum(1 for task in self.tasks if task.outcome is TaskOutcome.SUCCEEDED)

    @property
    def failures(self) -> list[str]:
        return [
            task.error or f"Failed to download {task.url}"
            for task in self.tasks
            if task.outcome is TaskOutcome.FAILED
        ]

    @property
    def ok(self) -> bool:
        return self.succeeded == self.total

    def summary(self) -> str:
        """Human readable tally followed by one line per failure."""
        lines = [f"Downloaded {self.succeeded} of {self.total} files successfully."]
        lines.extend(self.failures)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": len(self.failures),
            "failures": self.failures,
            "tasks": [task.to_dict() for task in self.tasks],
        }


@dataclass
class DownloadConfig:
    """Configuration for a batch download."""

    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        if not isinstance(self.max_concurrency, int) or self.max_concurrency < 1:
            raise ValueError(
                f"Invalid max_concurrency '{self.max_concurrency}'. Must be a positive integer"
            )
        if not isinstance(self.chunk_size, int) or self.chunk_size < 1:
            raise ValueError(f"Invalid chunk_size '{self.chunk_size}'. Must be a positive integer")


ProgressCallback = Callable[[DownloadTask], None]


def make_tasks(urls: Sequence[str], destinations: Sequence[str | Path]) -> list[DownloadTask]:
    """Pair URLs with destinations.

    Raises:
        LengthMismatchError: If the two sequences differ in length
    """
    if len(urls) != len(destinations):
        raise LengthMismatchError(len(urls), len(destinations))
    return [
        DownloadTask(index=i, url=url, destination=Path(dest))
        for i, (url, dest) in enumerate(zip(urls, destinations, strict=True))
    ]


def _describe(error: Exception) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return str(HttpStatusError(error.response.status_code, error.response.reason_phrase))
    return str(error) or type(error).__name__


class BatchDownloader:
    """Downloads many files with at most ``max_concurrency`` in flight."""

    def __init__(
        self,
        config: DownloadConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or DownloadConfig()
        self._client = client

    async def download_all(
        self,
        urls: Sequence[str],
        destinations: Sequence[str | Path],
        progress_callback: ProgressCallback | None = None,
    ) -> DownloadReport:
        """Download every URL to its paired destination.

        Args:
            urls: Source URLs
            destinations: Output paths, one per URL; parent directories are created
            progress_callback: Called with each task once it has settled

        Returns:
            DownloadReport with one settled task per input pair

        Raises:
            LengthMismatchError: If ``urls`` and ``destinations`` differ in length
        """
        tasks = make_tasks(urls, destinations)
        report = DownloadReport(tasks=tasks)
        if not tasks:
            return report

        logger.info(
            "Downloading %d files with %d workers", len(tasks), self.config.max_concurrency
        )

        if self._client is not None:
            await self._run(self._client, tasks, progress_callback)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                await self._run(client, tasks, progress_callback)

        logger.info("Downloaded %d of %d files", report.succeeded, report.total)
        return report

    async def _run(
        self,
        client: httpx.AsyncClient,
        tasks: list[DownloadTask],
        progress_callback: ProgressCallback | None,
    ) -> None:
        queue: asyncio.Queue[DownloadTask] = asyncio.Queue()
        for task in tasks:
            queue.put_nowait(task)

        workers = [
            self._worker(client, queue, progress_callback)
            for _ in range(self.config.max_concurrency)
        ]
        await asyncio.gather(*workers)

    async def _worker(
        self,
        client: httpx.AsyncClient,
        queue: asyncio.Queue[DownloadTask],
        progress_callback: ProgressCallback | None,
    ) -> None:
        while True:
            try:
                task = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            await self._download_one(client, task)
            if progress_callback is not None:
                try:
                    progress_callback(task)
                except Exception as e:
                    logger.warning("Progress callback failed for %s: %s", task.url, e)

    async def _download_one(self, client: httpx.AsyncClient, task: DownloadTask) -> None:
        """Fetch one file, recording the outcome on ``task`` instead of raising."""
        created = False
        try:
            async with client.stream("GET", task.url) as response:
                response.raise_for_status()

                task.destination.parent.mkdir(parents=True, exist_ok=True)
                with open(task.destination, "wb") as f:
                    created = True
                    async for chunk in response.aiter_bytes(chunk_size=self.config.chunk_size):
                        f.write(chunk)
                        task.bytes_written += len(chunk)
        except Exception as e:
            if created:
                task.destination.unlink(missing_ok=True)
            error = DownloadError(task.url, _describe(e))
            task.outcome = TaskOutcome.FAILED
            task.error = str(error)
            logger.warning("%s", error)
            return

        task.outcome = TaskOutcome.SUCCEEDED
        logger.debug(
            "Downloaded %s -> %s (%d bytes)", task.url, task.destination, task.bytes_written
        )


def download_all(
    urls: Sequence[str],
    destinations: Sequence[str | Path],
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    client: httpx.AsyncClient | None = None,
    progress_callback: ProgressCallback | None = None,
) -> DownloadReport:
    """Blocking entry point for BatchDownloader.download_all.

    Must not be called from inside a running event loop; use
    ``BatchDownloader`` directly there.

    Raises:
        LengthMismatchError: If ``urls`` and ``destinations`` differ in length
        ValueError: If ``max_concurrency`` or ``chunk_size`` is not a positive integer
    """
    make_tasks(urls, destinations)
    config = DownloadConfig(max_concurrency=max_concurrency, chunk_size=chunk_size)
    downloader = BatchDownloader(config, client=client)
    return asyncio.run(downloader.download_all(urls, destinations, progress_callback))


def destination_for_url(url: str, output_dir: Path, fallback: str = "download") -> Path:
    """Path under ``output_dir`` named after the last segment of the URL path."""
    name = Path(urlsplit(url).path).name or fallback
    return Path(output_dir) / name


def file_destination(file: SummaryStatsFile, output_dir: Path) -> Path:
    """Local path for a summary statistics file.

    The file name from its fetch URL, under a per-study directory:
    ``output_dir / study_accession / name``.
    """
    return destination_for_url(
        file.fetch_url,
        Path(output_dir) / file.study_accession,
        fallback=f"{file.study_accession}.tsv",
    )


def download_summary_stats_files(
    files: Sequence[SummaryStatsFile],
    output_dir: Path,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    client: httpx.AsyncClient | None = None,
    progress_callback: ProgressCallback | None = None,
) -> DownloadReport:
    """Download the files described by a summary statistics listing into ``output_dir``."""
    urls = [file.fetch_url for file in files]
    destinations = [file_destination(file, output_dir) for file in files]
    return download_all(
        urls,
        destinations,
        max_concurrency,
        chunk_size=chunk_size,
        client=client,
        progress_callback=progress_callback,
    )
