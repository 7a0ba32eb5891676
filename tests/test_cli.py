"""Tests for Typer CLI interface."""

import json
import tempfile
from pathlib import Path
from unittest.mock import patch

import httpx
from conftest import BASE_URL
from typer.testing import CliRunner

from gwas_sumstats import __version__
from gwas_sumstats.cli import app
from gwas_sumstats.downloader import DownloadReport

runner = CliRunner(env={"NO_COLOR": "1", "TERM": "dumb"})

RealAsyncClient = httpx.AsyncClient


def patched_client(stub):
    return patch("gwas_sumstats.cli.GwasClient", side_effect=lambda base_url: stub.client())


def patched_downloads(contents: dict[str, bytes]):
    def handler(request: httpx.Request) -> httpx.Response:
        body = contents.get(request.url.path)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, content=body)

    transport = httpx.MockTransport(handler)
    return patch(
        "gwas_sumstats.downloader.httpx.AsyncClient",
        side_effect=lambda **kwargs: RealAsyncClient(transport=transport, **kwargs),
    )


class TestCLIHelp:
    """Tests for CLI help and basic structure."""

    def test_help_command(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "GWAS Catalog summary statistics" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_associations_help(self):
        result = runner.invoke(app, ["associations", "--help"])
        assert result.exit_code == 0
        assert "--p-min" in result.stdout
        assert "--kind" in result.stdout

    def test_pagination_help_shows_api_defaults(self):
        result = runner.invoke(app, ["get", "--help"])
        assert result.exit_code == 0
        assert "API default 20" in result.stdout

    def test_files_help(self):
        result = runner.invoke(app, ["files", "--help"])
        assert result.exit_code == 0
        assert "list" in result.stdout
        assert "download" in result.stdout


class TestGetCommand:
    """Tests for the get command."""

    def test_get_chromosome_prints_json(self, make_stub, chromosome_payload):
        stub = make_stub({"/chromosomes/1": chromosome_payload})

        with patched_client(stub):
            result = runner.invoke(app, ["get", "chromosomes", "--id", "1", "--quiet"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["chromosome"] == "1"

    def test_base_url_option(self, make_stub, chromosome_payload):
        stub = make_stub({"/chromosomes/1": chromosome_payload})

        with patched_client(stub) as mock_client:
            runner.invoke(app, ["get", "chromosome", "--id", "1", "--base-url", BASE_URL, "-q"])

        mock_client.assert_called_once_with(base_url=BASE_URL)

    def test_unknown_entity_exits_with_error(self, stub_api):
        with patched_client(stub_api):
            result = runner.invoke(app, ["get", "genes", "-q"])

        assert result.exit_code == 1
        assert "Invalid entity type" in result.stdout

    def test_invalid_base_url(self):
        result = runner.invoke(app, ["get", "traits", "--base-url", "not-a-url"])

        assert result.exit_code == 1
        assert "base_url" in result.stdout


class TestAssociationsCommand:
    def test_scoped_query_parameters(self, make_stub, associations_payload):
        stub = make_stub({"/traits/EFO_0001/associations": associations_payload})

        with patched_client(stub):
            result = runner.invoke(
                app,
                [
                    "associations",
                    "--kind", "trait",
                    "--id", "EFO_0001",
                    "--p-max", "1e-5",
                    "--size", "10",
                    "--quiet",
                ],
            )

        assert result.exit_code == 0
        assert stub.last_request.url.params["p_lower"] == "0.0"
        assert stub.last_request.url.params["size"] == "10"
        data = json.loads(result.stdout)
        assert set(data["_embedded"]["associations"]) == {"0", "1"}

    def test_kind_without_id(self, stub_api):
        with patched_client(stub_api):
            result = runner.invoke(app, ["associations", "--kind", "trait", "-q"])

        assert result.exit_code == 1
        assert "missing ID" in result.stdout


class TestFilesCommands:
    """Tests for file listing and download commands."""

    def test_list_trait_files(self, make_stub, files_payload):
        stub = make_stub({"/traits/EFO_1/summary-statistics": files_payload})

        with patched_client(stub):
            result = runner.invoke(app, ["files", "list", "trait", "EFO_1", "-q"])

        assert result.exit_code == 0
        files = json.loads(result.stdout)["_embedded"]["summary_statistics"]
        assert [f["study_accession"] for f in files] == ["GCST000392", "GCST000393"]

    def test_download_to_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patched_downloads({"/a.tsv": b"aaa", "/b.tsv": b"bbb"}):
                result = runner.invoke(
                    app,
                    [
                        "files", "download",
                        "https://files.test/a.tsv",
                        "https://files.test/b.tsv",
                        "--output-dir", tmpdir,
                        "--no-progress",
                    ],
                )

            assert result.exit_code == 0
            assert "Downloaded 2 of 2 files successfully." in result.output
            assert (Path(tmpdir) / "a.tsv").read_bytes() == b"aaa"
            assert (Path(tmpdir) / "b.tsv").read_bytes() == b"bbb"

    def test_download_partial_failure_exits_1(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = [str(Path(tmpdir) / "one.tsv"), str(Path(tmpdir) / "two.tsv")]
            with patched_downloads({"/1.tsv": b"1"}):
                result = runner.invoke(
                    app,
                    [
                        "files", "download",
                        "https://files.test/1.tsv",
                        "https://files.test/2.tsv",
                        "-o", out[0],
                        "-o", out[1],
                        "--no-progress",
                    ],
                )

            assert result.exit_code == 1
            assert "Downloaded 1 of 2 files successfully." in result.output
            assert Path(out[0]).read_bytes() == b"1"
            assert not Path(out[1]).exists()

    def test_download_uses_configured_chunk_size(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch(
                "gwas_sumstats.cli.download_all", return_value=DownloadReport()
            ) as mock_download:
                result = runner.invoke(
                    app,
                    ["files", "download", "https://files.test/1.tsv", "-d", tmpdir, "-q"],
                    env={"GWAS_SUMSTATS_CHUNK_SIZE": "7"},
                )

        assert result.exit_code == 0
        assert mock_download.call_args.kwargs["chunk_size"] == 7

    def test_download_length_mismatch(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(
                app,
                [
                    "files", "download",
                    "https://files.test/1.tsv",
                    "https://files.test/2.tsv",
                    "-o", str(Path(tmpdir) / "one.tsv"),
                    "--no-progress",
                ],
            )

            assert result.exit_code == 1
            assert "same length" in result.output
            assert list(Path(tmpdir).iterdir()) == []

    def test_download_rejects_zero_concurrency(self):
        result = runner.invoke(
            app, ["files", "download", "https://files.test/1.tsv", "--concurrency", "0"]
        )

        assert result.exit_code == 1
        assert "max_concurrency" in result.output

    def test_fetch_lists_then_downloads(self, make_stub, files_payload):
        stub = make_stub({"/studies/GCST000392/summary-statistics": files_payload})

        with tempfile.TemporaryDirectory() as tmpdir:
            contents = {
                "/GCST000392/harmonised/GCST000392.h.tsv.gz": b"one",
                "/GCST000393/harmonised/GCST000393.h.tsv.gz": b"two",
            }
            with patched_client(stub), patched_downloads(contents):
                result = runner.invoke(
                    app,
                    ["files", "fetch", "study", "GCST000392", "-d", tmpdir, "--no-progress"],
                )

            assert result.exit_code == 0
            assert "Found 2 files" in result.output
            assert (Path(tmpdir) / "GCST000392" / "GCST000392.h.tsv.gz").read_bytes() == b"one"
            assert (Path(tmpdir) / "GCST000393" / "GCST000393.h.tsv.gz").read_bytes() == b"two"

    def test_fetch_with_no_files(self, make_stub):
        stub = make_stub({"/traits/EFO_X/summary-statistics": {}})

        with patched_client(stub):
            result = runner.invoke(app, ["files", "fetch", "trait", "EFO_X"])

        assert result.exit_code == 0
        assert "No summary statistics files" in result.output


class TestConfigCommand:
    def test_show_defaults(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["max_concurrency"] == 4
        assert data["base_url"].startswith("https://www.ebi.ac.uk/")

    def test_show_with_config_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "gwas.toml"
            path.write_text("[gwas_sumstats]\nmax_concurrency = 16\n")

            result = runner.invoke(app, ["config", "show", "--config", str(path)])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["max_concurrency"] == 16

    def test_show_missing_config_file(self):
        result = runner.invoke(app, ["config", "show", "-c", "/nonexistent/gwas.toml"])

        assert result.exit_code == 1
        assert "not found" in result.stdout
