"""Tests for object storage adapters."""

from pathlib import Path

import httpx
import pytest

from longform_engine.adapters.storage import HttpObjectStore, LocalObjectStore, ObjectLocation
from longform_engine.exceptions import StorageError


def _store(handler, endpoint_url: str | None = None, api_token: str | None = None) -> HttpObjectStore:
    return HttpObjectStore(
        bucket="renders-bucket",
        region="us-east-1",
        endpoint_url=endpoint_url,
        api_token=api_token,
        transport=httpx.MockTransport(handler),
    )


def _unused(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected request to {request.url}")


class TestHttpObjectStore:
    """Tests for the S3-compatible HTTP store."""

    def test_parse_bucket_url(self):
        location = _store(_unused).parse_url(
            "https://lambda-renders.s3.eu-west-1.amazonaws.com/renders/abc/out%20put.mp4?X-Amz-Expires=60"
        )

        assert location == ObjectLocation(
            bucket="lambda-renders", key="renders/abc/out put.mp4", region="eu-west-1"
        )

    @pytest.mark.parametrize(
        "url",
        [
            "https://cdn.example.com/renders/abc.mp4",
            "file:///tmp/abc.mp4",
            "https://bucket.s3.amazonaws.com/abc.mp4",
        ],
    )
    def test_parse_foreign_url(self, url):
        assert _store(_unused).parse_url(url) is None

    def test_public_url(self):
        assert (
            _store(_unused).public_url("renders/chunked/p1.mp4")
            == "https://renders-bucket.s3.us-east-1.amazonaws.com/renders/chunked/p1.mp4"
        )

    @pytest.mark.asyncio
    async def test_download_through_gateway(self, tmp_path: Path):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"chunk-bytes")

        store = _store(handler, endpoint_url="https://gateway.example.com/", api_token="secret")
        destination = tmp_path / "chunk.mp4"

        written = await store.download_object(
            ObjectLocation(bucket="lambda-renders", key="renders/abc/out.mp4"), destination
        )

        assert written == len(b"chunk-bytes")
        assert destination.read_bytes() == b"chunk-bytes"
        assert str(seen[0].url) == "https://gateway.example.com/lambda-renders/renders/abc/out.mp4"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_download_without_gateway_uses_bucket_host(self, tmp_path: Path):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"x")

        await _store(handler).download_object(
            ObjectLocation(bucket="other", key="a.mp4", region="eu-west-1"), tmp_path / "a.mp4"
        )

        assert seen[0].url.host == "other.s3.eu-west-1.amazonaws.com"
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_download_error(self, tmp_path: Path):
        store = _store(lambda request: httpx.Response(403, text="Access Denied"))

        with pytest.raises(StorageError, match="s3://renders-bucket/a.mp4"):
            await store.download_object(ObjectLocation(bucket="renders-bucket", key="a.mp4"), tmp_path / "a.mp4")

    @pytest.mark.asyncio
    async def test_upload(self, tmp_path: Path):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        source = tmp_path / "final.mp4"
        source.write_bytes(b"final video")

        url = await _store(handler).upload_file(source, "renders/chunked/p1.mp4")

        assert url == "https://renders-bucket.s3.us-east-1.amazonaws.com/renders/chunked/p1.mp4"
        assert seen[0].method == "PUT"
        assert seen[0].headers["Content-Type"] == "video/mp4"
        assert seen[0].headers["x-amz-acl"] == "public-read"
        assert seen[0].content == b"final video"

    @pytest.mark.asyncio
    async def test_upload_error(self, tmp_path: Path):
        source = tmp_path / "final.mp4"
        source.write_bytes(b"final video")
        store = _store(lambda request: httpx.Response(500))

        with pytest.raises(StorageError):
            await store.upload_file(source, "renders/p1.mp4")

    @pytest.mark.asyncio
    async def test_upload_missing_file(self, tmp_path: Path):
        with pytest.raises(StorageError):
            await _store(_unused).upload_file(tmp_path / "missing.mp4", "renders/p1.mp4")


class TestLocalObjectStore:
    """Tests for the directory-backed store."""

    @pytest.mark.asyncio
    async def test_upload_then_download(self, tmp_path: Path):
        store = LocalObjectStore(base_path=tmp_path / "storage")
        source = tmp_path / "final.mp4"
        source.write_bytes(b"final video")

        url = await store.upload_file(source, "renders/p1.mp4")
        location = store.parse_url(url)
        written = await store.download_object(location, tmp_path / "copy.mp4")

        assert url.startswith("file://")
        assert location.key == "renders/p1.mp4"
        assert written == len(b"final video")
        assert (tmp_path / "copy.mp4").read_bytes() == b"final video"

    def test_parse_url_outside_base(self, tmp_path: Path):
        store = LocalObjectStore(base_path=tmp_path / "storage")

        assert store.parse_url((tmp_path / "elsewhere.mp4").as_uri()) is None
        assert store.parse_url("https://example.com/a.mp4") is None

    @pytest.mark.asyncio
    async def test_missing_object(self, tmp_path: Path):
        store = LocalObjectStore(base_path=tmp_path / "storage")

        with pytest.raises(StorageError):
            await store.download_object(ObjectLocation(bucket="local", key="nope.mp4"), tmp_path / "x.mp4")
