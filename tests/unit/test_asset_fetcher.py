"""
Tests for AssetFetcher: transport failures, index binding and logo degradation.
"""

import threading

import pytest
import requests

from slideflix.composition.asset_fetcher import AssetFetcher
from slideflix.composition.exceptions import DownloadError, ResourceError
from tests.helpers import PNG_BYTES, FakeResponse, FakeSession

SLIDE_A = "https://cdn.example.com/slides/a.png"
SLIDE_B = "https://cdn.example.com/slides/b.jpg"
LOGO = "https://cdn.example.com/brand/logo"


def test_fetch_writes_file(workspace):
    session = FakeSession({SLIDE_A: FakeResponse(PNG_BYTES)})
    fetcher = AssetFetcher(session=session)

    asset = fetcher.fetch(SLIDE_A, workspace, "slide[0]", "slide_0")

    assert asset.path == workspace.path / "slide_0.png"
    assert asset.path.read_bytes() == PNG_BYTES
    assert asset.size_bytes == len(PNG_BYTES)
    assert asset.role == "slide[0]"
    assert asset.source_url == SLIDE_A


def test_suffix_from_url_then_content_type(workspace):
    session = FakeSession({
        SLIDE_B: FakeResponse(b"jpeg-bytes", headers={"Content-Type": "image/jpeg"}),
        LOGO: FakeResponse(b"png-bytes", headers={"Content-Type": "image/png; charset=binary"}),
    })
    fetcher = AssetFetcher(session=session)

    assert fetcher.fetch(SLIDE_B, workspace, "slide[1]", "slide_1").path.suffix == ".jpg"
    assert fetcher.fetch(LOGO, workspace, "logo", "logo").path.suffix == ".png"


def test_http_error_status(workspace):
    session = FakeSession({SLIDE_A: FakeResponse(b"nope", status_code=403)})
    with pytest.raises(DownloadError) as exc_info:
        AssetFetcher(session=session).fetch(SLIDE_A, workspace, "slide[0]", "slide_0")
    assert exc_info.value.status_code == 403
    assert exc_info.value.details["url"] == SLIDE_A


def test_transport_error(workspace):
    session = FakeSession({SLIDE_A: requests.ConnectionError("dns failure")})
    with pytest.raises(DownloadError, match="dns failure"):
        AssetFetcher(session=session).fetch(SLIDE_A, workspace, "slide[0]", "slide_0")


def test_connection_lost_mid_body(workspace):
    session = FakeSession({SLIDE_A: FakeResponse(b"x" * 64, fail_midway=True)})
    with pytest.raises(DownloadError, match="Connection lost"):
        AssetFetcher(session=session).fetch(SLIDE_A, workspace, "slide[0]", "slide_0")


def test_empty_body_rejected(workspace):
    session = FakeSession({SLIDE_A: FakeResponse(b"")})
    with pytest.raises(DownloadError, match="empty"):
        AssetFetcher(session=session).fetch(SLIDE_A, workspace, "slide[0]", "slide_0")


def test_declared_size_over_limit(workspace):
    response = FakeResponse(b"x" * 10, headers={"Content-Length": "5000"})
    session = FakeSession({SLIDE_A: response})
    with pytest.raises(DownloadError, match="too large"):
        AssetFetcher(session=session, max_bytes=1000).fetch(SLIDE_A, workspace, "slide[0]", "slide_0")
    assert response.closed


def test_streamed_size_over_limit(workspace):
    session = FakeSession({SLIDE_A: FakeResponse(b"x" * 200, headers={})})
    with pytest.raises(DownloadError, match="byte limit"):
        AssetFetcher(session=session, max_bytes=100).fetch(SLIDE_A, workspace, "slide[0]", "slide_0")


def test_unwritable_workspace(workspace):
    workspace.file("slide_0.png").mkdir()
    session = FakeSession({SLIDE_A: FakeResponse(PNG_BYTES)})
    with pytest.raises(ResourceError):
        AssetFetcher(session=session).fetch(SLIDE_A, workspace, "slide[0]", "slide_0")


class TestFetchSlides:

    def test_results_bound_by_index_when_second_finishes_first(self, workspace):
        session = FakeSession({
            SLIDE_A: FakeResponse(b"first-slide", delay=0.3),
            SLIDE_B: FakeResponse(b"second-slide"),
        })
        assets = AssetFetcher(session=session, concurrent=True).fetch_slides([SLIDE_A, SLIDE_B], workspace)

        assert [a.source_url for a in assets] == [SLIDE_A, SLIDE_B]
        assert assets[0].path.read_bytes() == b"first-slide"
        assert assets[1].path.read_bytes() == b"second-slide"
        assert [a.role for a in assets] == ["slide[0]", "slide[1]"]

    def test_downloads_run_concurrently(self, workspace):
        both_started = threading.Barrier(2, timeout=5)

        class BarrierResponse(FakeResponse):
            def iter_content(self, chunk_size=1):
                both_started.wait()
                yield from super().iter_content(chunk_size)

        session = FakeSession({SLIDE_A: BarrierResponse(b"a"), SLIDE_B: BarrierResponse(b"b")})
        assets = AssetFetcher(session=session).fetch_slides([SLIDE_A, SLIDE_B], workspace)
        assert len(assets) == 2

    def test_sequential_mode(self, workspace):
        session = FakeSession({SLIDE_A: FakeResponse(b"a"), SLIDE_B: FakeResponse(b"b")})
        assets = AssetFetcher(session=session, concurrent=False).fetch_slides([SLIDE_A, SLIDE_B], workspace)
        assert session.calls == [SLIDE_A, SLIDE_B]
        assert [a.path.read_bytes() for a in assets] == [b"a", b"b"]

    @pytest.mark.parametrize("concurrent", [True, False])
    def test_either_slide_failure_fails_request(self, workspace, concurrent):
        session = FakeSession({SLIDE_A: FakeResponse(b"a")})  # SLIDE_B -> 404
        with pytest.raises(DownloadError) as exc_info:
            AssetFetcher(session=session, concurrent=concurrent).fetch_slides([SLIDE_A, SLIDE_B], workspace)
        assert exc_info.value.url == SLIDE_B
        assert exc_info.value.status_code == 404


class TestFetchLogo:

    def test_no_url(self, workspace):
        session = FakeSession({})
        assert AssetFetcher(session=session).fetch_logo(None, workspace) is None
        assert session.calls == []

    def test_success(self, workspace):
        session = FakeSession({LOGO: FakeResponse(PNG_BYTES)})
        degradations = []
        asset = AssetFetcher(session=session).fetch_logo(LOGO, workspace, degradations)
        assert asset.role == "logo"
        assert asset.path.name == "logo.png"
        assert degradations == []

    def test_failure_degrades_to_none(self, workspace, caplog):
        session = FakeSession({LOGO: requests.Timeout("read timed out")})
        degradations = []

        with caplog.at_level("WARNING", logger="slideflix.composition.asset_fetcher"):
            asset = AssetFetcher(session=session).fetch_logo(LOGO, workspace, degradations)

        assert asset is None
        assert len(degradations) == 1
        assert degradations[0].startswith("logo_unavailable:")
        assert "continuing without logo" in caplog.text
