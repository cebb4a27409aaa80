"""
Tests for composition request validation and result invariants.
"""

import pytest

from slideflix.composition.exceptions import ValidationError
from slideflix.composition.models import (
    CanvasSize,
    CompositionRequest,
    CompositionResult,
    Corner,
    sanitize_name,
)

URLS = ("https://cdn.example.com/a.png", "https://cdn.example.com/b.png")


def make_request(**overrides):
    fields = dict(slide_urls=URLS, hold_duration=3, output_name="promo", owner_id="biz-1")
    fields.update(overrides)
    return CompositionRequest(**fields)


class TestCompositionRequest:

    def test_valid_request(self):
        request = make_request(slide_urls=list(URLS))
        assert request.slide_urls == URLS
        assert request.logo_url is None

    @pytest.mark.parametrize("urls", [(), (URLS[0],), URLS + ("https://cdn.example.com/c.png",)])
    def test_slide_count_must_be_two(self, urls):
        with pytest.raises(ValidationError) as exc_info:
            make_request(slide_urls=urls)
        assert exc_info.value.details["field"] == "slideUrls"

    def test_blank_slide_url_rejected(self):
        with pytest.raises(ValidationError):
            make_request(slide_urls=(URLS[0], "  "))

    @pytest.mark.parametrize("hold", [0, -1, "3", True, None, float("nan"), float("inf"), float("-inf")])
    def test_hold_duration_must_be_positive_number(self, hold):
        with pytest.raises(ValidationError):
            make_request(hold_duration=hold)

    def test_identifiers_required(self):
        with pytest.raises(ValidationError, match="Output name"):
            make_request(output_name="")
        with pytest.raises(ValidationError, match="Owner"):
            make_request(owner_id=" ")

    def test_blank_logo_treated_as_absent(self):
        assert make_request(logo_url="   ").logo_url is None
        assert make_request(logo_url="https://cdn.example.com/logo.png").logo_url is not None

    def test_destination_key(self):
        request = make_request(output_name="Spring Sale!", owner_id="biz 42")
        assert request.destination_key(1700000000000) == "biz_42/1700000000000_Spring_Sale.mp4"


def test_sanitize_name_never_empty():
    assert sanitize_name("../..") == "video"
    assert sanitize_name("clip-01.final") == "clip-01.final"


def test_corner_parse():
    assert Corner.parse("TOP_LEFT") is Corner.TOP_LEFT
    assert Corner.parse(Corner.BOTTOM_RIGHT) is Corner.BOTTOM_RIGHT
    with pytest.raises(ValidationError):
        Corner.parse("middle")


@pytest.mark.parametrize("width,height", [(0, 1080), (1920, -1), (19.5, 1080)])
def test_canvas_size_rejects_bad_dimensions(width, height):
    with pytest.raises(ValidationError):
        CanvasSize(width, height)


class TestCompositionResult:

    def _fields(self, **overrides):
        fields = dict(
            destination_key="biz/1_promo.mp4",
            size_bytes=10,
            encode_seconds=1.0,
            elapsed_seconds=1.5,
            expected_duration_seconds=5.5,
            logo_applied=False,
        )
        fields.update(overrides)
        return fields

    def test_exactly_one_delivery(self):
        CompositionResult(**self._fields(video_bytes=b"x"))
        CompositionResult(**self._fields(artifact_url="https://x"))
        with pytest.raises(ValueError):
            CompositionResult(**self._fields())
        with pytest.raises(ValueError):
            CompositionResult(**self._fields(video_bytes=b"x", artifact_url="https://x"))
