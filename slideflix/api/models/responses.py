"""
Response models for SlideFlix API
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from slideflix.composition.models import CompositionResult


class GenerateVideoResponse(BaseModel):
    """Successful composition."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    video_url: Optional[str] = Field(None, alias="videoUrl")
    video_base64: Optional[str] = Field(None, alias="videoBase64")
    destination_key: str = Field(..., alias="destinationKey")
    elapsed_ms: int = Field(..., alias="elapsedMs")
    encode_ms: int = Field(..., alias="encodeMs")
    duration_seconds: Optional[float] = Field(None, alias="durationSeconds")
    logo_applied: bool = Field(..., alias="logoApplied")
    degradations: List[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: CompositionResult, video_base64: Optional[str] = None) -> "GenerateVideoResponse":
        return cls(
            video_url=result.artifact_url,
            video_base64=video_base64,
            destination_key=result.destination_key,
            elapsed_ms=int(result.elapsed_seconds * 1000),
            encode_ms=int(result.encode_seconds * 1000),
            duration_seconds=result.video_duration_seconds or result.expected_duration_seconds,
            logo_applied=result.logo_applied,
            degradations=list(result.degradations),
        )

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    """Error response model."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    error: str = Field(..., description="Error message")
    error_type: str = Field(..., alias="errorType", description="Stable failure category")
    details: Dict[str, Any] = Field(default_factory=dict, description="Additional error details")

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
