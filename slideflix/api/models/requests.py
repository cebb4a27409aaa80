"""
Request models for SlideFlix API.

Field names on the wire are camelCase; Python attributes are snake_case.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from slideflix.composition.models import CompositionRequest


class GenerateVideoRequest(BaseModel):
    """Body of ``POST /generate-video``."""

    model_config = ConfigDict(populate_by_name=True)

    # Count is checked by CompositionRequest so a wrong count is a 400 like
    # every other request validation failure
    slide_urls: List[str] = Field(default_factory=list, alias="slideUrls", description="Exactly two slide image URLs")
    video_name: str = Field("", alias="videoName", description="Output name used in the destination key")
    business_id: str = Field("", alias="businessId", description="Owner identifier, first segment of the key")
    duration: Optional[float] = Field(
        None, gt=0, allow_inf_nan=False, description="Seconds each slide is held (default from config)"
    )
    logo_url: Optional[str] = Field(None, alias="logoUrl", description="Optional corner logo image URL")
    supabase_url: Optional[str] = Field(None, alias="supabaseUrl", description="Per-request Supabase project URL")
    supabase_service_key: Optional[str] = Field(
        None, alias="supabaseServiceKey", description="Per-request Supabase service key"
    )
    response_format: Literal["url", "base64"] = Field(
        "url", alias="responseFormat", description="'url' publishes the video; 'base64' returns it inline"
    )

    @property
    def inline(self) -> bool:
        return self.response_format == "base64"

    @property
    def has_supabase_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    def to_composition_request(self, default_hold: float) -> CompositionRequest:
        """
        Raises:
            ValidationError: If the body does not describe a valid composition
        """
        return CompositionRequest(
            slide_urls=tuple(self.slide_urls),
            hold_duration=self.duration if self.duration is not None else default_hold,
            output_name=self.video_name,
            owner_id=self.business_id,
            logo_url=self.logo_url,
        )
