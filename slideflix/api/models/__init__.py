"""
API models for SlideFlix
"""

from .common import HealthResponse, ServiceInfoResponse
from .requests import GenerateVideoRequest
from .responses import ErrorResponse, GenerateVideoResponse

__all__ = [
    'GenerateVideoRequest',
    'GenerateVideoResponse',
    'ErrorResponse',
    'HealthResponse',
    'ServiceInfoResponse',
]
