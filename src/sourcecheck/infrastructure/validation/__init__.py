from .bounded_reader import read_bounded
from .mp4_signature import detect_mp4_signature
from .video_source_validator import HttpVideoSourceValidator, validate_video_source

__all__ = [
    "HttpVideoSourceValidator",
    "detect_mp4_signature",
    "read_bounded",
    "validate_video_source",
]
