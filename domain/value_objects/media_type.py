from enum import Enum


class MediaType(str, Enum):
    """Coarse classification of an uploaded file, derived from its content type."""

    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    OTHER = "other"
    UNKNOWN = "unknown"

    @classmethod
    def from_content_type(cls, content_type: str | None) -> "MediaType":
        if not content_type:
            return cls.UNKNOWN

        content_type = content_type.lower()
        if content_type.startswith("image/"):
            return cls.IMAGE
        if content_type.startswith("audio/"):
            return cls.AUDIO
        if content_type.startswith("video/"):
            return cls.VIDEO
        if content_type == "application/pdf":
            return cls.DOCUMENT
        return cls.OTHER
