import os
from typing import Optional


class FileClassifier:
    """Utility class for classifying uploads into catalog file types"""

    IMAGE_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp", "image/bmp", "image/svg+xml"]
    IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".svg"]

    VIDEO_TYPES = ["video/mp4", "video/avi", "video/quicktime", "video/x-msvideo", "video/webm", "video/x-matroska"]
    VIDEO_EXTENSIONS = [".mp4", ".avi", ".mov", ".wmv", ".mkv", ".webm"]

    @staticmethod
    def is_image(content_type: str, file_ext: str) -> bool:
        return (
            content_type in FileClassifier.IMAGE_TYPES or
            content_type.startswith("image/") or
            file_ext.lower() in FileClassifier.IMAGE_EXTENSIONS
        )

    @staticmethod
    def is_video(content_type: str, file_ext: str) -> bool:
        return (
            content_type in FileClassifier.VIDEO_TYPES or
            content_type.startswith("video/") or
            file_ext.lower() in FileClassifier.VIDEO_EXTENSIONS
        )

    @staticmethod
    def get_file_category(file_name: str, content_type: Optional[str] = None) -> str:
        """Map an upload to image, video or document (the fallback)"""
        _, file_ext = os.path.splitext(file_name or "")
        content_type = (content_type or "").lower()

        if FileClassifier.is_image(content_type, file_ext):
            return "image"
        elif FileClassifier.is_video(content_type, file_ext):
            return "video"
        else:
            return "document"
