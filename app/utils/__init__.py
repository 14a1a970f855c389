from app.utils.logging import get_logger, setup_logging
from app.utils.base import parse_object_id, parse_object_ids, contains_pattern
from app.utils.file_classifier import FileClassifier


__all__= [
    "get_logger",
    "setup_logging",
    "parse_object_id",
    "parse_object_ids",
    "contains_pattern",
    "FileClassifier",
]
