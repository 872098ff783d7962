from .classify import (
    flag_consumes_next_argument,
    is_interpreter_executable,
    is_interpreter_flag,
    is_launcher,
    looks_like_file_path,
)
from .paths import extract_path
from .records import ProcessRecord, matches_pattern, normalize, urls_only
from .tokens import tokenize
from .urls import extract_url

__all__ = [
    "ProcessRecord",
    "extract_path",
    "extract_url",
    "flag_consumes_next_argument",
    "is_interpreter_executable",
    "is_interpreter_flag",
    "is_launcher",
    "looks_like_file_path",
    "matches_pattern",
    "normalize",
    "tokenize",
    "urls_only",
]
