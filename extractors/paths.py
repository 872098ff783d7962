"""Path Extractor - best guess at the script a process is actually running.

Command lines for scripted launches are conventional:
``interpreter [flags] script.js`` or ``launcher run|start name``. The
extractor walks that shape and degrades to the first plausible token instead
of failing on anything it does not recognise.
"""

from .classify import (
    flag_consumes_next_argument,
    is_inline_eval_flag,
    is_interpreter_executable,
    is_interpreter_flag,
    is_launcher,
    looks_like_file_path,
    strip_flag_prefix,
)
from .tokens import tokenize

INLINE = "inline"
DEPENDENCY_MARKER = "node_modules"


def truncate_at_dependencies(path: str) -> str:
    """Cut ``path`` at the first dependency directory, keeping the project part."""
    index = path.lower().find(DEPENDENCY_MARKER)
    if index == -1:
        return path
    return path[:index].rstrip("/\\")


def _is_flag(token: str) -> bool:
    return token.startswith("-")


def _launcher_script(tokens: list[str]) -> str | None:
    for index, token in enumerate(tokens):
        if not is_launcher(token):
            continue

        rest = tokens[index + 1:]
        if "run" in rest:
            position = rest.index("run")
            if position + 1 < len(rest) and not _is_flag(rest[position + 1]):
                return rest[position + 1]
        if rest and not _is_flag(rest[0]):
            return rest[0]
        return None

    return None


def _interpreter_index(tokens: list[str]) -> int | None:
    for index, token in enumerate(tokens):
        if is_interpreter_executable(token):
            return index
    return None


def extract_path(command_line: str) -> str | None:
    tokens = tokenize(command_line)
    if not tokens:
        return None

    script = _launcher_script(tokens)
    if script is not None:
        return truncate_at_dependencies(script)

    interpreter = _interpreter_index(tokens)
    start = interpreter + 1 if interpreter is not None else 0

    skip_next = False
    for token in tokens[start:]:
        if skip_next:
            skip_next = False
            continue
        if is_interpreter_flag(token):
            if is_inline_eval_flag(token):
                return INLINE
            skip_next = flag_consumes_next_argument(token)
            continue
        if is_launcher(token):
            continue
        if looks_like_file_path(token):
            return truncate_at_dependencies(strip_flag_prefix(token))

    if interpreter is None:
        return truncate_at_dependencies(tokens[0])

    for token in tokens[start:]:
        if not _is_flag(token):
            return truncate_at_dependencies(token)

    # Nothing follows the interpreter but flags
    return truncate_at_dependencies(tokens[0])
