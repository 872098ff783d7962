# Token Classifier - string predicates over a single quote-stripped token.

import re

INTERPRETER = "node"
INTERPRETER_EXE = "node.exe"

# Dedicated install directories (nvm, Program Files\nodejs, Homebrew kegs, ...)
INSTALL_DIR_PATTERN = re.compile(r'[\\/](?:nodejs|\.nvm|nvm|\.volta|\.fnm)[\\/]')
PATH_SEP_INTERPRETER = re.compile(r'[\\/]node')

LAUNCHER_NAMES = {
    "npm", "npx", "yarn", "yarnpkg", "pnpm", "pnpx",
    "npm.cmd", "npx.cmd", "yarn.cmd", "pnpm.cmd", "pnpx.cmd",
    "npm.exe", "npx.exe", "yarn.exe", "pnpm.exe",
}
LAUNCHER_FRAGMENTS = (
    "npm-cli.js", "npx-cli.js", "yarn.js", "yarn.cjs",
    "pnpm.cjs", "pnpm.js", "pnpx.cjs",
)

INLINE_EVAL_FLAGS = ("-e", "-p", "--eval")

INTERPRETER_FLAGS = (
    "--inspect-brk", "--inspect-port", "--inspect-wait", "--inspect",
    "--require", "-r",
    "--eval", "-e", "--print", "-p",
    "--interactive", "-i", "--check", "-c",
    "--experimental-loader", "--loader", "--import",
    "--trace-warnings", "--trace-deprecation", "--trace-uncaught",
    "--trace-exit", "--trace-sigint", "--throw-deprecation",
    "--no-warnings", "--no-deprecation", "--pending-deprecation",
    "--max-old-space-size", "--stack-size", "--expose-gc",
    "--enable-source-maps", "--preserve-symlinks", "--unhandled-rejections",
    "--input-type", "--conditions", "-C", "--env-file", "--title",
    "--watch", "--watch-path", "--harmony",
)

ARGUMENT_FLAGS = {
    "--require", "-r",
    "--eval", "-e", "--print", "-p",
    "--experimental-loader", "--loader", "--import",
    "--input-type", "--conditions", "-C", "--title", "--watch-path",
    "--env-file", "--inspect-port", "--unhandled-rejections",
    "--stack-size", "--max-old-space-size",
}

INTERPRETER_FLAG_PATTERN = re.compile(
    r'^(?:' + "|".join(re.escape(flag) for flag in INTERPRETER_FLAGS) + r')(?==|$)'
)
FLAG_PREFIX_PATTERN = re.compile(r'^--?[A-Za-z0-9][\w-]*=')

SOURCE_EXTENSIONS = (
    ".js", ".mjs", ".cjs", ".jsx",
    ".ts", ".mts", ".cts", ".tsx",
    ".json", ".coffee",
)


def basename(token: str) -> str:
    return re.split(r'[\\/]', token)[-1]


def is_interpreter_executable(token: str) -> bool:
    lower = token.lower()
    if lower.endswith(INTERPRETER) or lower.endswith(INTERPRETER_EXE):
        return True
    if INSTALL_DIR_PATTERN.search(lower):
        return True
    return bool(PATH_SEP_INTERPRETER.search(lower))


def is_launcher(token: str) -> bool:
    lower = token.lower()
    if lower in LAUNCHER_NAMES or basename(lower) in LAUNCHER_NAMES:
        return True
    return any(fragment in lower for fragment in LAUNCHER_FRAGMENTS)


def is_interpreter_flag(token: str) -> bool:
    return bool(INTERPRETER_FLAG_PATTERN.match(token))


def is_inline_eval_flag(token: str) -> bool:
    return token in INLINE_EVAL_FLAGS


def flag_consumes_next_argument(token: str) -> bool:
    if "=" in token:
        return False
    return token in ARGUMENT_FLAGS


def strip_flag_prefix(token: str) -> str:
    return FLAG_PREFIX_PATTERN.sub("", token, count=1)


def looks_like_file_path(token: str) -> bool:
    value = strip_flag_prefix(token)
    if not value:
        return False
    if "/" in value or "\\" in value:
        return True
    return value.lower().endswith(SOURCE_EXTENSIONS)
