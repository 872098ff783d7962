# Command-line tokenizer.
#
# Splits on whitespace outside quoted regions. Either quote character toggles
# quoted mode and is dropped from the output; an unterminated quote runs to
# the end of the string.

QUOTES = ('"', "'")


def tokenize(command_line: str) -> list[str]:
    tokens = []
    current = []
    quoted = False

    for char in command_line or "":
        if char in QUOTES:
            quoted = not quoted
        elif char.isspace() and not quoted:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))

    return tokens
