import re


_ANSI_ESCAPE_RE = re.compile(
    rb"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"   # OSC, e.g. window title
    rb"|\x1b\[[0-?]*[ -/]*[@-~]"            # CSI: colors, cursor movement, clear screen
    rb"|\x1b[()][0-9A-Za-z]"                # character set selection
    rb"|\x1b[@-Z\\-_]"                      # other two-byte sequences
)


def strip_ansi_codes(data: bytes) -> bytes:
    """
    Remove ANSI escape codes from terminal output.

    Removing a sequence can join the bytes around it into a new one, so the
    substitution is repeated until nothing changes.

    Args:
        data: Raw output potentially containing ANSI codes

    Returns:
        The output with ANSI codes removed
    """
    while True:
        stripped = _ANSI_ESCAPE_RE.sub(b"", data)
        if stripped == data:
            return stripped
        data = stripped
