"""Text processing utilities for summary and SMS preparation.

Provides functions to strip reply noise from extracted message text, shorten
it, and flatten it into the single line an SMS can carry.
"""

import re

# Mobile app footer patterns to always strip
MOBILE_FOOTER_PATTERNS = [
    r"^Sent from my iPhone\s*$",
    r"^Sent from my iPad\s*$",
    r"^Sent from my Galaxy\s*$",
    r"^Sent from my Samsung\s*$",
    r"^Sent from my Android\s*$",
    r"^Get Outlook for iOS\s*$",
    r"^Get Outlook for Android\s*$",
    r"^Sent from Outlook for iOS\s*$",
    r"^Sent from Outlook for Android\s*$",
    r"^Sent from Mail for Windows\s*$",
    r"^Sent from Yahoo Mail\s*$",
]

# Quoted reply header patterns
QUOTED_HEADER_PATTERNS = [
    r"^On .+wrote:\s*$",  # "On Mon, Jan 1, 2024, Person wrote:"
    r"^-+\s*Original Message\s*-+\s*$",  # "--- Original Message ---"
    r"^_{10,}\s*$",  # Outlook separators (underscores)
]

# Closing lines; everything from the sign-off to the end of its line goes
SIGNOFF_PATTERN = re.compile(r"\b(Best regards|Kind regards|Thanks|Sincerely),?.*$", re.IGNORECASE)

# Forwarded/embedded header lines
HEADER_LINE_PATTERN = re.compile(r"\b(From|Sent|To):")


def strip_mobile_footers(text: str) -> str:
    """Remove mobile app footers such as "Sent from my iPhone"."""
    lines = text.splitlines()
    filtered = []

    for line in lines:
        is_footer = any(
            re.match(pattern, line.strip(), re.IGNORECASE)
            for pattern in MOBILE_FOOTER_PATTERNS
        )
        if not is_footer:
            filtered.append(line)

    return "\n".join(filtered)


def strip_quoted_replies(text: str) -> str:
    """Remove quoted reply content from message text.

    Strips:
    - Lines starting with '>' (quoted text)
    - "On date, person wrote:" headers and everything after them
    - Outlook-style separators and everything after them
    - Signature delimiters ("--") and everything after them

    Keep the original message content above the quotes.
    """
    lines = text.splitlines()
    result = []

    for line in lines:
        stripped = line.strip()

        is_quote_header = any(
            re.match(pattern, stripped, re.IGNORECASE) for pattern in QUOTED_HEADER_PATTERNS
        )
        is_separator = re.match(r"^(_{5,}|-{2,}.*)$", stripped)

        if is_quote_header or is_separator:
            # Quoted content goes to the end
            break

        if stripped.startswith(">"):
            continue

        result.append(line)

    return "\n".join(result)


def strip_signoffs(text: str) -> str:
    """Remove sign-off phrases ("Thanks,", "Best regards") to the end of their line."""
    return "\n".join(SIGNOFF_PATTERN.sub("", line) for line in text.splitlines())


def strip_header_lines(text: str) -> str:
    """Drop lines that carry forwarded header fields (From:, Sent:, To:)."""
    return "\n".join(line for line in text.splitlines() if not HEADER_LINE_PATTERN.search(line))


def collapse_whitespace(text: str) -> str:
    """Collapse excessive whitespace while preserving paragraph structure.

    - Collapses multiple spaces to single space
    - Collapses more than 2 consecutive newlines to 2
    - Strips leading/trailing whitespace from lines
    """
    text = re.sub(r"[ \t]+", " ", text)

    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)

    text = re.sub(r"\n{3,}", "\n\n", text)

    return text.strip()


def flatten(text: str) -> str:
    """Collapse all whitespace, newlines included, to single spaces."""
    return re.sub(r"\s+", " ", text).strip()


def first_lines(text: str, count: int = 2) -> str:
    """Join the first ``count`` non-empty lines into a single line."""
    lines = [line for line in text.splitlines() if line.strip()]
    return flatten(" ".join(lines[:count]))


def smart_truncate(text: str, max_chars: int, at_sentence: bool = True) -> str:
    """Truncate text intelligently at sentence boundary if possible.

    Args:
        text: The text to truncate
        max_chars: Maximum character length
        at_sentence: If True, try to truncate at a sentence boundary

    Returns:
        Truncated text, with "..." appended if truncation occurred mid-sentence
    """
    if len(text) <= max_chars:
        return text

    if not at_sentence:
        return text[: max_chars - 3].rstrip() + "..."

    truncated = text[:max_chars]

    sentence_ends = [match.end() for match in re.finditer(r"[.!?](?:\s|$)", truncated)]

    if sentence_ends:
        last_end = sentence_ends[-1]
        # Only use it if we're keeping at least half the allowed length
        if last_end >= max_chars // 2:
            return text[:last_end].rstrip()

    last_space = truncated.rfind(" ")
    if last_space > max_chars // 2:
        return text[:last_space].rstrip() + "..."

    return text[: max_chars - 3].rstrip() + "..."


def clean_for_summary(text: str) -> str:
    """Remove reply noise from message text before summarizing.

    Order matters: quoted sections are cut before sign-offs so that a
    "Thanks," inside a quote does not leave stray text behind.
    """
    text = strip_mobile_footers(text)
    text = strip_quoted_replies(text)
    text = re.sub(r"\[.*?\]", "", text)  # [image], [cid:...], link markers
    text = strip_signoffs(text)
    text = strip_header_lines(text)
    return collapse_whitespace(text)


def sender_display_name(sender: str) -> str:
    """Get the display part of a sender.

    "John Doe <john@example.com>" -> "John Doe". A bare address is returned
    as-is.
    """
    return sender.split("<")[0].strip() or sender.strip()
