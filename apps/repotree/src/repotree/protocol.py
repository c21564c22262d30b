"""Line protocol shared by listing sources and the tree builder.

File entries are written one per line as::

    <type>|<name>|<path>|<size>

and repository summaries as::

    <name>|<description>|<url>|<language>|<stars>|<forks>|<isPrivate>

Decoding is lenient: malformed lines are skipped and unparsable numbers are
defaulted, so a partially garbled listing still yields every usable entry.
"""

import logging
from collections.abc import Iterable

from .errors import ProtocolError
from .models import DIRECTORY, FILE, Entry, EntryKind, RepoSummary

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
LINE_SEPARATOR = "\n"

ENTRY_FIELDS = 4
ENTRY_MIN_FIELDS = 3

SUMMARY_FIELDS = 7
SUMMARY_MIN_FIELDS = 5
# url, language, stars, forks, isPrivate
SUMMARY_TAIL_FIELDS = 5

DIRECTORY_TOKENS = frozenset({"directory", "folder"})


def normalize_kind(token: str) -> EntryKind:
    """Map a type token to an entry kind; ``directory`` and ``folder`` are directories."""
    if token.strip().lower() in DIRECTORY_TOKENS:
        return DIRECTORY
    return FILE


def _check_field(value: str, field: str, allow_separator: bool = False) -> str:
    if LINE_SEPARATOR in value or "\r" in value:
        raise ProtocolError(f"{field} must not contain a line break: {value!r}")
    if not allow_separator and FIELD_SEPARATOR in value:
        raise ProtocolError(f"{field} must not contain {FIELD_SEPARATOR!r}: {value!r}")
    return value


# ============ File entries ============

def encode_entry(entry: Entry) -> str:
    """Encode one entry as a protocol line (without the trailing newline)."""
    size = "" if entry.size is None else str(entry.size)
    return FIELD_SEPARATOR.join(
        (
            entry.kind,
            _check_field(entry.name, "name"),
            _check_field(entry.path, "path"),
            size,
        )
    )


def is_encodable(entry: Entry) -> bool:
    """Whether name and path can be written without breaking the line format."""
    return not any(
        char in value
        for value in (entry.name, entry.path)
        for char in (FIELD_SEPARATOR, LINE_SEPARATOR, "\r")
    )


def encode_entries(entries: Iterable[Entry]) -> str:
    """Encode entries as newline-terminated protocol lines."""
    return "".join(encode_entry(entry) + LINE_SEPARATOR for entry in entries)


def _parse_size(raw: str, path: str) -> int | None:
    if not raw:
        return None
    try:
        size = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid size %r for %s", raw, path)
        return None
    if size < 0:
        logger.warning("Ignoring negative size %d for %s", size, path)
        return None
    return size


def decode_entry(line: str) -> Entry | None:
    """Decode one protocol line, returning ``None`` for blank or malformed lines."""
    if not line.strip():
        return None

    parts = [part.strip() for part in line.split(FIELD_SEPARATOR, ENTRY_FIELDS - 1)]
    if len(parts) < ENTRY_MIN_FIELDS:
        logger.debug("Skipping line with %d fields: %r", len(parts), line)
        return None

    kind = normalize_kind(parts[0])
    name, path = parts[1], parts[2]
    if not path:
        logger.debug("Skipping line without path: %r", line)
        return None
    if not name:
        name = path.rsplit("/", 1)[-1]
    elif name != path.rsplit("/", 1)[-1]:
        logger.warning("Skipping line whose name %r does not match path %r", name, path)
        return None

    size = None
    if kind == FILE and len(parts) > ENTRY_MIN_FIELDS:
        size = _parse_size(parts[3], path)

    return Entry(kind=kind, name=name, path=path, size=size)


def decode_entries(text: str | None) -> list[Entry]:
    """Decode a listing response into entries, in input order."""
    entries: list[Entry] = []
    if not text:
        return entries

    for line in text.split(LINE_SEPARATOR):
        entry = decode_entry(line)
        if entry is not None:
            entries.append(entry)

    logger.debug("Decoded %d entries", len(entries))
    return entries


# ============ Repository summaries ============

def encode_repo_summary(summary: RepoSummary) -> str:
    """Encode a repository summary line; only the description may contain ``|``."""
    return FIELD_SEPARATOR.join(
        (
            _check_field(summary.name, "name"),
            _check_field(summary.description, "description", allow_separator=True),
            _check_field(summary.url, "url"),
            _check_field(summary.language, "language"),
            str(summary.stars),
            str(summary.forks),
            "true" if summary.is_private else "false",
        )
    )


def encode_repo_summaries(summaries: Iterable[RepoSummary]) -> str:
    return "".join(encode_repo_summary(summary) + LINE_SEPARATOR for summary in summaries)


def _parse_count(raw: str, field: str, name: str) -> int:
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s %r for repository %s, using 0", field, raw, name)
        return 0


def decode_repo_summary(line: str) -> RepoSummary | None:
    """Decode one repository line, returning ``None`` for blank or malformed lines.

    The name is the first field and, for complete lines, the last five fields
    are url, language, stars, forks and isPrivate; everything in between is
    the description, separators included.
    """
    if not line.strip():
        return None

    raw = line.split(FIELD_SEPARATOR)
    if len(raw) < SUMMARY_MIN_FIELDS:
        logger.debug("Skipping repository line with %d fields: %r", len(raw), line)
        return None

    name = raw[0].strip()
    if len(raw) >= SUMMARY_FIELDS:
        description = FIELD_SEPARATOR.join(raw[1:-SUMMARY_TAIL_FIELDS]).strip()
        url, language, stars, forks, is_private = (part.strip() for part in raw[-SUMMARY_TAIL_FIELDS:])
    else:
        # Short line: forks and isPrivate may be missing
        description, url, language, stars = (part.strip() for part in raw[1:5])
        forks = raw[5].strip() if len(raw) > 5 else "0"
        is_private = "false"

    return RepoSummary(
        name=name,
        description=description,
        url=url,
        language=language,
        stars=_parse_count(stars, "stars", name),
        forks=_parse_count(forks, "forks", name),
        is_private=is_private.lower() == "true",
    )


def decode_repo_summaries(text: str | None) -> list[RepoSummary]:
    """Decode a repository listing response."""
    summaries: list[RepoSummary] = []
    if not text:
        return summaries

    for line in text.split(LINE_SEPARATOR):
        summary = decode_repo_summary(line)
        if summary is not None:
            summaries.append(summary)

    logger.debug("Decoded %d repository summaries", len(summaries))
    return summaries
