"""
Positional placeholder scanning for ``$1 .. $n`` statements.

The scanner walks the statement once, skipping quoted strings, quoted
identifiers, dollar-quoted bodies and comments, so a ``$1`` inside a literal
is never taken for a bind parameter.

Quoting follows PostgreSQL with ``standard_conforming_strings`` on: a
backslash escapes only inside ``E'...'`` literals. Engines that treat
backslash as an escape in every string (MySQL's default) pass
``backslash_escapes=True``.
"""

from typing import NamedTuple

from .errors import QueryParameterError


class Placeholder(NamedTuple):
    index: int  # 1-based bind position
    start: int
    end: int  # exclusive


def _is_word_char(c: str) -> bool:
    return c.isalnum() or c == "_"


def _skip_quoted(sql: str, i: int, quote: str, backslash_escapes: bool) -> int:
    """Return the position just past the literal opened at ``sql[i]``."""
    length = len(sql)
    i += 1
    while i < length:
        c = sql[i]
        if c == quote:
            if i + 1 < length and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        if c == "\\" and backslash_escapes and i + 1 < length:
            i += 2
            continue
        i += 1
    return length


def _is_escape_string(sql: str, i: int) -> bool:
    """True when the quote at ``sql[i]`` opens an ``E'...'`` literal."""
    if i == 0 or sql[i - 1] not in "eE":
        return False
    return i < 2 or not _is_word_char(sql[i - 2])


def _dollar_tag(sql: str, i: int) -> str | None:
    """Return the ``$tag$`` opening at ``sql[i]``, or None if it is not one."""
    j = i + 1
    length = len(sql)
    while j < length and _is_word_char(sql[j]):
        j += 1
    if j < length and sql[j] == "$":
        tag = sql[i : j + 1]
        # $1$ is not a valid tag; tags cannot start with a digit
        if len(tag) > 2 and tag[1].isdigit():
            return None
        return tag
    return None


def scan_placeholders(sql: str, *, backslash_escapes: bool = False) -> list[Placeholder]:
    """Return every ``$n`` placeholder outside literals and comments, in order."""
    found: list[Placeholder] = []
    i = 0
    length = len(sql)

    while i < length:
        ch = sql[i]

        if ch == "'":
            escapes = backslash_escapes or _is_escape_string(sql, i)
            i = _skip_quoted(sql, i, ch, escapes)
            continue

        if ch == '"':
            i = _skip_quoted(sql, i, ch, backslash_escapes)
            continue

        if ch == "-" and i + 1 < length and sql[i + 1] == "-":
            end = sql.find("\n", i)
            i = length if end == -1 else end + 1
            continue

        if ch == "/" and i + 1 < length and sql[i + 1] == "*":
            end = sql.find("*/", i + 2)
            i = length if end == -1 else end + 2
            continue

        if ch == "$":
            j = i + 1
            while j < length and sql[j].isdigit():
                j += 1
            if j > i + 1:
                # identifiers like col$1 are not placeholders
                prev = sql[i - 1] if i > 0 else ""
                if not _is_word_char(prev):
                    found.append(Placeholder(int(sql[i + 1 : j]), i, j))
                i = j
                continue
            tag = _dollar_tag(sql, i)
            if tag is not None:
                end = sql.find(tag, i + len(tag))
                i = length if end == -1 else end + len(tag)
                continue

        i += 1

    return found


def placeholder_count(sql: str, *, backslash_escapes: bool = False) -> int:
    """Number of distinct bind positions referenced by the statement."""
    return len({p.index for p in scan_placeholders(sql, backslash_escapes=backslash_escapes)})


def to_format_paramstyle(
    sql: str, params: tuple, *, backslash_escapes: bool = False
) -> tuple[str, tuple]:
    """
    Rewrite ``$n`` placeholders to DB-API ``format`` style (``%s``).

    Bind values are reordered (and repeated) to follow placeholder occurrence,
    and literal ``%`` characters are doubled so the driver does not read them
    as conversion specifiers. Raises QueryParameterError when, under the
    engine's quoting rules, placeholders and bind values do not match.
    """
    placeholders = scan_placeholders(sql, backslash_escapes=backslash_escapes)
    indexes = {p.index for p in placeholders}
    if indexes != set(range(1, len(params) + 1)):
        raise QueryParameterError(
            f"Statement references placeholder(s) {sorted(indexes)} under this "
            f"engine's quoting rules but {len(params)} bind value(s) were supplied"
        )
    if not placeholders:
        return sql, ()

    parts: list[str] = []
    ordered: list = []
    pos = 0
    for p in placeholders:
        parts.append(sql[pos : p.start].replace("%", "%%"))
        parts.append("%s")
        ordered.append(params[p.index - 1])
        pos = p.end
    parts.append(sql[pos:].replace("%", "%%"))
    return "".join(parts), tuple(ordered)
