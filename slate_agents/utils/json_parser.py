"""Robust JSON parser for language-model output.

Model text is not guaranteed to be strict JSON: it may be wrapped in prose,
fenced in a markdown code block, or carry small syntax slips (trailing
commas, single quotes, bare keys, comments). `JsonParser.parse` runs a
fixed cascade of strategies, cheapest and most precise first:

1. direct parse of the trimmed text
2. contents of a fenced code block
3. longest balanced ``{...}`` / ``[...]`` span that parses on its own
4. syntactic repair of the outermost bracketed substring
5. aggressive regex salvage of an object or array-of-objects shape

A strategy that raises, or yields a primitive where a container was
expected, counts as a miss and the cascade continues. When every strategy
misses the result is ``None``; the parser never raises.
"""

import json
import re
from typing import Any, Callable

from pydantic import BaseModel

from slate_obs.logging import get_logger
from slate_obs.metrics import json_parse_total

logger = get_logger(__name__)

_MISSING = object()

_CODE_BLOCK_PATTERNS = (
    re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE),
    re.compile(r"```[\w-]*\s*([\s\S]*?)\s*```"),
)

_ARRAY_OF_OBJECTS = re.compile(r"\[\s*\{[\s\S]*\}\s*\]")
_OBJECT_SHAPE = re.compile(r"\{\s*[\"'\w][\s\S]*:[\s\S]*\}")

_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$-]*)(\s*:)")
_ADJACENT_OBJECTS = re.compile(r"}\s*{")
_ADJACENT_ARRAYS = re.compile(r"]\s*\[")

# Characters that make a single quote look like a string delimiter
_DELIMITER_BEFORE = set(":[,{")
_DELIMITER_AFTER = set(":,]}")


class ParseOutcome(BaseModel):
    """Result of parse_with_validation."""

    success: bool
    data: Any = None
    error: str | None = None


class JsonParser:
    """Extract a single JSON value from arbitrary model text."""

    @classmethod
    def parse(cls, text: Any, expect_container: bool = False) -> Any:
        """Extract and parse JSON from a model response.

        Args:
            text: Raw model output
            expect_container: Treat a bare primitive (number, string, bool)
                as a miss, so only an object or array is accepted

        Returns:
            Parsed value, or None if nothing could be recovered
        """
        if not text or not isinstance(text, str):
            return None

        cleaned = text.strip()

        strategies: list[tuple[str, Callable[[str], Any]]] = [
            ("direct", lambda t: cls._direct(t, expect_container)),
            ("code_block", lambda t: cls._code_block(t, expect_container)),
            ("balanced", cls._balanced),
            ("repair", cls._repair),
            ("aggressive", cls._aggressive),
        ]

        for name, strategy in strategies:
            try:
                value = strategy(cleaned)
            except (ValueError, TypeError, RecursionError):
                value = _MISSING
            if value is not _MISSING:
                json_parse_total.labels(strategy=name).inc()
                if name not in ("direct", "code_block"):
                    logger.debug("json_recovered", strategy=name, length=len(cleaned))
                return value

        json_parse_total.labels(strategy="failed").inc()
        logger.debug("json_unrecoverable", preview=cleaned[:120])
        return None

    @classmethod
    def parse_with_validation(
        cls,
        text: Any,
        validator: Callable[[Any], bool] | None = None,
    ) -> ParseOutcome:
        """Parse and optionally check the shape of the result."""
        result = cls.parse(text)

        if result is None:
            return ParseOutcome(success=False, error="Failed to extract valid JSON from response")

        if validator is not None and not validator(result):
            return ParseOutcome(success=False, error="JSON structure does not match expected format")

        return ParseOutcome(success=True, data=result)

    # ------------------------------------------------------------------------
    # STRATEGIES
    # ------------------------------------------------------------------------

    @staticmethod
    def _loads(text: str) -> Any:
        try:
            return json.loads(text)
        except (json.JSONDecodeError, ValueError):
            return _MISSING

    @classmethod
    def _loads_container(cls, text: str) -> Any:
        value = cls._loads(text)
        if isinstance(value, (dict, list)):
            return value
        return _MISSING

    @classmethod
    def _direct(cls, text: str, expect_container: bool) -> Any:
        if expect_container:
            return cls._loads_container(text)
        return cls._loads(text)

    @classmethod
    def _code_block(cls, text: str, expect_container: bool) -> Any:
        for pattern in _CODE_BLOCK_PATTERNS:
            for match in pattern.finditer(text):
                body = match.group(1).strip()
                if not body:
                    continue
                value = cls._direct(body, expect_container)
                if value is not _MISSING:
                    return value
        return _MISSING

    @classmethod
    def _balanced(cls, text: str) -> Any:
        best: Any = _MISSING
        best_length = 0

        for open_char, close_char in (("{", "}"), ("[", "]")):
            for span in cls._balanced_spans(text, open_char, close_char):
                if len(span) <= best_length:
                    continue
                value = cls._loads_container(span)
                if value is not _MISSING:
                    best = value
                    best_length = len(span)

        return best

    @staticmethod
    def _balanced_spans(text: str, open_char: str, close_char: str) -> list[str]:
        """Every top-level balanced span, ignoring brackets inside strings."""
        spans = []
        depth = 0
        start = -1
        in_string = False
        escape_next = False

        for i, char in enumerate(text):
            if escape_next:
                escape_next = False
                continue
            if char == "\\" and in_string:
                escape_next = True
                continue
            if char == '"':
                in_string = not in_string
                continue
            if in_string:
                continue

            if char == open_char:
                if depth == 0:
                    start = i
                depth += 1
            elif char == close_char and depth > 0:
                depth -= 1
                if depth == 0 and start != -1:
                    spans.append(text[start : i + 1])
                    start = -1

        return spans

    @classmethod
    def _repair(cls, text: str) -> Any:
        candidate = text
        starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
        end = max(text.rfind("}"), text.rfind("]"))
        if starts and end > min(starts):
            candidate = text[min(starts) : end + 1]

        passes: list[Callable[[str], str]] = [
            cls._strip_comments,
            cls._fix_quotes,
            lambda t: cls._outside_strings(t, lambda s: _UNQUOTED_KEY.sub(r'\1"\2"\3', s)),
            lambda t: cls._outside_strings(t, lambda s: _TRAILING_COMMA.sub(r"\1", s)),
            lambda t: cls._outside_strings(t, cls._insert_missing_commas),
            cls._collapse_whitespace,
        ]

        repaired = candidate
        for repair in passes:
            repaired = repair(repaired)
            value = cls._loads_container(repaired)
            if value is not _MISSING:
                return value

        return _MISSING

    @classmethod
    def _aggressive(cls, text: str) -> Any:
        for pattern in (_ARRAY_OF_OBJECTS, _OBJECT_SHAPE):
            match = pattern.search(text)
            if match:
                value = cls._repair(match.group(0))
                if value is not _MISSING:
                    return value
        return _MISSING

    # ------------------------------------------------------------------------
    # REPAIR PASSES
    # ------------------------------------------------------------------------

    @staticmethod
    def _strip_comments(text: str) -> str:
        """Remove // and /* */ comments that sit outside string literals."""
        out = []
        i = 0
        n = len(text)
        in_string = False

        while i < n:
            char = text[i]
            if in_string:
                out.append(char)
                if char == "\\" and i + 1 < n:
                    out.append(text[i + 1])
                    i += 2
                    continue
                if char == '"':
                    in_string = False
                i += 1
                continue

            if char == '"':
                in_string = True
                out.append(char)
                i += 1
            elif text.startswith("//", i):
                newline = text.find("\n", i)
                i = n if newline == -1 else newline
            elif text.startswith("/*", i):
                close = text.find("*/", i + 2)
                i = n if close == -1 else close + 2
            else:
                out.append(char)
                i += 1

        return "".join(out)

    @staticmethod
    def _fix_quotes(text: str) -> str:
        """Turn single-quoted strings into double-quoted ones.

        A single quote next to a delimiter (``:``, ``,``, brackets,
        whitespace) opens or closes a string; one wedged between letters is
        an apostrophe and is kept.
        """
        out = []
        in_double = False
        in_single = False

        for i, char in enumerate(text):
            prev_char = text[i - 1] if i > 0 else ""
            next_char = text[i + 1] if i + 1 < len(text) else ""

            if char == '"' and prev_char != "\\":
                if in_single:
                    out.append('\\"')
                    continue
                in_double = not in_double
                out.append(char)
            elif char == "'" and not in_double:
                is_delimiter = (
                    prev_char in _DELIMITER_BEFORE
                    or next_char in _DELIMITER_AFTER
                    or prev_char.isspace()
                    or prev_char == ""
                    or next_char == ""
                )
                if is_delimiter:
                    out.append('"')
                    in_single = not in_single
                else:
                    out.append(char)
            else:
                out.append(char)

        return "".join(out)

    @staticmethod
    def _insert_missing_commas(segment: str) -> str:
        segment = _ADJACENT_OBJECTS.sub("},{", segment)
        return _ADJACENT_ARRAYS.sub("],[", segment)

    @staticmethod
    def _collapse_whitespace(text: str) -> str:
        text = re.sub(r"[\t\r]+", " ", text)
        text = re.sub(r"\n\s*", " ", text)
        return re.sub(r"\s{2,}", " ", text)

    @staticmethod
    def _outside_strings(text: str, transform: Callable[[str], str]) -> str:
        """Apply transform to the parts of text that are not string literals."""
        parts = []
        buffer = []
        in_string = False
        escape_next = False

        for char in text:
            if in_string:
                buffer.append(char)
                if escape_next:
                    escape_next = False
                elif char == "\\":
                    escape_next = True
                elif char == '"':
                    parts.append("".join(buffer))
                    buffer = []
                    in_string = False
            elif char == '"':
                parts.append(transform("".join(buffer)))
                buffer = [char]
                in_string = True
            else:
                buffer.append(char)

        tail = "".join(buffer)
        parts.append(tail if in_string else transform(tail))
        return "".join(parts)

    # ------------------------------------------------------------------------
    # HELPERS
    # ------------------------------------------------------------------------

    @staticmethod
    def is_array(value: Any) -> bool:
        return isinstance(value, list)

    @staticmethod
    def is_object(value: Any) -> bool:
        return isinstance(value, dict)

    @classmethod
    def get(cls, obj: Any, path: str, default: Any = None) -> Any:
        """Safely read a dotted path ("a.b.c") from nested objects."""
        current = obj
        for key in path.split("."):
            if not cls.is_object(current) or key not in current:
                return default
            current = current[key]
        return current
