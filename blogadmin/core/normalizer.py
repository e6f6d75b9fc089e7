"""
Payload Normalizer
==================

Converts raw JSON from the backend into the canonical models in
``blogadmin.core.models``. Each resource kind is described by one declarative
``RecordSchema``: an ordered list of ``FieldSpec`` entries naming the JSON
key, the model attribute, the converter, and whether the field is required.

Policy:
-------
- Unknown keys are ignored.
- A missing optional field takes its default ("" / 0 / None).
- A missing or unconvertible required field fails the whole record with a
  ``NormalizationError``. List normalization drops that record, records a
  ``dropped`` diagnostic and keeps the rest.
- Date-times are parsed with the field's expected encoding first, then the
  other one. When neither works the value becomes "now" and a ``fallback``
  diagnostic is recorded, so the degradation is visible in logs and tests.
"""

import logging
import math
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .config import ISO_DATE_FORMAT, LOCALE_DATETIME_FORMAT
from .errors import NormalizationError, Result
from .models import (
    Article,
    ArticleStatus,
    Comment,
    CommentStatus,
    ResourceKind,
    SiteStats,
    User,
    UserStatus,
)

logger = logging.getLogger(__name__)

LOCALE = "locale"
ISO = "iso"


# ============================================================================
# DIAGNOSTICS
# ============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """One recorded degradation: a substituted value or a dropped record."""
    kind: str
    record_id: Any
    field: Optional[str]
    detail: str
    raw_value: Any = None


class NormalizationDiagnostics:
    """
    Thread-safe collector of normalization degradations.

    Loads for different resource kinds run concurrently and share one
    collector, hence the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._fallbacks: List[Diagnostic] = []
        self._dropped: List[Diagnostic] = []

    def record_fallback(self, kind: str, record_id: Any, field: str, raw_value: Any, detail: str):
        entry = Diagnostic(kind, record_id, field, detail, raw_value)
        with self._lock:
            self._fallbacks.append(entry)
        logger.warning(
            f"Fallback applied to {kind} {record_id} field '{field}': {detail} (raw value: {raw_value!r})"
        )

    def record_dropped(self, kind: str, record_id: Any, error: NormalizationError):
        entry = Diagnostic(kind, record_id, error.field, error.message)
        with self._lock:
            self._dropped.append(entry)
        logger.warning(f"Dropped malformed {kind} record (id={record_id!r}): {error.message}")

    @property
    def fallbacks(self) -> Tuple[Diagnostic, ...]:
        with self._lock:
            return tuple(self._fallbacks)

    @property
    def dropped(self) -> Tuple[Diagnostic, ...]:
        with self._lock:
            return tuple(self._dropped)

    def clear(self):
        with self._lock:
            self._fallbacks.clear()
            self._dropped.clear()


# ============================================================================
# SCALAR COERCION
# ============================================================================

def coerce_int(value: Any) -> Optional[int]:
    """
    Coerce a generic JSON number to ``int``.

    Accepts ints, integral floats and integer-valued strings. Returns None
    for booleans, fractional floats and anything non-numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _parse_locale(text: str) -> datetime:
    return datetime.strptime(text, LOCALE_DATETIME_FORMAT)


def _parse_iso(text: str) -> datetime:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


_DATETIME_PARSERS: Dict[str, Callable[[str], datetime]] = {
    LOCALE: _parse_locale,
    ISO: _parse_iso,
}


def parse_datetime(value: Any, expected: str = LOCALE) -> Optional[datetime]:
    """
    Parse a backend timestamp, trying the expected encoding first.

    Returns None when no encoding matches, or when an aware value falls
    outside the datetime range once converted to naive UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    order = [expected] + [name for name in _DATETIME_PARSERS if name != expected]
    for name in order:
        try:
            return _DATETIME_PARSERS[name](text)
        except (ValueError, OverflowError):
            continue
    return None


def parse_date(value: Any) -> Optional[date]:
    """Parse a calendar date given as ``YYYY-MM-DD`` or as any accepted date-time."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.strptime(text, ISO_DATE_FORMAT).date()
    except ValueError:
        pass
    parsed = parse_datetime(text, expected=ISO)
    return parsed.date() if parsed is not None else None


# ============================================================================
# DECLARATIVE SCHEMA
# ============================================================================

class _FieldContext:
    """What a converter needs to report a failure or a fallback."""

    def __init__(self, kind: str, record_id: Any, key: str, diagnostics: NormalizationDiagnostics):
        self.kind = kind
        self.record_id = record_id
        self.key = key
        self.diagnostics = diagnostics

    def error(self, detail: str) -> NormalizationError:
        return NormalizationError(
            f"{self.kind} field '{self.key}' {detail}", record_kind=self.kind, field=self.key
        )

    def fallback(self, raw_value: Any, default: Any, detail: str) -> Any:
        self.diagnostics.record_fallback(self.kind, self.record_id, self.key, raw_value, detail)
        return default


Converter = Callable[[Any, _FieldContext], Any]


@dataclass(frozen=True)
class FieldSpec:
    """
    Mapping of one JSON key onto one model attribute.

    ``default`` is used when the key is absent or null on an optional field;
    it may be a callable taking the field context (used for "now").
    """
    attr: str
    key: str
    convert: Converter
    required: bool = False
    default: Any = None


@dataclass(frozen=True)
class RecordSchema:
    kind: str
    model: type
    fields: Tuple[FieldSpec, ...]
    finalize: Optional[Callable[[Dict[str, Any], Dict[str, Any]], None]] = None


def _to_id(value: Any, ctx: _FieldContext) -> int:
    number = coerce_int(value)
    if number is None:
        raise ctx.error(f"is not numeric: {value!r}")
    return number


def _to_required_text(value: Any, ctx: _FieldContext) -> str:
    if not isinstance(value, str):
        raise ctx.error(f"is not a string: {value!r}")
    return value


def _to_text(value: Any, ctx: _FieldContext) -> str:
    return value if isinstance(value, str) else str(value)


def _to_ref(value: Any, ctx: _FieldContext) -> int:
    number = coerce_int(value)
    if number is None:
        return ctx.fallback(value, 0, "not numeric, using 0")
    return number


def _to_count(value: Any, ctx: _FieldContext) -> int:
    number = coerce_int(value)
    if number is None or number < 0:
        return ctx.fallback(value, 0, "not a non-negative integer, using 0")
    return number


def _to_bool(value: Any, ctx: _FieldContext) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0"):
        return value.strip().lower() in ("true", "1")
    return ctx.fallback(value, False, "not a boolean, using False")


def _now_fallback(ctx: _FieldContext, raw_value: Any = None, detail: str = "missing, using current time") -> datetime:
    return ctx.fallback(raw_value, datetime.now(), detail)


def _timestamp(expected: str) -> Converter:
    def convert(value: Any, ctx: _FieldContext) -> datetime:
        parsed = parse_datetime(value, expected)
        if parsed is None:
            return _now_fallback(ctx, value, "unparsable date-time, using current time")
        return parsed
    return convert


def _optional_timestamp(expected: str) -> Converter:
    def convert(value: Any, ctx: _FieldContext) -> Optional[datetime]:
        parsed = parse_datetime(value, expected)
        if parsed is None:
            return ctx.fallback(value, None, "unparsable date-time, leaving empty")
        return parsed
    return convert


def _to_date(value: Any, ctx: _FieldContext) -> Optional[date]:
    parsed = parse_date(value)
    if parsed is None:
        return ctx.fallback(value, None, "unparsable date, leaving empty")
    return parsed


def _status(enum_type, default) -> Converter:
    def convert(value: Any, ctx: _FieldContext):
        if isinstance(value, str):
            for member in enum_type:
                if member.value == value.strip().lower():
                    return member
        return ctx.fallback(value, default, f"unknown status, using '{default.value}'")
    return convert


def _derive_has_avatar(raw: Dict[str, Any], values: Dict[str, Any]):
    # The backend computes hasAvatar from avatarUrl; older responses omit it
    if raw.get("hasAvatar") is None:
        values["has_avatar"] = bool(values["avatar_url"])


USER_SCHEMA = RecordSchema(
    kind="user",
    model=User,
    fields=(
        FieldSpec("id", "id", _to_id, required=True),
        FieldSpec("username", "username", _to_required_text, required=True),
        FieldSpec("real_name", "realName", _to_text, default=""),
        FieldSpec("date_of_birth", "dateOfBirth", _to_date),
        FieldSpec("bio", "bio", _to_text, default=""),
        FieldSpec("avatar_url", "avatarUrl", _to_text, default=""),
        FieldSpec("created_at", "createdAt", _timestamp(LOCALE), default=_now_fallback),
        FieldSpec("status", "status", _status(UserStatus, UserStatus.ACTIVE), default=UserStatus.ACTIVE),
        FieldSpec("article_count", "articleCount", _to_count, default=0),
        FieldSpec("comment_count", "commentCount", _to_count, default=0),
        FieldSpec("has_avatar", "hasAvatar", _to_bool, default=False),
    ),
    finalize=_derive_has_avatar,
)

ARTICLE_SCHEMA = RecordSchema(
    kind="article",
    model=Article,
    fields=(
        FieldSpec("id", "id", _to_id, required=True),
        FieldSpec("title", "title", _to_required_text, required=True),
        FieldSpec("content", "content", _to_required_text, required=True),
        FieldSpec("author_username", "authorUsername", _to_text, default=""),
        FieldSpec("author_id", "authorId", _to_ref, default=0),
        FieldSpec("created_at", "createdAt", _timestamp(LOCALE), default=_now_fallback),
        FieldSpec("updated_at", "updatedAt", _optional_timestamp(ISO)),
        FieldSpec("comment_count", "commentCount", _to_count, default=0),
        FieldSpec("like_count", "likeCount", _to_count, default=0),
        FieldSpec("view_count", "viewCount", _to_count, default=0),
        FieldSpec("status", "status", _status(ArticleStatus, ArticleStatus.PUBLISHED),
                  default=ArticleStatus.PUBLISHED),
    ),
)

COMMENT_SCHEMA = RecordSchema(
    kind="comment",
    model=Comment,
    fields=(
        FieldSpec("id", "id", _to_id, required=True),
        FieldSpec("content", "content", _to_required_text, required=True),
        FieldSpec("article_id", "articleId", _to_ref, default=0),
        FieldSpec("article_title", "articleTitle", _to_text, default=""),
        FieldSpec("author_id", "authorId", _to_ref, default=0),
        FieldSpec("author_username", "authorUsername", _to_text, default=""),
        FieldSpec("created_at", "createdAt", _timestamp(LOCALE), default=_now_fallback),
        FieldSpec("status", "status", _status(CommentStatus, CommentStatus.ACTIVE),
                  default=CommentStatus.ACTIVE),
        FieldSpec("like_count", "likeCount", _to_count, default=0),
    ),
)

SCHEMAS: Dict[ResourceKind, RecordSchema] = {
    ResourceKind.USERS: USER_SCHEMA,
    ResourceKind.ARTICLES: ARTICLE_SCHEMA,
    ResourceKind.COMMENTS: COMMENT_SCHEMA,
}


# ============================================================================
# NORMALIZATION ENTRY POINTS
# ============================================================================

def normalize_record(
    schema: RecordSchema,
    raw: Any,
    diagnostics: Optional[NormalizationDiagnostics] = None
) -> Result:
    """
    Normalize one raw record against a schema.

    Returns:
        Result carrying the model instance, or a ``NormalizationError``
    """
    if diagnostics is None:
        diagnostics = NormalizationDiagnostics()

    if not isinstance(raw, dict):
        return Result.failure(NormalizationError(
            f"{schema.kind} record is not an object: {type(raw).__name__}", record_kind=schema.kind
        ))

    record_id = raw.get("id")
    values: Dict[str, Any] = {}
    try:
        for spec in schema.fields:
            ctx = _FieldContext(schema.kind, record_id, spec.key, diagnostics)
            value = raw.get(spec.key)
            if value is None:
                if spec.required:
                    raise ctx.error("is missing")
                values[spec.attr] = spec.default(ctx) if callable(spec.default) else spec.default
            else:
                values[spec.attr] = spec.convert(value, ctx)
    except NormalizationError as e:
        return Result.failure(e)

    if schema.finalize is not None:
        schema.finalize(raw, values)
    return Result.success(schema.model(**values))


def normalize_user(raw: Any, diagnostics: Optional[NormalizationDiagnostics] = None) -> Result:
    return normalize_record(USER_SCHEMA, raw, diagnostics)


def normalize_article(raw: Any, diagnostics: Optional[NormalizationDiagnostics] = None) -> Result:
    return normalize_record(ARTICLE_SCHEMA, raw, diagnostics)


def normalize_comment(raw: Any, diagnostics: Optional[NormalizationDiagnostics] = None) -> Result:
    return normalize_record(COMMENT_SCHEMA, raw, diagnostics)


def normalize_list(
    kind: ResourceKind,
    items: Iterable[Any],
    diagnostics: Optional[NormalizationDiagnostics] = None
) -> List[Any]:
    """
    Normalize a list payload, dropping records that fail.

    One malformed record never blanks the whole list: it is logged, counted
    in ``diagnostics.dropped`` and skipped.
    """
    if diagnostics is None:
        diagnostics = NormalizationDiagnostics()
    schema = SCHEMAS[kind]

    records = []
    for raw in items:
        result = normalize_record(schema, raw, diagnostics)
        if result.ok:
            records.append(result.value)
        else:
            record_id = raw.get("id") if isinstance(raw, dict) else None
            diagnostics.record_dropped(schema.kind, record_id, result.error)

    logger.debug(f"Normalized {len(records)} {kind.value} record(s)")
    return records


def _stats_value(section: Any, key: str, path: str) -> int:
    if not isinstance(section, dict) or section.get(key) is None:
        return 0
    number = coerce_int(section[key])
    if number is None or number < 0:
        raise NormalizationError(
            f"stats field '{path}' is not a non-negative integer: {section[key]!r}",
            record_kind="stats", field=path
        )
    return number


def normalize_stats(raw: Any, diagnostics: Optional[NormalizationDiagnostics] = None) -> Result:
    """
    Normalize ``{users:{total,active,banned}, articles:{total}, comments:{total}}``.

    Missing sections count as zero; a non-numeric counter fails the response.
    Extra sections (likes, views, ...) are ignored.
    """
    if not isinstance(raw, dict):
        return Result.failure(NormalizationError("stats payload is not an object", record_kind="stats"))

    users = raw.get("users")
    articles = raw.get("articles")
    comments = raw.get("comments")
    try:
        stats = SiteStats(
            total_users=_stats_value(users, "total", "users.total"),
            active_users=_stats_value(users, "active", "users.active"),
            banned_users=_stats_value(users, "banned", "users.banned"),
            total_articles=_stats_value(articles, "total", "articles.total"),
            total_comments=_stats_value(comments, "total", "comments.total"),
        )
    except NormalizationError as e:
        return Result.failure(e)
    return Result.success(stats)
