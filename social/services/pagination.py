"""
Cursor pagination shared by every list endpoint.

A cursor is the id of the last item the client has already seen. The next
page starts strictly after that item in (time desc, id desc) order, so the
cursor item itself is never repeated. Pages are computed as

    fetch(limit + 1) -> has_more = len(rows) > limit -> rows[:limit]

and `next_cursor` is the id of the last returned row when more rows exist.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from django.db.models import Q

from ..errors import ApiError, ErrorCode


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[int] = None
    total: Optional[int] = None


class CursorPaginator:
    """
    Args:
        default_limit: Page size when the client sends none
        max_limit: Upper bound for client supplied limits
    """

    def __init__(self, default_limit=20, max_limit=100):
        self.default_limit = default_limit
        self.max_limit = max_limit

    def parse_limit(self, raw) -> int:
        if raw in (None, ""):
            return self.default_limit
        try:
            limit = int(raw)
        except (TypeError, ValueError):
            raise ApiError(ErrorCode.VALIDATION_ERROR, "limit must be an integer", details={"limit": raw})
        return max(1, min(limit, self.max_limit))

    @staticmethod
    def parse_cursor(raw) -> Optional[int]:
        if raw in (None, ""):
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ApiError(ErrorCode.VALIDATION_ERROR, "cursor must be an item id", details={"cursor": raw})

    def paginate(self, queryset, cursor=None, limit=None, time_field='created_at', with_total=False,
                 anchor_queryset=None) -> Page:
        """
        Slice `queryset` into one page, newest first.

        Args:
            queryset: Unordered queryset of the items to list
            cursor: Raw cursor value (id of the last item already seen)
            limit: Raw limit value
            time_field: Column that defines recency
            with_total: Count all matching rows on the first page
            anchor_queryset: Where the cursor item is looked up (defaults to
                `queryset`). Pass the unfiltered rows when items can drop out
                of the list between fetches, e.g. soft-deleted messages.

        Raises:
            ApiError(VALIDATION_ERROR): malformed limit/cursor, or a cursor
                that does not belong to this list

        The position is read from `time_field` at fetch time. If that column
        changes between fetches (a conversation's `updated_at` moves when a
        message arrives), the cursor item moves with it and the next page can
        repeat or skip rows. Clients reload from the first page in that case.
        """
        limit = self.parse_limit(limit)
        cursor = self.parse_cursor(cursor)

        total = None
        if with_total and cursor is None:
            total = queryset.count()

        ordered = queryset.order_by(f'-{time_field}', '-pk')

        if cursor is not None:
            anchors = queryset if anchor_queryset is None else anchor_queryset
            anchor = anchors.filter(pk=cursor).values(time_field, 'pk').first()
            if anchor is None:
                raise ApiError(ErrorCode.VALIDATION_ERROR, "Unknown cursor", details={"cursor": cursor})
            anchor_time = anchor[time_field]
            ordered = ordered.filter(
                Q(**{f'{time_field}__lt': anchor_time}) |
                Q(**{time_field: anchor_time, 'pk__lt': anchor['pk']})
            )

        rows = list(ordered[:limit + 1])
        has_more = len(rows) > limit
        items = rows[:limit]
        next_cursor = items[-1].pk if has_more and items else None

        return Page(items=items, has_more=has_more, next_cursor=next_cursor, total=total)
