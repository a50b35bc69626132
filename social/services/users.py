"""Profile lookups by handle."""

from functools import reduce
from operator import or_

from django.db.models import Q

from ..models import User


def find_by_handle(handle):
    if not handle:
        return None
    return User.objects.filter(username__iexact=handle.strip()).first()


def find_many_by_handles(handles):
    """Resolve handles case-insensitively; returns (found_users, missing_handles)."""
    if not handles:
        return [], []
    wanted = {h.lower(): h for h in handles}
    query = reduce(or_, (Q(username__iexact=h) for h in wanted))
    found = {user.username.lower(): user for user in User.objects.filter(query)}
    missing = [original for lowered, original in wanted.items() if lowered not in found]
    return [found[h] for h in wanted if h in found], missing
