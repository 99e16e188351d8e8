"""Listing helpers for consultants and blog posts."""
import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

from counsel_booking.models import Blog, Consultant

T = TypeVar("T")

ALL_SPECIALTIES = "all"


def filter_consultants(
    consultants: Sequence[Consultant],
    query: str = "",
    specialty: str = ALL_SPECIALTIES,
) -> List[Consultant]:
    """
    Search consultants by free text and specialty.

    Args:
        consultants: Directory to search
        query: Case-insensitive substring of name, field of study or a specialty
        specialty: Exact (case-insensitive) field of study or specialty;
                   "all" disables this filter
    """
    results = list(consultants)

    if query:
        needle = query.lower()
        results = [
            c for c in results
            if needle in c.name.lower()
            or needle in c.field_of_study.lower()
            or any(needle in s.lower() for s in c.specialties)
        ]

    if specialty and specialty.lower() != ALL_SPECIALTIES:
        wanted = specialty.lower()
        results = [
            c for c in results
            if c.field_of_study.lower() == wanted
            or any(s.lower() == wanted for s in c.specialties)
        ]

    return results


def all_specialties(consultants: Sequence[Consultant]) -> List[str]:
    """"all" followed by every distinct specialty, first-seen order."""
    seen = [ALL_SPECIALTIES]
    for consultant in consultants:
        for specialty in consultant.specialties:
            if specialty not in seen:
                seen.append(specialty)
    return seen


def search_blogs(blogs: Sequence[Blog], term: str = "") -> List[Blog]:
    """Blogs whose title, author name or category contains `term`."""
    needle = term.lower()
    return [
        blog for blog in blogs
        if needle in blog.title.lower()
        or needle in blog.author.name.lower()
        or needle in blog.category.lower()
    ]


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    page: int
    total_pages: int
    total_items: int


def paginate(items: Sequence[T], page: int = 1, per_page: int = 6) -> Page[T]:
    """Slice `items` into 1-based pages; out-of-range pages are clamped."""
    if per_page <= 0:
        raise ValueError("per_page must be positive")

    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        total_pages=total_pages,
        total_items=len(items),
    )
