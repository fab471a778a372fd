import math


def paginate(items, page, per_page):
    if per_page < 1:
        raise ValueError("per_page must be at least 1")

    total = len(items)
    total_pages = math.ceil(total / per_page)
    # An empty result still renders as page 1.
    page = max(1, min(page, total_pages))
    start = (page - 1) * per_page

    return {
        "items": items[start : start + per_page],
        "page": page,
        "per_page": per_page,
        "total": total,
        "total_pages": total_pages,
        "pages": list(range(1, total_pages + 1)) if total_pages > 1 else [],
        "has_prev": page > 1,
        "has_next": page < total_pages,
    }

