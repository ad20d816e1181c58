from flask import current_app


def page_args(args):
    """Read ``page``/``limit`` query args, capping the page size."""
    page = args.get("page", 1, type=int) or 1
    limit = args.get("limit", current_app.config["DEFAULT_PAGE_SIZE"], type=int) or 1
    return max(page, 1), min(max(limit, 1), current_app.config["MAX_PAGE_SIZE"])


def paginate_query(query, page, limit):
    items = query.offset((page - 1) * limit).limit(limit).all()
    total = query.order_by(None).count()
    total_pages = (total + limit - 1) // limit
    return items, {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_next": page < total_pages,
    }
