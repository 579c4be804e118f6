import math
from typing import Dict, List, Optional

from tinigom.models.finance import Person, TransactionType


def filter_transactions(
    transactions: List,
    type: Optional[TransactionType] = None,
    month: Optional[int] = None,
    user: Optional[Person] = None,
) -> List:
    """History filters of the dashboard. month is 1-12 and matches any year."""
    filtered = transactions
    if type is not None:
        filtered = [t for t in filtered if t.type == type]
    if month is not None:
        filtered = [t for t in filtered if t.date.month == month]
    if user is not None:
        filtered = [t for t in filtered if t.user == user]
    return filtered


def paginate(transactions: List, page: int, per_page: int) -> Dict:
    """Newest first, `per_page` rows per page. Pages start at 1."""
    ordered = sorted(transactions, key=lambda t: t.date, reverse=True)
    start = (page - 1) * per_page
    return {
        "transactions": ordered[start:start + per_page],
        "page": page,
        "total_pages": math.ceil(len(ordered) / per_page),
        "total": len(ordered),
    }
