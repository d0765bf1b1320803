"""Business classifier — maps a free-text lead category to a BusinessType.

Case-insensitive substring match against the ordered keyword table from
timing_tables. The first business type with a matching keyword wins, so
"Pizza Bar & Car Wash" is a restaurant. Anything unmatched is general.
"""

from typing import Mapping

from outreach.constants import BusinessType
from outreach.timing_tables import get_timing_tables


def classify_business_type(
    category: str | None,
    keywords: Mapping[BusinessType, tuple[str, ...]] | None = None,
) -> BusinessType:
    """Classify a category string. Never raises; absent or empty input is general."""
    if not category:
        return BusinessType.GENERAL
    text = category.lower()
    table = keywords if keywords is not None else get_timing_tables().keywords
    for btype, words in table.items():
        for word in words:
            if word and word in text:
                return BusinessType(btype)
    return BusinessType.GENERAL
