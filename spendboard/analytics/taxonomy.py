"""
Static category taxonomy.

Leaf categories are free-form strings on transactions; each known leaf maps to
one of a closed set of parent categories. Anything unknown lands in the
fallback parent.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class ParentCategory(str, Enum):
    ESSENTIALS = "essentials"
    LIFESTYLE = "lifestyle"
    HOME_LIVING = "home_living"
    PERSONAL_CARE = "personal_care"
    WORK_EDUCATION = "work_education"
    FINANCIAL_OTHER = "financial_other"


@dataclass(frozen=True)
class ParentInfo:
    id: str
    name: str
    color: str
    icon: str


PARENTS: Mapping[ParentCategory, ParentInfo] = MappingProxyType({
    ParentCategory.ESSENTIALS: ParentInfo("essentials", "Essentials", "#10b981", "home"),
    ParentCategory.LIFESTYLE: ParentInfo("lifestyle", "Lifestyle", "#8b5cf6", "sparkles"),
    ParentCategory.HOME_LIVING: ParentInfo("home_living", "Home & Living", "#f59e0b", "sofa"),
    ParentCategory.PERSONAL_CARE: ParentInfo("personal_care", "Personal Care", "#ec4899", "user"),
    ParentCategory.WORK_EDUCATION: ParentInfo("work_education", "Work & Education", "#3b82f6", "briefcase"),
    ParentCategory.FINANCIAL_OTHER: ParentInfo("financial_other", "Financial & Other", "#6b7280", "wallet"),
})

_LEAVES: Tuple[Tuple[str, ParentCategory], ...] = (
    ("Groceries", ParentCategory.ESSENTIALS),
    ("Housing", ParentCategory.ESSENTIALS),
    ("Utilities", ParentCategory.ESSENTIALS),
    ("Transportation", ParentCategory.ESSENTIALS),
    ("Healthcare", ParentCategory.ESSENTIALS),
    ("Dining Out", ParentCategory.LIFESTYLE),
    ("Fast Food & Takeout", ParentCategory.LIFESTYLE),
    ("Food Delivery", ParentCategory.LIFESTYLE),
    ("Entertainment", ParentCategory.LIFESTYLE),
    ("Hobbies & Recreation", ParentCategory.LIFESTYLE),
    ("Travel & Vacation", ParentCategory.LIFESTYLE),
    ("Home Essentials", ParentCategory.HOME_LIVING),
    ("Furniture & Decor", ParentCategory.HOME_LIVING),
    ("Home Improvement", ParentCategory.HOME_LIVING),
    ("Pet Care", ParentCategory.HOME_LIVING),
    ("Clothing & Shoes", ParentCategory.PERSONAL_CARE),
    ("Beauty & Personal Care", ParentCategory.PERSONAL_CARE),
    ("Gym & Fitness", ParentCategory.PERSONAL_CARE),
    ("Professional Development", ParentCategory.WORK_EDUCATION),
    ("Work Expenses", ParentCategory.WORK_EDUCATION),
    ("Education", ParentCategory.WORK_EDUCATION),
    ("Subscriptions & Memberships", ParentCategory.FINANCIAL_OTHER),
    ("Financial Services", ParentCategory.FINANCIAL_OTHER),
    ("Insurance", ParentCategory.FINANCIAL_OTHER),
    ("Gifts & Donations", ParentCategory.FINANCIAL_OTHER),
    ("Cash & ATM", ParentCategory.FINANCIAL_OTHER),
    ("Fees & Charges", ParentCategory.FINANCIAL_OTHER),
    ("Uncategorized", ParentCategory.FINANCIAL_OTHER),
    # legacy names still found on older transactions
    ("Food & Drinks", ParentCategory.LIFESTYLE),
    ("Shopping", ParentCategory.LIFESTYLE),
    ("Travel", ParentCategory.LIFESTYLE),
    ("Health & Personal Care", ParentCategory.ESSENTIALS),
    ("Automotive", ParentCategory.ESSENTIALS),
    ("Home & Rent", ParentCategory.ESSENTIALS),
    ("Services", ParentCategory.FINANCIAL_OTHER),
    ("Government", ParentCategory.FINANCIAL_OTHER),
)

LEAF_TO_PARENT: Mapping[str, ParentCategory] = MappingProxyType(
    {name.casefold(): parent for name, parent in _LEAVES}
)


class CategoryTaxonomy:
    """Read-only lookup from leaf category to parent category."""

    def __init__(
        self,
        leaves: Mapping[str, ParentCategory] = LEAF_TO_PARENT,
        fallback: ParentCategory = ParentCategory.FINANCIAL_OTHER,
    ) -> None:
        self._leaves = MappingProxyType({k.casefold(): v for k, v in leaves.items()})
        self.fallback = fallback

    def parent_for(self, leaf: Optional[str]) -> ParentCategory:
        if not leaf:
            return self.fallback
        return self._leaves.get(leaf.strip().casefold(), self.fallback)

    def info(self, parent: ParentCategory) -> ParentInfo:
        return PARENTS[parent]

    def is_known(self, leaf: str) -> bool:
        return leaf.strip().casefold() in self._leaves


DEFAULT_TAXONOMY = CategoryTaxonomy()
