from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from .rollup import KeyFn, by_category, by_merchant
from .taxonomy import DEFAULT_TAXONOMY, CategoryTaxonomy, ParentCategory
from .types import CategoryNode, CategoryTree, NormalizedTransaction

OTHER_LABEL = "Other"


def _share(amount: float, total: float) -> float:
    return amount / total * 100 if total > 0 else 0.0


def _total(entries: Iterable[NormalizedTransaction]) -> float:
    return sum(entry.net for entry in entries)


def _group(entries: Iterable[NormalizedTransaction], key: KeyFn) -> Dict[str, List[NormalizedTransaction]]:
    groups: Dict[str, List[NormalizedTransaction]] = {}
    for entry in entries:
        groups.setdefault(key(entry), []).append(entry)
    return groups


def _sorted_nodes(nodes: Iterable[CategoryNode]) -> List[CategoryNode]:
    return sorted(nodes, key=lambda node: (-node.amount, node.name))


def _build_level(
    entries: Sequence[NormalizedTransaction],
    keys: Sequence[KeyFn],
    cutoff_percent: float,
) -> Tuple[CategoryNode, ...]:
    """
    Build one tree level and recurse into the remaining keys.

    Nodes whose share of this level's total falls below ``cutoff_percent`` are
    folded into a single "Other" node that sorts last and has no children.
    """
    if not keys or not entries:
        return ()

    key, rest = keys[0], keys[1:]
    total = _total(entries)
    nodes: List[CategoryNode] = []
    other_amount = 0.0
    other_count = 0
    folded = False

    for name, members in _group(entries, key).items():
        amount = _total(members)
        share = _share(amount, total)
        if total > 0 and share < cutoff_percent:
            other_amount += amount
            other_count += len(members)
            folded = True
            continue
        nodes.append(CategoryNode(
            name=name,
            amount=amount,
            percentage=share,
            transaction_count=len(members),
            children=_build_level(members, rest, cutoff_percent),
        ))

    nodes = _sorted_nodes(nodes)
    if folded:
        nodes.append(CategoryNode(
            name=OTHER_LABEL,
            amount=other_amount,
            percentage=_share(other_amount, total),
            transaction_count=other_count,
            is_other=True,
        ))
    return tuple(nodes)


def build_category_tree(
    entries: Iterable[NormalizedTransaction],
    taxonomy: CategoryTaxonomy = DEFAULT_TAXONOMY,
    cutoff_percent: float = 3.0,
    include_merchants: bool = True,
) -> CategoryTree:
    """Roll normalized spend up into Parent -> Subcategory -> Merchant.

    Only spend entries (gross amount > 0) contribute. The result depends only
    on the inputs: same entries, taxonomy and cutoff give the same tree.
    """
    if cutoff_percent < 0 or cutoff_percent >= 100:
        raise ValueError(f"cutoff_percent must be in [0, 100), got {cutoff_percent}")

    spend = [entry for entry in entries if entry.is_spend]
    if not spend:
        return CategoryTree(total=0.0, nodes=())

    total = _total(spend)
    child_keys: List[KeyFn] = [by_category]
    if include_merchants:
        child_keys.append(by_merchant)

    parents: Dict[ParentCategory, List[NormalizedTransaction]] = {}
    for entry in spend:
        parents.setdefault(taxonomy.parent_for(entry.transaction.category), []).append(entry)

    nodes = []
    for parent, members in parents.items():
        info = taxonomy.info(parent)
        amount = _total(members)
        nodes.append(CategoryNode(
            id=info.id,
            name=info.name,
            color=info.color,
            icon=info.icon,
            amount=amount,
            percentage=_share(amount, total),
            transaction_count=len(members),
            children=_build_level(members, child_keys, cutoff_percent),
        ))

    return CategoryTree(total=total, nodes=tuple(_sorted_nodes(nodes)))
