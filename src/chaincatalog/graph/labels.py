"""Label reconciliation shared by chains, specification groups and system models.

Technical labels are system-managed and never touched here. User labels
are reconciled by name against a desired list.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from chaincatalog.graph.model import Label

L = TypeVar("L")


def _is_technical(label: Label) -> bool:
    return label.technical


def _name_of(label: Label) -> str:
    return label.name


def reconcile_labels(
    current: list[L],
    desired: Iterable[L],
    *,
    bind: Callable[[L], L] | None = None,
    is_technical: Callable[[L], bool] = _is_technical,
    name_of: Callable[[L], str] = _name_of,
) -> list[L]:
    """Replace the user labels of ``current`` with the ``desired`` ones.

    - a non-technical current label whose name is not desired is removed
    - technical current labels are kept whatever ``desired`` holds
    - a desired label whose name is not among the current non-technical
      labels is added (passed through ``bind`` first, to attach its owner)
    - technical labels in ``desired`` are ignored

    ``current`` is updated in place so owners keep their list object.

    Args:
        current: The persisted labels of the owner.
        desired: Labels requested by the caller.
        bind: Optional hook turning a desired label into an owned one.
        is_technical: Predicate telling system labels apart.
        name_of: Accessor for the label name.

    Returns:
        The labels that were removed.
    """
    wanted = [label for label in desired if not is_technical(label)]
    wanted_names = {name_of(label) for label in wanted}

    removed = [
        label
        for label in current
        if not is_technical(label) and name_of(label) not in wanted_names
    ]
    current[:] = [label for label in current if not any(label is r for r in removed)]

    present = {name_of(label) for label in current if not is_technical(label)}
    for label in wanted:
        name = name_of(label)
        if name in present:
            continue
        current.append(bind(label) if bind is not None else label)
        present.add(name)
    return removed


__all__ = ["reconcile_labels"]
