"""Chain override links.

A chain may override at most one other chain, and be overridden by at
most one. Both sides always agree, and each side carries a technical
label naming its role.
"""

from __future__ import annotations

from chaincatalog.exceptions import ValidationError
from chaincatalog.graph.model import Chain, ChainLabel
from chaincatalog.persistence.repositories import ChainRepository

OVERRIDES_LABEL_NAME = "Overrides"
OVERRIDDEN_LABEL_NAME = "Overridden"


def _drop_label(chain: Chain, name: str) -> None:
    chain.labels[:] = [label for label in chain.labels if label.name != name]


def _ensure_label(chain: Chain, name: str) -> None:
    if not any(label.name == name and label.technical for label in chain.labels):
        chain.labels.append(ChainLabel(name=name, technical=True, chain_id=chain.id))


def unlink_overrides(chains: ChainRepository, chain: Chain) -> list[Chain]:
    """Break both override links of ``chain``, on both sides.

    Returns:
        The counterpart chains that were changed and saved.
    """
    changed: list[Chain] = []

    if chain.overridden_by_chain_id is not None:
        overriding = chains.find_by_id(chain.overridden_by_chain_id)
        if overriding is not None:
            _drop_label(overriding, OVERRIDES_LABEL_NAME)
            overriding.overrides_chain_id = None
            chains.save(overriding)
            changed.append(overriding)
        chain.overridden_by_chain_id = None
        _drop_label(chain, OVERRIDDEN_LABEL_NAME)

    if chain.overrides_chain_id is not None:
        overridden = chains.find_by_id(chain.overrides_chain_id)
        if overridden is not None:
            _drop_label(overridden, OVERRIDDEN_LABEL_NAME)
            overridden.overridden_by_chain_id = None
            chains.save(overridden)
            changed.append(overridden)
        chain.overrides_chain_id = None
        _drop_label(chain, OVERRIDES_LABEL_NAME)

    return changed


def link_override(chains: ChainRepository, overriding: Chain, overridden: Chain) -> None:
    """Make ``overriding`` override ``overridden``.

    Existing links of either chain in the same role are broken first.

    Raises:
        ValidationError: If both are the same chain.
    """
    if overriding is overridden or overriding.id == overridden.id:
        raise ValidationError("Chain can't override itself")

    if overriding.overrides_chain_id not in (None, overridden.id):
        previous = chains.find_by_id(overriding.overrides_chain_id)
        if previous is not None:
            _drop_label(previous, OVERRIDDEN_LABEL_NAME)
            previous.overridden_by_chain_id = None
            chains.save(previous)
    if overridden.overridden_by_chain_id not in (None, overriding.id):
        previous = chains.find_by_id(overridden.overridden_by_chain_id)
        if previous is not None:
            _drop_label(previous, OVERRIDES_LABEL_NAME)
            previous.overrides_chain_id = None
            chains.save(previous)

    overriding.overrides_chain_id = overridden.id
    overridden.overridden_by_chain_id = overriding.id
    _ensure_label(overriding, OVERRIDES_LABEL_NAME)
    _ensure_label(overridden, OVERRIDDEN_LABEL_NAME)
    chains.save(overriding)
    chains.save(overridden)


__all__ = [
    "OVERRIDDEN_LABEL_NAME",
    "OVERRIDES_LABEL_NAME",
    "link_override",
    "unlink_overrides",
]
