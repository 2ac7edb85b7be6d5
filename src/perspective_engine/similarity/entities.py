"""Symbolic similarity over named-entity sets."""

from perspective_engine.data import ExtractedEntities


def _normalized(entities: ExtractedEntities) -> set[str]:
    return {e.lower() for e in entities.flatten()}


def entity_overlap(a: ExtractedEntities, b: ExtractedEntities) -> float:
    """Jaccard similarity between the case-folded entity sets of two texts.

    All four categories are pooled on each side. Returns 0.0 when either
    side has no entities, so two contentless texts never count as similar.
    """
    set_a = _normalized(a)
    set_b = _normalized(b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def common_entities(a: ExtractedEntities, b: ExtractedEntities) -> list[str]:
    """Entities of ``b`` that also occur in ``a``, compared case-insensitively.

    Keeps ``b``'s original casing and order; each entity appears once.
    """
    set_a = _normalized(a)
    seen: set[str] = set()
    common: list[str] = []
    for entity in b.flatten():
        folded = entity.lower()
        if folded in set_a and folded not in seen:
            seen.add(folded)
            common.append(entity)
    return common
