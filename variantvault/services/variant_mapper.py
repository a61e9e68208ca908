"""
Variant taxonomy mapping.

Single source of truth for translating stored variant codes to the
canonical UI variants and back. Every reader of collection_items goes
through these functions, so two read paths can never disagree on what a
stored code means.

INVARIANTS:
- to_ui_variant is total: any input maps to one UIVariant or to None
- to_stored_code is partial and fails closed: no stored form -> None
- Round trip is stable: to_ui_variant(to_stored_code(v)) == v
  for every UI variant that has a stored form
"""

from typing import Any

from variantvault.models.variants import StoredVariant, UIVariant

STORED_TO_UI: dict[StoredVariant, UIVariant] = {
    StoredVariant.NORMAL: UIVariant.NORMAL,
    StoredVariant.UNLIMITED: UIVariant.NORMAL,
    StoredVariant.HOLOFOIL: UIVariant.HOLO,
    StoredVariant.REVERSE_HOLOFOIL: UIVariant.REVERSE_HOLO_STANDARD,
    StoredVariant.REVERSE_HOLO_POKEBALL: UIVariant.REVERSE_HOLO_POKEBALL,
    StoredVariant.REVERSE_HOLO_MASTERBALL: UIVariant.REVERSE_HOLO_MASTERBALL,
    StoredVariant.FIRST_EDITION_NORMAL: UIVariant.FIRST_EDITION,
    StoredVariant.FIRST_EDITION_HOLOFOIL: UIVariant.FIRST_EDITION,
}

# Canonical stored form per UI variant. CUSTOM has none.
UI_TO_STORED: dict[UIVariant, StoredVariant] = {
    UIVariant.NORMAL: StoredVariant.NORMAL,
    UIVariant.HOLO: StoredVariant.HOLOFOIL,
    UIVariant.REVERSE_HOLO_STANDARD: StoredVariant.REVERSE_HOLOFOIL,
    UIVariant.REVERSE_HOLO_POKEBALL: StoredVariant.REVERSE_HOLO_POKEBALL,
    UIVariant.REVERSE_HOLO_MASTERBALL: StoredVariant.REVERSE_HOLO_MASTERBALL,
    UIVariant.FIRST_EDITION: StoredVariant.FIRST_EDITION_NORMAL,
}

_STORED_BY_VALUE: dict[str, StoredVariant] = {v.value: v for v in StoredVariant}
_UI_BY_VALUE: dict[str, UIVariant] = {v.value: v for v in UIVariant}


def _normalize_code(code: Any) -> str | None:
    if isinstance(code, str):
        normalized = code.strip().lower().replace("-", "_").replace(" ", "_")
        return normalized or None
    return None


def to_ui_variant(stored_code: Any) -> UIVariant | None:
    """
    Map a stored variant code to its UI variant.

    Never raises. Unknown codes, None and non-strings map to None so that
    legacy or future codes are skipped rather than failing a request.
    """
    if isinstance(stored_code, StoredVariant):
        return STORED_TO_UI.get(stored_code)

    normalized = _normalize_code(stored_code)
    if normalized is None:
        return None

    stored = _STORED_BY_VALUE.get(normalized)
    if stored is None:
        return None
    return STORED_TO_UI.get(stored)


def parse_ui_variant(value: Any) -> UIVariant | None:
    """Parse a caller-supplied UI variant name. Returns None if not a UI variant."""
    if isinstance(value, UIVariant):
        return value
    normalized = _normalize_code(value)
    if normalized is None:
        return None
    return _UI_BY_VALUE.get(normalized)


def to_stored_code(ui_variant: Any) -> StoredVariant | None:
    """
    Map a UI variant to the code used when writing or filtering storage.

    Returns None for UI variants with no stored form (CUSTOM) and for
    anything that is not a UI variant. Never guesses.
    """
    variant = parse_ui_variant(ui_variant)
    if variant is None:
        return None
    return UI_TO_STORED.get(variant)


def empty_variant_quantities() -> dict[UIVariant, int]:
    """Every UI variant at quantity zero, in display order."""
    return {variant: 0 for variant in UIVariant}


def check_mapping_tables() -> None:
    """
    Verify the mapping tables are exhaustive and consistent.

    Raises:
        RuntimeError: If a stored code has no forward entry, or a reverse
            entry does not map back to its own UI variant.
    """
    missing = [code.value for code in StoredVariant if code not in STORED_TO_UI]
    if missing:
        msg = f"Stored variant codes without a UI mapping: {missing}"
        raise RuntimeError(msg)

    for ui_variant, stored in UI_TO_STORED.items():
        if STORED_TO_UI.get(stored) != ui_variant:
            msg = (
                f"UI variant '{ui_variant.value}' writes '{stored.value}', "
                f"which reads back as '{STORED_TO_UI.get(stored)}'"
            )
            raise RuntimeError(msg)


check_mapping_tables()
