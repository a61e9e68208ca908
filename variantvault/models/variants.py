from enum import Enum


class StoredVariant(str, Enum):
    """
    Variant codes as persisted in collection_items.variant.

    Several codes are synonyms of one UI variant (see variant_mapper).
    The column is free text, so rows may also carry codes outside this set.
    """

    NORMAL = "normal"
    HOLOFOIL = "holofoil"
    REVERSE_HOLOFOIL = "reverse_holofoil"
    FIRST_EDITION_NORMAL = "first_edition_normal"
    FIRST_EDITION_HOLOFOIL = "first_edition_holofoil"
    UNLIMITED = "unlimited"
    REVERSE_HOLO_POKEBALL = "reverse_holo_pokeball"
    REVERSE_HOLO_MASTERBALL = "reverse_holo_masterball"


class UIVariant(str, Enum):
    """Canonical variants exposed to callers. Declaration order is display order."""

    NORMAL = "normal"
    HOLO = "holo"
    REVERSE_HOLO_STANDARD = "reverse_holo_standard"
    REVERSE_HOLO_POKEBALL = "reverse_holo_pokeball"
    REVERSE_HOLO_MASTERBALL = "reverse_holo_masterball"
    FIRST_EDITION = "first_edition"
    CUSTOM = "custom"


VARIANT_DISPLAY_NAMES: dict[UIVariant, str] = {
    UIVariant.NORMAL: "Normal",
    UIVariant.HOLO: "Holo",
    UIVariant.REVERSE_HOLO_STANDARD: "Reverse Holo",
    UIVariant.REVERSE_HOLO_POKEBALL: "Reverse Holo (Poké Ball)",
    UIVariant.REVERSE_HOLO_MASTERBALL: "Reverse Holo (Master Ball)",
    UIVariant.FIRST_EDITION: "1st Edition",
    UIVariant.CUSTOM: "Custom",
}
