"""Scientific name clean-up for taxon labels found in pages."""

import re

# Rank words some layouts print before the name, e.g. "Genus Panthera"
RANK_PREFIX = re.compile(
    r"^(Realm|Subrealm|Kingdom|Subkingdom|Phylum|Subphylum|Division|Subdivision|Class|"
    r"Subclass|Superclass|Superorder|Order|Suborder|Infraorder|Superfamily|Epifamily|Family|"
    r"Subfamily|Infrafamily|Tribe|Subtribe|Infratribe|Genus|Subgenus|Species|Subspecies)\s+"
)
VALID_NAME = re.compile(r"^[A-Z][A-Za-z\s-]+$")


def clean_scientific_name(text: str | None) -> str | None:
    """Return the bare scientific name in a taxon label, or None if it is not one.

    Args:
        text: Label text, e.g. "Genus Panthera" or "Panthera leo"

    Returns:
        The name without a leading rank word, or None for blank, "Unknown"
        or labels that do not look like a scientific name
    """
    if not text:
        return None
    text = text.strip()
    if not text or text == "Unknown":
        return None

    name = RANK_PREFIX.sub("", text, count=1)
    if not VALID_NAME.match(name):
        return None
    return name
