from dataclasses import dataclass


SURNAME_CONNECTORS = frozenset({"de", "do", "da", "dos", "das"})


@dataclass
class ParsedName:
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _clean(value: str) -> str:
    # Anything that is not a letter or whitespace becomes a separator.
    kept = "".join(ch if ch.isalpha() or ch.isspace() else " " for ch in value)
    return " ".join(kept.split())


def parse_name(value: str | None) -> ParsedName:
    """
    Split a free-text personal name into full, first and last name.

    The last name absorbs any preceding surname connectors, so
    "joão da silva dos santos" gives first name "João" and last name
    "da Silva dos Santos". Connectors are rendered lowercase.
    """
    parsed = ParsedName()
    if not value:
        return parsed

    cleaned = _clean(value)
    if not cleaned:
        return parsed

    parts = cleaned.split(" ")
    parsed.name = " ".join(_capitalize(p) for p in parts)
    parsed.first_name = _capitalize(parts[0])

    if len(parts) > 1:
        i = len(parts) - 1
        last_parts = [parts[i]]
        while i > 0 and parts[i - 1].lower() in SURNAME_CONNECTORS:
            last_parts.insert(0, parts[i - 1])
            i -= 1
        parsed.last_name = " ".join(
            p.lower() if p.lower() in SURNAME_CONNECTORS else _capitalize(p)
            for p in last_parts
        )

    return parsed
