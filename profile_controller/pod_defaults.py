"""
Parser for the pod defaults flag of the profile controller.

The flag value is a comma-separated list of ``selector.field.value`` entries, e.g.
``my-pods.labels.project=shared,my-pods.labels.team=infra``. Values can be quoted
to keep whitespace, commas or dots.
"""
from typing import Dict
from typing import List

# fields which are copied into the result, everything else is ignored
ALLOWED_FIELDS = frozenset(["labels"])

ENTRY_DELIMITER = ","
FIELD_DELIMITER = "."

QUOTES = ("`", '"', "'")
ESCAPE = "\\"
# str.isspace() also matches these, they are not Unicode whitespace
SEPARATORS = "\x1c\x1d\x1e\x1f"


class PodDefaultsError(ValueError):
    pass


class MalformedInput(PodDefaultsError):
    def __init__(self, quote: str):
        super().__init__(f"unmatched unescaped quote: {quote!r}")
        self.quote = quote


class MalformedEntry(PodDefaultsError):
    def __init__(self, entry: str):
        super().__init__(
            f"entry {entry!r} must have the form selector{FIELD_DELIMITER}field{FIELD_DELIMITER}value"
        )
        self.entry = entry


def is_space(char: str) -> bool:
    return char.isspace() and char not in SEPARATORS


def remove_unquoted_space(value: str) -> str:
    """Remove all whitespace which is not between matching unescaped quotes.

    >>> remove_unquoted_space(' a = "b c" ')
    'a="b c"'
    """
    chars = []
    quote = None
    escape = False
    for char in value:
        if not escape and char in QUOTES:
            if quote is None:
                quote = char
            elif quote == char:
                quote = None
        # a backslash escapes the next character, unless it is escaped itself
        escape = not escape and char == ESCAPE
        if quote is not None or not is_space(char):
            chars.append(char)
    if quote is not None:
        raise MalformedInput(quote)
    return "".join(chars)


def split_not_in_quotes(value: str, sep: str) -> List[str]:
    """Split on the separator character, but not inside quotes.

    Only a directly preceding backslash escapes a quote here (no double backslash handling).

    >>> split_not_in_quotes("a.'b.c'.d", ".")
    ['a', "'b.c'", 'd']
    """
    parts = []
    begin = 0
    quote = None
    for i, char in enumerate(value):
        if char == sep and quote is None:
            parts.append(value[begin:i])
            begin = i + 1
        elif char in QUOTES and (i == 0 or value[i - 1] != ESCAPE):
            if quote is None:
                quote = char
            elif quote == char:
                quote = None
    parts.append(value[begin:])
    return parts


def parse_entry(entry: str):
    """Return (selector, field, value) tuple for a single entry."""
    selector, *rest = split_not_in_quotes(entry, FIELD_DELIMITER)
    if not rest:
        raise MalformedEntry(entry)
    field, *values = rest
    # values may contain dots, e.g. "domain=example.org"
    return selector.lower(), field.lower(), FIELD_DELIMITER.join(values)


def parse_pod_defaults(value: str) -> Dict[str, Dict[str, List[str]]]:
    """
    Parse the pod defaults flag into a mapping selector -> field -> list of values.

    >>> parse_pod_defaults("a.labels.project=x,a.labels.team=y,b.labels.project=x")
    {'a': {'labels': ['project=x', 'team=y']}, 'b': {'labels': ['project=x']}}
    """
    if not value:
        return {}
    # line breaks are only formatting, even within quotes
    csv = remove_unquoted_space(value.replace("\n", ""))
    if not csv:
        return {}

    entries = [
        parse_entry(entry) for entry in split_not_in_quotes(csv, ENTRY_DELIMITER)
    ]

    selectors = []
    for selector, _, _ in entries:
        if selector not in selectors:
            selectors.append(selector)

    result = {}
    for name in selectors:
        fields: Dict[str, List[str]] = {}
        for selector, field, payload in entries:
            if selector == name and field in ALLOWED_FIELDS:
                fields.setdefault(field, []).append(payload)
        result[name] = fields
    return result
