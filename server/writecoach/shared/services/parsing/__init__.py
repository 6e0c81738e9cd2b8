from .structured_response import (
    REPAIR_PASSES,
    balance_braces,
    extract_outer_braces,
    normalize_quotes,
    parse_structured,
    quote_bare_keys,
    remove_trailing_commas,
    repair_json_object,
    strip_code_fences,
)

__all__ = [
    "REPAIR_PASSES",
    "balance_braces",
    "extract_outer_braces",
    "normalize_quotes",
    "parse_structured",
    "quote_bare_keys",
    "remove_trailing_commas",
    "repair_json_object",
    "strip_code_fences",
]
