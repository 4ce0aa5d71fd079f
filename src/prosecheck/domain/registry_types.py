from typing import TypedDict


class RuleCatalogEntry(TypedDict, total=False):
    display_name: str
    short_description: str
    manual_instructions: str
    fixable: bool
    default_severity: str
    options: dict[str, str]
