"""Shared constants."""

TOOL_NAME = "prosecheck"
CONFIG_SECTION = "prosecheck"

DEFAULT_MAX_FIX_ITERATIONS = 10
DEFAULT_FORMATTER = "stylish"
DEFAULT_PRESET = "recommended"
DEFAULT_DISCOVERY_PATTERNS = ("**/*.md", "**/*.txt")

# Rule ids of messages synthesized by the kernel and the session runner
UNSUPPORTED_KIND_RULE_ID = f"{TOOL_NAME}/unsupported-kind"
PARSE_ERROR_RULE_ID = f"{TOOL_NAME}/parse-error"
FIX_UNSAFE_RULE_ID = f"{TOOL_NAME}/fix-unsafe"
FIX_LIMIT_RULE_ID = f"{TOOL_NAME}/fix-limit"
TIMEOUT_RULE_ID = f"{TOOL_NAME}/timeout"
INTERNAL_ERROR_RULE_ID = f"{TOOL_NAME}/internal-error"
READ_ERROR_RULE_ID = f"{TOOL_NAME}/read-error"
