"""Shared constants for InputGuard.

All caps, allow-lists and fixed user-facing strings used across modules are
defined here. No magic numbers in other modules — import from here.
"""

# ─── Structural Pollution Detector ───────────────────────────────────────────

# Deepest nesting level inspected by has_pollution(). Levels 0..10 are
# scanned; anything nested deeper is NOT inspected and counts as clean.
# Oversized documents are bounded by MAX_REQUEST_BODY_BYTES upstream.
MAX_POLLUTION_DEPTH: int = 10

# Object keys that rewrite shared base-object behaviour when merged into a
# JavaScript object. Matched exactly (case-sensitive).
DANGEROUS_KEYS: frozenset[str] = frozenset({"__proto__", "constructor", "prototype"})

# ─── Template Variable Validator ─────────────────────────────────────────────

# Process-wide, immutable allow-list of {{variable}} names a message template
# may reference. Not user-extensible.
ALLOWED_TEMPLATE_VARIABLES: frozenset[str] = frozenset(
    {
        "eventType",
        "agentId",
        "chainId",
        "registry",
        "blockNumber",
        "transactionHash",
        "timestamp",
        "reputationScore",
        "triggerId",
        "triggerName",
    }
)

# ─── Text Sanitizer ──────────────────────────────────────────────────────────

# Elements dropped together with their content. All other tags are unwrapped
# (tag removed, text kept).
FORBIDDEN_CONTENT_TAGS: tuple[str, ...] = (
    "annotation-xml",
    "audio",
    "colgroup",
    "desc",
    "foreignobject",
    "head",
    "iframe",
    "math",
    "noembed",
    "noframes",
    "noscript",
    "plaintext",
    "script",
    "style",
    "svg",
    "template",
    "thead",
    "title",
    "video",
    "xmp",
)

# ─── Renderers / redactors ───────────────────────────────────────────────────

# Shown in place of a config object that cannot be serialized.
INVALID_OBJECT_PLACEHOLDER: str = "[Invalid Object]"

# Shown in place of an absent or unrecognised error value.
GENERIC_ERROR_MESSAGE: str = "An unexpected error occurred"

# ─── Webhook URL Validator ───────────────────────────────────────────────────

# URL schemes a webhook endpoint may use at all. Production narrows this to
# https only (see check_webhook_url).
WEBHOOK_ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})

# ─── HTTP service ────────────────────────────────────────────────────────────

# Maximum accepted request body for the validation API. HTTP 413 above this.
MAX_REQUEST_BODY_BYTES: int = 65_536  # 64 KB
