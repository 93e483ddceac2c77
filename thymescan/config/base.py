DEFAULT_TEMPLATE_PATH = "templates"
DEFAULT_STATIC_PATH = "static"
DEFAULT_DATA_PATH = "data"
DEFAULT_WORKSPACE_PATH = "./"

TEMPLATE_EXTENSION = ".html"
DATA_EXTENSION = ".json"
GLOBAL_DATA_FILE = "global.json"

# Seconds before cached file listings and fragment positions are refreshed
CACHE_TTL = 5

ACTION_SCAN_VARIABLES = "Scan variables"
ACTION_SCAN_REFERENCES = "Scan template references"
ACTION_GENERATE_DATA = "Generate variable data"
ACTION_LIST_FRAGMENTS = "List fragments"
ACTION_CREATE_WORKSPACE = "Create preview workspace"

SUPPORTED_ACTIONS = [
    ACTION_SCAN_VARIABLES,
    ACTION_SCAN_REFERENCES,
    ACTION_GENERATE_DATA,
    ACTION_LIST_FRAGMENTS,
    ACTION_CREATE_WORKSPACE,
]

# Non-interactive action names
CLI_ACTIONS = {
    "variables": ACTION_SCAN_VARIABLES,
    "references": ACTION_SCAN_REFERENCES,
    "generate": ACTION_GENERATE_DATA,
    "fragments": ACTION_LIST_FRAGMENTS,
    "workspace": ACTION_CREATE_WORKSPACE,
}

# Actions that work on a single template
TEMPLATE_ACTIONS = {ACTION_SCAN_VARIABLES, ACTION_SCAN_REFERENCES, ACTION_GENERATE_DATA}

WORKSPACE_TEMPLATE = "templates/workspace"

# Attributes whose bodies are scanned on their own besides the generic scan
SCANNED_ATTRIBUTES = (
    "each", "if", "unless", "switch", "case", "with", "object", "field",
    "attr", "attrappend", "attrprepend", "text", "utext", "value", "errors",
    "classappend", "styleappend",
)

# Attributes holding comma separated `name=expression` assignments
ASSIGNMENT_ATTRIBUTES = {"with", "attr", "attrappend", "attrprepend"}

TEMPLATE_REFERENCE_ATTRIBUTES = (
    "th:replace", "th:insert", "th:include", "th:substituteby",
    "layout:decorate", "layout:fragment",
)

FRAGMENT_ATTRIBUTES = ("th:fragment", "data-th-fragment", "layout:fragment")

LAYOUT_MARKERS = ("th:fragment", "layout:fragment", "layout:decorate")

RESOLVER_PREFIXES = ("classpath:", "file:")

INVALID_PATH_CHARS = frozenset('<>:"|?*')

STATIC_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp", ".avif")

RESERVED_WORDS = frozenset({
    "and", "or", "not", "gt", "ge", "lt", "le", "eq", "ne",
    "true", "false", "null", "instanceof", "new", "return",
    "this", "matches", "contains", "startswith", "endswith",
    "size", "length",
})

SECURITY_FUNCTIONS = frozenset({
    "hasRole", "hasAnyRole", "hasAuthority", "hasAnyAuthority",
    "principal", "authentication", "permitAll", "denyAll",
    "isAnonymous", "isAuthenticated", "isFullyAuthenticated",
    "hasIpAddress", "hasAnyPermission",
})

# Utility objects whose first member is itself a model variable
VARIABLE_SCOPE_OBJECTS = frozenset({"#vars"})

# `#fields` calls whose quoted argument names a bound property path
FIELD_METHODS = frozenset({"hasErrors", "errors", "detailedErrors"})
FIELD_WILDCARDS = frozenset({"*", "all", "global"})

# No-argument calls on a filter or projection result that aggregate the collection
AGGREGATE_METHODS = frozenset({"size", "isEmpty", "length", "count", "first", "last"})

OPERATORS = frozenset({
    "+", "-", "*", "/", "%",
    "==", "!=", ">", "<", ">=", "<=",
    "and", "or", "not",
    "&&", "||", "!",
    "?", ":", "?:",
    ".", ",", "(", ")", "[", "]",
    "=", "+=", "-=", "*=", "/=", "%=",
})

LOG_COLORS = {
    "INFO": "\033[38;5;39m",
    "SUCCESS": "\033[38;5;35m",
    "WARNING": "\033[38;5;178m",
    "ERROR": "\033[38;5;203m",
    "RESET": "\033[0m",
    "GRAY": "\033[38;5;244m",
}
