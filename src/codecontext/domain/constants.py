from __future__ import annotations

"""
Domain Constants.

Centralizes the Rust naming conventions the rewriting engine relies on and
the application-wide defaults shared by configuration and CLI.
"""

from typing import FrozenSet

CURRENT_CONFIG_VERSION = "1.0.0"
DEFAULT_OUTPUT_DIR_NAME = "code-context"
DEFAULT_MODEL_KEY = "gpt-4o"

SOURCE_EXTENSION = ".rs"
OUTPUT_SUFFIX = ".txt"
COMBINED_OUTPUT_NAME = "code_context.rs.txt"

# -----------------------------------------------------------------------------
# REWRITING VOCABULARY
# -----------------------------------------------------------------------------

# Placeholder that replaces an elided function body (valid Rust on purpose)
ELISION_MARKER = "{ /* ... */ }"

DEFAULT_METHOD_NOTE = " There is a default implementation"
REQUIRED_METHOD_NOTE = " This is a required method"

# Owned or borrowed text types, matched on the last path segment
STRING_TYPE_NAMES: FrozenSet[str] = frozenset({"String", "str"})

# Smart pointers that count as text when they wrap 'str'
TEXT_POINTER_NAMES: FrozenSet[str] = frozenset({"Cow"})

# Attributes marking code that only exists under test
TEST_MARKER_NAMES: FrozenSet[str] = frozenset({"test", "bench", "rstest", "test_case"})

TEST_MODULE_NAMES: FrozenSet[str] = frozenset({"tests", "test"})

# Traits describing conversion to or from an external textual representation
SERIALIZATION_TRAITS: FrozenSet[str] = frozenset({
    "Serialize",
    "Deserialize",
    "Display",
    "FromStr",
})

AUTOMATICALLY_DERIVED = "automatically_derived"
