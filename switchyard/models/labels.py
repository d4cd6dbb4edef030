"""Label name and value grammar."""

import re
from typing import Mapping

LabelSet = Mapping[str, str]

LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def is_valid_label_name(name: str) -> bool:
    return bool(name) and LABEL_NAME_RE.fullmatch(name) is not None


def is_valid_label_value(value: str) -> bool:
    """Label values may be any valid UTF-8 string."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
