"""Content fingerprints for compiled templates."""

import base64
import hashlib
from typing import Any


def type_name(model_type: Any) -> str:
    """Fully qualified name of a model type.

    Classes give ``module.QualName``; anything else (typing aliases such as
    ``dict[str, int]``) falls back to ``repr()``.
    """
    if isinstance(model_type, type):
        return f"{model_type.__module__}.{model_type.__qualname__}"
    return repr(model_type)


def compute_fingerprint(content: str, file_name: str, model_type: Any) -> str:
    """SHA-256 of ``content+file_name+model type``, base64 encoded.

    Args:
        content: Template text
        file_name: Template file name
        model_type: Model type the template is compiled for

    Returns:
        Standard base64 text of the digest
    """
    key = f"{content}+{file_name}+{type_name(model_type)}"
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")
