"""Sabre Core - Compiled template runtime.

Compiles template text into Python template classes once per content
fingerprint and renders them through layouts and sections.
"""

from sabre_core.engine import Sabre
from sabre_core.template import Template, raw

__version__ = "0.1.0"
__all__ = ["__version__", "Sabre", "Template", "raw"]
