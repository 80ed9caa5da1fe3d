"""Tests for template fingerprints."""

import base64
import hashlib

from sabre_core.cache import compute_fingerprint, type_name


class Page:
    pass


class TestTypeName:
    def test_class(self):
        assert type_name(dict) == "builtins.dict"
        assert type_name(Page) == f"{__name__}.Page"

    def test_generic_alias_uses_repr(self):
        assert type_name(dict[str, int]) == "dict[str, int]"


class TestComputeFingerprint:
    def test_known_value(self):
        """Test the digest input layout content+file+type."""
        expected = base64.b64encode(
            hashlib.sha256("hello+page.pyt+builtins.object".encode()).digest()
        ).decode()
        assert compute_fingerprint("hello", "page.pyt", object) == expected

    def test_deterministic(self):
        assert compute_fingerprint("a", "f.pyt", dict) == compute_fingerprint("a", "f.pyt", dict)

    def test_content_changes_fingerprint(self):
        assert compute_fingerprint("a", "f.pyt", dict) != compute_fingerprint("b", "f.pyt", dict)

    def test_file_name_changes_fingerprint(self):
        assert compute_fingerprint("a", "f.pyt", dict) != compute_fingerprint("a", "g.pyt", dict)

    def test_model_type_changes_fingerprint(self):
        assert compute_fingerprint("a", "f.pyt", dict) != compute_fingerprint("a", "f.pyt", Page)

    def test_printable_base64(self):
        fingerprint = compute_fingerprint("<p>é</p>", "f.pyt", object)
        assert len(fingerprint) == 44
        assert len(base64.b64decode(fingerprint)) == 32
