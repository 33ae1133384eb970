"""Tests for cache ID to filename encoding."""

import hashlib

import pytest

from filecache.consts import FILENAME_MAX, FILENAME_POS_BEFORE_HASH
from filecache.storage.cache.key_encoder import encode_cid, encode_prefix


class TestEncodeCid:
    """Tests for encode_cid()."""

    @pytest.mark.parametrize(
        ("cid", "expected"),
        [
            ("simple", "simple"),
            ("user:42", "user@42"),
            ("menu/main/links", "menu=main=links"),
            ("theme_registry:runtime:bartik", "theme_registry@runtime@bartik"),
            ("key with spaces", "key+with+spaces"),
            ("a,b", "a%2Cb"),
            ("café", "caf%C3%A9"),
        ],
    )
    def test_encoding(self, cid: str, expected: str) -> None:
        assert encode_cid(cid) == expected

    def test_substitutions_do_not_collide_with_literal_characters(self) -> None:
        """'@' and '=' in a cid are escaped, so they never clash with ':' and '/'."""
        assert encode_cid("a:b") != encode_cid("a@b")
        assert encode_cid("a/b") != encode_cid("a=b")
        assert encode_cid("a@b") == "a%40b"
        assert encode_cid("a=b") == "a%3Db"

    def test_deterministic(self) -> None:
        assert encode_cid("user:1/profile") == encode_cid("user:1/profile")

    def test_distinct_short_keys(self) -> None:
        cids = ["a", "A", "a ", "a+", "a:", "a/", "a%", "a.b", "a-b", "a_b", "a~b", "a\nb"]
        tokens = {encode_cid(cid) for cid in cids}
        assert len(tokens) == len(cids)

    def test_dots_are_escaped(self) -> None:
        """A token never ends in a dotted suffix such as the expiration marker."""
        assert encode_cid("report.expire") == "report%2Eexpire"
        assert not encode_cid("page.py").endswith(".py")
        assert not encode_cid(".hidden").startswith(".")

    def test_no_path_separators_in_token(self) -> None:
        token = encode_cid("../../etc/passwd")
        assert "/" not in token
        assert token == "%2E%2E=%2E%2E=etc=passwd"

    def test_max_length_not_truncated(self) -> None:
        cid = "x" * FILENAME_MAX
        assert encode_cid(cid) == cid

    def test_long_key_truncated_with_hash(self) -> None:
        cid = "x" * 250
        token = encode_cid(cid)

        assert len(token) == FILENAME_POS_BEFORE_HASH + 1 + 32
        assert len(token) <= FILENAME_MAX
        assert token[:FILENAME_POS_BEFORE_HASH] == "x" * FILENAME_POS_BEFORE_HASH
        assert token[FILENAME_POS_BEFORE_HASH] == ","
        expected_hash = hashlib.md5(("x" * (250 - FILENAME_POS_BEFORE_HASH)).encode()).hexdigest()
        assert token.endswith(expected_hash)

    def test_long_keys_sharing_head_do_not_collide(self) -> None:
        head = "k" * 166
        first = encode_cid(head + "a" * 100)
        second = encode_cid(head + "b" * 100)

        assert first != second
        assert first[:166] == second[:166]

    def test_length_measured_after_encoding(self) -> None:
        """Escapes count towards the bound, so 100 ':' plus 100 ' ' fit but 67 '%' do not."""
        assert len(encode_cid(":" * 100 + " " * 100)) == 200
        assert "," in encode_cid("%" * 67)


class TestEncodePrefix:
    """Tests for encode_prefix()."""

    def test_prefix_is_literal_prefix_of_key(self) -> None:
        for prefix, cid in [("user:", "user:1"), ("menu/", "menu/main"), ("a b", "a b c")]:
            assert encode_cid(cid).startswith(encode_prefix(prefix))

    def test_short_prefix_matches_truncated_key(self) -> None:
        cid = "views:" + "v" * 300
        assert encode_cid(cid).startswith(encode_prefix("views:"))
