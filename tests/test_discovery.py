"""Unit tests for naming and discovery (coding_class.discovery)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from coding_class.discovery import (
    SERVER_PREFIX,
    display_name,
    filter_owned,
    find_by_identifier,
    fully_qualified_name,
    list_owned,
    validate_identifier,
)
from coding_class.errors import ValidationError


class TestValidateIdentifier:
    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["max", "friedrich", "a", "zoe"])
    def test_accepts_lowercase_letters(self, raw):
        assert validate_identifier(raw) == raw

    @pytest.mark.unit
    @pytest.mark.parametrize("raw, expected", [("Max", "max"), ("IDA", "ida"), ("  lea \n", "lea")])
    def test_normalises_case_and_whitespace(self, raw, expected):
        assert validate_identifier(raw) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            None,
            "max1",
            "max-mustermann",
            "max_m",
            "max.m",
            "max m",
            "jörg",
            "max;rm -rf /",
            "../etc",
            "$(id)",
            "max\nroot",
        ],
    )
    def test_rejects_everything_else(self, raw):
        with pytest.raises(ValidationError):
            validate_identifier(raw)

    @pytest.mark.unit
    def test_message_is_user_facing(self):
        with pytest.raises(ValidationError, match="lowercase letters"):
            validate_identifier("M4x")


class TestNaming:
    @pytest.mark.unit
    def test_fully_qualified_name(self):
        assert fully_qualified_name("max") == "coding-class-max"

    @pytest.mark.unit
    def test_deterministic(self):
        assert fully_qualified_name("ida") == fully_qualified_name("ida")

    @pytest.mark.unit
    def test_injective(self):
        names = ["a", "ab", "abc", "max", "maxi", "ida", "idaa"]
        assert len({fully_qualified_name(n) for n in names}) == len(names)

    @pytest.mark.unit
    def test_display_name_strips_prefix(self):
        assert display_name("coding-class-max") == "max"

    @pytest.mark.unit
    def test_display_name_leaves_foreign_names(self):
        assert display_name("other-service-1") == "other-service-1"


class TestDiscovery:
    @pytest.mark.unit
    def test_filter_owned(self, instance):
        servers = [
            instance("coding-class-max", 1),
            instance("other-service-1", 2),
            instance("coding-classic", 3),
            instance("my-coding-class-ida", 4),
        ]
        owned = filter_owned(servers)
        assert [s.name for s in owned] == ["coding-class-max"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_list_owned_uses_client(self, instance):
        client = MagicMock()
        client.list_servers = AsyncMock(
            return_value=[instance("coding-class-max", 1), instance("other-service-1", 2)]
        )
        owned = await list_owned(client)
        assert [s.name for s in owned] == ["coding-class-max"]
        client.list_servers.assert_awaited_once()

    @pytest.mark.unit
    def test_find_exact_match(self, instance):
        owned = [instance("coding-class-maxi", 1), instance("coding-class-max", 2)]
        found = find_by_identifier("max", owned)
        assert found is not None
        assert found.id == 2

    @pytest.mark.unit
    def test_find_missing(self, instance):
        assert find_by_identifier("ida", [instance("coding-class-max", 1)]) is None

    @pytest.mark.unit
    def test_find_is_case_sensitive(self, instance):
        assert find_by_identifier("max", [instance(SERVER_PREFIX + "Max", 1)]) is None
