# tests/test_schema.py
"""
Tests for configuration schemas.

Covers:
    - section detection (flat, dynamic, default record, non-sections)
    - environment key derivation and name overrides
    - type descriptors and zero values
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from cfgenv.kinds import Int8
from cfgenv.schema import (
    Parsable,
    Pointer,
    Scalar,
    Sequence,
    Unsupported,
    describe_type,
    env_keys,
    env_name,
    normalize_prefix,
    schema_for,
    zero_record,
)
from sample_config import AppConfig, LowerString, Server, SubsectionConfig


@dataclass
class Bare:
    name: str
    count: Int8
    ratio: float
    tags: List[str]
    limit: Optional[int]


@dataclass
class Tagged:
    f1: str = field(default="", metadata={"cfg": "another-name"})


@dataclass
class TaggedConfig:
    sec1: Tagged = field(default_factory=Tagged, metadata={"cfg": "sec-two"})
    items: Dict[str, int] = field(default_factory=dict)
    names: List[str] = field(default_factory=list)


@dataclass
class OptionalDefaultConfig:
    upstream: Dict[str, Server] = field(default_factory=dict)
    default_upstream: Optional[Server] = None


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class TestSchemaFor:
    """Tests for schema_for()."""

    def test_sections(self):
        schema = schema_for(AppConfig)
        assert [s.attr for s in schema.sections] == ["server", "upstream", "default_upstream"]
        upstream = schema.section("upstream")
        assert upstream.dynamic
        assert upstream.record_type is Server
        assert upstream.default_attr == "default_upstream"
        assert not schema.section("server").dynamic

    def test_optional_dynamic_section(self):
        schema = schema_for(SubsectionConfig)
        sec2 = schema.section("sec2")
        assert sec2.dynamic
        assert sec2.default_attr is None

    def test_optional_default_record(self):
        schema = schema_for(OptionalDefaultConfig)
        assert schema.section("upstream").default_attr == "default_upstream"

    def test_non_sections_skipped(self):
        schema = schema_for(TaggedConfig)
        assert [s.attr for s in schema.sections] == ["sec1"]

    def test_cached(self):
        assert schema_for(AppConfig) is schema_for(AppConfig)

    def test_rejects_non_dataclass(self):
        with pytest.raises(TypeError):
            schema_for(dict)

    def test_unknown_section(self):
        with pytest.raises(KeyError):
            schema_for(AppConfig).section("nope")


class TestNames:
    """Environment key derivation."""

    def test_env_name(self):
        assert env_name("other_field") == "OTHER_FIELD"
        assert env_name("f1", "another-name") == "ANOTHER_NAME"

    def test_overrides(self):
        sec = schema_for(TaggedConfig).section("sec1")
        assert sec.env_name == "SEC_TWO"
        assert sec.fields[0].env_name == "ANOTHER_NAME"

    @pytest.mark.parametrize("prefix, expected", [
        ("", ""), (None, ""), ("APP", "APP_"), ("APP_", "APP_"),
    ])
    def test_normalize_prefix(self, prefix, expected):
        assert normalize_prefix(prefix) == expected

    def test_env_keys(self):
        keys = env_keys(SubsectionConfig, "APP")
        assert keys == [
            "APP_SEC1_<name>_F1",
            "APP_SEC1_<name>_F2",
            "APP_SEC1_<name>_F3",
            "APP_DEFAULT_SEC1_F1",
            "APP_DEFAULT_SEC1_F2",
            "APP_DEFAULT_SEC1_F3",
            "APP_SEC2_<name>_F1",
            "APP_SEC2_<name>_F2",
            "APP_SEC2_<name>_F3",
        ]


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


class TestDescribeType:
    """Tests for describe_type()."""

    def test_kinds(self):
        assert describe_type(bool) == Scalar(bool, "bool")
        assert describe_type(Int8) == Scalar(Int8, "int")
        assert isinstance(describe_type(LowerString), Parsable)
        assert isinstance(describe_type(Optional[int]), Pointer)
        assert isinstance(describe_type(int | None), Pointer)
        assert isinstance(describe_type(list[int]), Sequence)
        assert isinstance(describe_type(Dict[str, str]), Unsupported)

    def test_names(self):
        assert describe_type(Int8).name == "int8"
        assert describe_type(str).name == "str"

    def test_union_of_two_types_unsupported(self):
        from typing import Union
        assert isinstance(describe_type(Union[int, str]), Unsupported)


class TestZeroRecord:
    """Tests for zero_record()."""

    def test_fills_missing_defaults(self):
        record = zero_record(Bare)
        assert record == Bare(name="", count=Int8(0), ratio=0.0, tags=[], limit=None)
        assert type(record.count) is Int8

    def test_keeps_declared_defaults(self):
        assert zero_record(AppConfig).default_upstream.port == 80
