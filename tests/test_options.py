"""Tests for virtual host option merging and route options translation."""

from __future__ import annotations

import pytest

from albingress.builders import (
    HeaderModification,
    ModifyResponseOptions,
    VirtualHostOptions,
    build_header_modifications,
    build_route_options,
    merge_maps,
    merge_virtual_host_options,
)
from albingress.errors import OptionConflictError


def _append(**headers: str) -> VirtualHostOptions:
    return VirtualHostOptions(ModifyResponseOptions(append=dict(headers)))


class TestMergeMaps:
    """Tests for merge_maps."""

    def test_disjoint_union(self):
        """Test keys from both sides end up in the result."""
        merged = merge_maps("modify response append", {"a": "1"}, {"b": "2"})
        assert merged == {"a": "1", "b": "2"}

    def test_equal_values_allowed(self):
        """Test a key present on both sides with the same value is kept once."""
        merged = merge_maps("modify response append", {"a": "1"}, {"a": "1", "b": "2"})
        assert merged == {"a": "1", "b": "2"}

    def test_conflicting_values_raise(self):
        """Test a key present on both sides with different values is a conflict."""
        with pytest.raises(OptionConflictError) as exc_info:
            merge_maps("modify response rename", {"a": "x"}, {"a": "y"})

        err = exc_info.value
        assert err.option == "modify response rename"
        assert err.key == "a"
        assert err.first == "x"
        assert err.second == "y"
        assert "modify response rename" in str(err)

    def test_order_first_then_new_keys(self):
        """Test keys of the first map keep their position."""
        merged = merge_maps("modify response append", {"b": "2", "a": "1"}, {"c": "3", "a": "1"})
        assert list(merged) == ["b", "a", "c"]

    def test_inputs_not_mutated(self):
        """Test merging leaves both inputs untouched."""
        first = {"a": "1"}
        second = {"b": "2"}
        merge_maps("modify response append", first, second)
        assert first == {"a": "1"}
        assert second == {"b": "2"}

    def test_empty_maps(self):
        """Test merging empty maps."""
        assert merge_maps("modify response remove", {}, {}) == {}


class TestMergeVirtualHostOptions:
    """Tests for merge_virtual_host_options."""

    def test_append_merge_is_order_independent(self):
        """Test merging X then Y equals merging Y then X."""
        xy = merge_virtual_host_options(_append(X="1"), _append(Y="2"))
        yx = merge_virtual_host_options(_append(Y="2"), _append(X="1"))

        assert xy.modify_response.append == {"X": "1", "Y": "2"}
        assert yx.modify_response.append == {"X": "1", "Y": "2"}

    def test_security_profile_conflict(self):
        """Test different security profiles cannot be merged."""
        with pytest.raises(OptionConflictError) as exc_info:
            merge_virtual_host_options(
                VirtualHostOptions(security_profile_id="p1"),
                VirtualHostOptions(security_profile_id="p2"),
            )

        assert str(exc_info.value) == "conflict with vh security profiles: p1 and p2"

    def test_identical_security_profiles(self):
        """Test identical security profiles merge."""
        merged = merge_virtual_host_options(
            VirtualHostOptions(security_profile_id="p1"),
            VirtualHostOptions(security_profile_id="p1"),
        )
        assert merged.security_profile_id == "p1"

    @pytest.mark.parametrize(
        ("first", "second"),
        [("p1", ""), ("", "p1")],
    )
    def test_security_profile_from_either_side(self, first, second):
        """Test the non-empty security profile wins over an empty one."""
        merged = merge_virtual_host_options(
            VirtualHostOptions(security_profile_id=first),
            VirtualHostOptions(security_profile_id=second),
        )
        assert merged.security_profile_id == "p1"

    @pytest.mark.parametrize("field_name", ["rename", "replace", "append"])
    def test_string_map_conflicts(self, field_name):
        """Test every string header map reports conflicts."""
        first = VirtualHostOptions(ModifyResponseOptions(**{field_name: {"H": "a"}}))
        second = VirtualHostOptions(ModifyResponseOptions(**{field_name: {"H": "b"}}))

        with pytest.raises(OptionConflictError) as exc_info:
            merge_virtual_host_options(first, second)

        assert exc_info.value.option == f"modify response {field_name}"

    def test_remove_conflict(self):
        """Test remove flags that disagree are a conflict."""
        with pytest.raises(OptionConflictError):
            merge_virtual_host_options(
                VirtualHostOptions(ModifyResponseOptions(remove={"Server": True})),
                VirtualHostOptions(ModifyResponseOptions(remove={"Server": False})),
            )

    def test_all_maps_merged(self):
        """Test all four header maps are merged."""
        first = VirtualHostOptions(
            ModifyResponseOptions(remove={"A": True}, rename={"B": "b"}),
            security_profile_id="sp",
        )
        second = VirtualHostOptions(ModifyResponseOptions(replace={"C": "c"}, append={"D": "d"}))

        merged = merge_virtual_host_options(first, second)

        assert merged.security_profile_id == "sp"
        assert merged.modify_response.remove == {"A": True}
        assert merged.modify_response.rename == {"B": "b"}
        assert merged.modify_response.replace == {"C": "c"}
        assert merged.modify_response.append == {"D": "d"}

    def test_inputs_not_mutated(self):
        """Test merging never changes its inputs."""
        first = _append(X="1")
        second = _append(Y="2")
        merge_virtual_host_options(first, second)
        assert first.modify_response.append == {"X": "1"}
        assert second.modify_response.append == {"Y": "2"}


class TestClone:
    """Tests for option cloning."""

    def test_clone_is_deep(self):
        """Test a clone does not share header maps with its source."""
        original = VirtualHostOptions(
            ModifyResponseOptions(append={"X": "1"}, remove={"Y": True}),
            security_profile_id="sp",
        )
        clone = original.clone()
        clone.modify_response.append["Z"] = "3"
        clone.modify_response.remove["W"] = True

        assert original.modify_response.append == {"X": "1"}
        assert original.modify_response.remove == {"Y": True}
        assert clone.security_profile_id == "sp"


class TestRouteOptionsTranslation:
    """Tests for header modifications and route options."""

    def test_emission_order(self):
        """Test instructions come out as remove, replace, rename, append."""
        modify = ModifyResponseOptions(
            append={"A": "a"},
            rename={"B": "b"},
            replace={"C": "c"},
            remove={"D": True},
        )

        mods = build_header_modifications(modify)

        assert mods == [
            HeaderModification(name="D", remove=True),
            HeaderModification(name="C", replace="c"),
            HeaderModification(name="B", rename="b"),
            HeaderModification(name="A", append="a"),
        ]

    def test_no_modifications(self):
        """Test empty options produce no instructions."""
        assert build_header_modifications(ModifyResponseOptions()) == []

    def test_route_options_omitted_when_empty(self):
        """Test nothing to set yields None rather than an empty structure."""
        assert build_route_options(ModifyResponseOptions(), "") is None

    def test_route_options_with_security_profile_only(self):
        """Test a security profile alone is enough to emit route options."""
        opts = build_route_options(ModifyResponseOptions(), "sp-1")

        assert opts is not None
        assert opts.security_profile_id == "sp-1"
        assert opts.modify_response_headers == ()
        assert opts.to_dict() == {"securityProfileId": "sp-1"}

    def test_route_options_with_modifications(self):
        """Test header modifications are rendered."""
        opts = build_route_options(ModifyResponseOptions(append={"X": "1"}), "")

        assert opts is not None
        assert opts.to_dict() == {"modifyResponseHeaders": [{"name": "X", "append": "1"}]}
