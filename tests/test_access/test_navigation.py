"""Tests for the navigation menu."""

import pytest

from medicore.access import ROUTE_POLICY, Role, Section, build_navigation, visible_sections


class TestBuildNavigation:
    @pytest.mark.parametrize("role", list(Role))
    def test_visible_set_equals_policy(self, role):
        assert visible_sections(role) == ROUTE_POLICY[role]

    def test_empty_groups_omitted(self):
        groups = build_navigation(Role.CASHIER)
        keys = [g.key for g in groups]

        assert keys == ["auxiliary", "system"]
        assert [i.section for i in groups[0].items] == [Section.BILLING]

    def test_doctor_menu(self):
        groups = {g.key: [i.section for i in g.items] for g in build_navigation(Role.DOCTOR)}

        assert Section.CONSULTATION in groups["outpatient"]
        assert groups["inpatient"] == [Section.INPATIENTS]
        assert "settings" not in [s.value for s in groups["system"]]

    def test_superadmin_sees_every_group(self):
        assert [g.key for g in build_navigation(Role.SUPERADMIN)] == ["outpatient", "inpatient", "auxiliary", "system"]

    def test_items_carry_paths_and_label_keys(self):
        item = build_navigation(Role.PHARMACIST)[0].items[0]

        assert item.path == "/pharmacy"
        assert item.label_key == "nav.pharmacy"
