"""Tier Policy Tests."""

import pytest

from slate_agents.policies import can_auto_execute, requires_confirmation
from slate_tools.base import ToolTier


@pytest.fixture
def by_name(registry):
    return registry.lookup


def test_only_read_tier_auto_executes(registry):
    for tool in registry.filter_by_tier(ToolTier.READ):
        assert can_auto_execute(tool)
    for tier in (ToolTier.MUTATE, ToolTier.DESTRUCTIVE):
        for tool in registry.filter_by_tier(tier):
            assert not can_auto_execute(tool)


def test_all_read_batch_runs(by_name):
    assert not requires_confirmation([by_name("get_scenes"), by_name("get_cast")])


@pytest.mark.parametrize("write", ["create_scene", "assign_scene_to_day", "delete_element"])
def test_any_write_holds_the_batch(by_name, write):
    assert requires_confirmation([by_name("get_scenes"), by_name(write)])
    assert requires_confirmation([by_name(write)])


def test_requires_confirmation_accepts_generators(by_name):
    names = ["get_scenes", "delete_scene"]
    assert requires_confirmation(by_name(n) for n in names)
