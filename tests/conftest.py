"""Shared fixtures: a localization excerpt and parsers built from it."""

import pytest

from gluemc.parsing.death import build_death_templates
from gluemc.parsing.parser import LineParser
from gluemc.parsing.table import DeathTemplateTable

from .helpers import EN_US_EXCERPT


@pytest.fixture
def templates():
    """Death templates compiled from the excerpt."""
    return build_death_templates(EN_US_EXCERPT.splitlines())


@pytest.fixture
def death_table(templates):
    """A freshly installed template table, independent of the global one."""
    table = DeathTemplateTable()
    table.install(templates)
    return table


@pytest.fixture
def parser(death_table):
    """Line parser using the excerpt's death templates."""
    return LineParser(table=death_table)
