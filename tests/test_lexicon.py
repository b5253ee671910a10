"""Test Lexicon keyword lookup and whitelist validation"""

import pytest

from stmt_builder import Lexicon


def test_key_upper_cases():
    """Test keywords come back upper-cased"""
    assert Lexicon.key('notbetween') == 'NOT BETWEEN'
    assert Lexicon.key('leftjoin') == 'LEFT JOIN'
    assert Lexicon.key('insert') == 'INSERT INTO'


def test_unknown_key_is_none():
    """Test unknown keyword names return None"""
    assert Lexicon.key('upsert') is None


@pytest.mark.parametrize('candidate,group,expected', [
    ('desc', 'directions', 'DESC'),
    ('DESC', 'directions', 'DESC'),
    ('sideways', 'directions', 'ASC'),
    (None, 'directions', 'ASC'),
    ('or', 'logical', 'OR'),
    ('xor', 'logical', 'AND'),
    ('>=', 'equality', '>='),
    ('not in', 'equality', 'NOT IN'),
    ('LIKE', 'equality', '='),
    ('a%', 'like', 'A%'),
    ('_a_', 'like', '%A%'),
])
def test_validate(candidate, group, expected):
    """Test whitelist members pass and others fall back to the default"""
    assert Lexicon.validate(candidate, group) == expected


def test_validate_unknown_group():
    """Test unknown groups return None"""
    assert Lexicon.validate('asc', 'colors') is None


def test_members():
    """Test whitelist access by group"""
    assert Lexicon.members('like') == ['%a%', 'a%', '%a']
    assert Lexicon.members('colors') == []


def test_subclass_swaps_vocabulary():
    """Test a subclass can replace keyword text"""
    class Shouting(Lexicon):
        keywords = {**Lexicon.keywords, 'where': 'where /* filtered */'}

    assert Shouting.key('where') == 'WHERE /* FILTERED */'
    assert Lexicon.key('where') == 'WHERE'
