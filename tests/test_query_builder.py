"""Test StatementBuilder clause registration and assembly"""

import pytest

from stmt_builder import Lexicon, Shape, StatementBuilder


def test_select_shape_and_terminator(builder):
    """Test SELECT output starts with SELECT and ends with a semicolon"""
    sql = builder.select('id', 'name').from_('users').get()
    assert sql == 'SELECT id, name FROM `users`;'
    assert sql.startswith('SELECT ')
    assert sql.endswith(';')


def test_where_chain_binds_each_value(builder):
    """Test two where() calls are AND-joined with distinct tokens"""
    sql = builder.select('*').from_('users').where('a', '=', 1).where('b', '=', 2).get()
    tok1, tok2 = builder.get_bindings()
    assert tok1 != tok2
    assert sql == f'SELECT * FROM `users` WHERE `a` = {tok1} AND `b` = {tok2};'
    assert builder.get_bindings() == {tok1: 1, tok2: 2}


def test_where_dotted_field(builder):
    """Test dotted field names are quoted per segment"""
    sql = builder.select('*').from_('users').where('users.id', '=', 7).get()
    (tok,) = builder.get_bindings()
    assert sql == f'SELECT * FROM `users` WHERE `users`.`id` = {tok};'


def test_or_where_appended_after_where(builder):
    """Test or_where entries follow the AND group with OR"""
    sql = builder.select('*').from_('users').where('a', '=', 1).or_where('b', '=', 2).get()
    tok1, tok2 = builder.get_bindings()
    assert sql == f'SELECT * FROM `users` WHERE `a` = {tok1} OR `b` = {tok2};'


def test_or_where_alone_has_no_leading_or(builder):
    """Test a lone or_where still renders a valid WHERE"""
    sql = builder.select('*').from_('users').or_where('b', '=', 2).get()
    (tok,) = builder.get_bindings()
    assert sql == f'SELECT * FROM `users` WHERE `b` = {tok};'


def test_invalid_operator_defaults_to_equals(builder):
    """Test operators outside the whitelist fall back to ="""
    sql = builder.select('*').from_('t').where('a', '<>', 1).get()
    (tok,) = builder.get_bindings()
    assert f'`a` = {tok}' in sql


def test_in_list_rendered_inline(builder):
    """Test sequences are rendered as a literal list instead of bound"""
    sql = builder.select('*').from_('t').where('id', 'in', [1, 2, 3]).get()
    assert sql == 'SELECT * FROM `t` WHERE `id` IN (1,2,3);'
    assert builder.get_bindings() == {}


def test_grouped_where(builder):
    """Test two where-tuples joined by a logical connector"""
    sql = builder.select('*').from_('t').where(['f1', '=', 1], 'or', ['f2', '=', 2]).get()
    tok1, tok2 = builder.get_bindings()
    assert sql == f'SELECT * FROM `t` WHERE (`f1` = {tok1} OR `f2` = {tok2});'
    assert builder.statistics['where'] == 1


def test_grouped_where_invalid_connector_defaults_to_and(builder):
    """Test an unknown connector becomes AND"""
    builder.select('*').from_('t').where(['f1', '=', 1], 'xor', ['f2', '=', 2])
    tok1, tok2 = builder.get_bindings()
    assert builder.get() == f'SELECT * FROM `t` WHERE (`f1` = {tok1} AND `f2` = {tok2});'


def test_grouped_where_embeds_between_and_like(builder):
    """Test where-tuples dispatch to BETWEEN and LIKE renderers"""
    sql = builder.select('*').from_('t').where(['age', 'between', 18, 30], 'and', ['name', 'like', 'bo', 'a%']).get()
    assert sql == 'SELECT * FROM `t` WHERE (`age` BETWEEN 18 AND 30 AND `name` LIKE "bo%");'


def test_grouped_or_where(builder):
    """Test grouped predicates registered through or_where"""
    sql = (builder.select('*').from_('t').where('a', '=', 1)
           .or_where(['b', '=', 2], 'and', ['c', 'notbetween', 1, 5]).get())
    tok_a, tok_b, tok_lo, tok_hi = builder.get_bindings()
    assert sql == (f'SELECT * FROM `t` WHERE `a` = {tok_a} OR '
                   f'(`b` = {tok_b} AND `c` NOT BETWEEN {tok_lo} AND {tok_hi});')


def test_between_coerces_non_numeric_to_zero(builder):
    """Test numeric BETWEEN embeds 0 for non-numeric bounds"""
    sql = builder.select('*').from_('people').between('age', 'abc', 10).get()
    assert sql == 'SELECT * FROM `people` WHERE `age` BETWEEN 0 AND 10;'
    assert builder.get_bindings() == {}


def test_between_accepts_numeric_strings(builder):
    """Test digit strings survive the numeric coercion"""
    builder.select('*').from_('people').between('age', '18', 65.5)
    assert '`age` BETWEEN 18 AND 65.5' in builder.get()


def test_not_between_binds_values(builder):
    """Test NOT BETWEEN binds both bounds unchanged"""
    sql = builder.select('*').from_('people').not_between('age', 'abc', 10).get()
    tok1, tok2 = builder.get_bindings()
    assert sql == f'SELECT * FROM `people` WHERE `age` NOT BETWEEN {tok1} AND {tok2};'
    assert builder.get_bindings() == {tok1: 'abc', tok2: 10}


def test_between_family_order(builder):
    """Test where, between and or-between groups share one WHERE"""
    sql = (builder.select('*').from_('t').where('a', '=', 1)
           .or_between('b', 1, 2).between('c', 3, 4).get())
    (tok,) = builder.get_bindings()
    assert sql == f'SELECT * FROM `t` WHERE `a` = {tok} AND `c` BETWEEN 3 AND 4 OR `b` BETWEEN 1 AND 2;'


def test_like_default_pattern(builder):
    """Test LIKE substitutes the argument into %a%"""
    sql = builder.select('*').from_('users').like('name', 'bob').get()
    assert sql == 'SELECT * FROM `users` WHERE `name` LIKE "%bob%";'


def test_like_prefix_pattern(builder):
    """Test LIKE with the a% pattern"""
    builder.select('*').from_('users').like('name', 'bob', 'a%')
    assert '`name` LIKE "bob%"' in builder.get()


def test_like_invalid_pattern_uses_default(builder):
    """Test unknown patterns fall back to %a%"""
    builder.select('*').from_('users').like('name', 'bob', '_a_')
    assert '`name` LIKE "%bob%"' in builder.get()


def test_like_family_connectors(builder):
    """Test LIKE, OR LIKE, NOT LIKE and OR NOT LIKE ordering"""
    sql = (builder.select('*').from_('u').or_not_like('d', 'w').not_like('c', 'z', '%a')
           .or_like('b', 'y').like('a', 'x').get())
    assert sql == ('SELECT * FROM `u` WHERE `a` LIKE "%x%" OR `b` LIKE "%y%" '
                   'AND `c` NOT LIKE "%z" OR `d` NOT LIKE "%w%";')


def test_strict_mode_binds_like_and_between():
    """Test strict mode parameterizes LIKE and numeric BETWEEN"""
    b = StatementBuilder(strict=True)
    sql = b.select('*').from_('t').between('age', 'abc', 10).like('name', 'bob').get()
    lo, hi, pat = b.get_bindings()
    assert sql == f'SELECT * FROM `t` WHERE `age` BETWEEN {lo} AND {hi} AND `name` LIKE {pat};'
    assert b.get_bindings() == {lo: 'abc', hi: 10, pat: '%bob%'}


def test_insert_shape(builder):
    """Test INSERT with field names and one row of values"""
    sql = builder.insert('users').fieldnames(['a', 'b']).values(['x', 'y']).get()
    tok1, tok2 = builder.get_bindings()
    assert sql == f'INSERT INTO `users` (a, b) VALUES ({tok1}, {tok2});'
    assert builder.get_bindings() == {tok1: 'x', tok2: 'y'}


def test_insert_multi_row_and_fieldname_merge(builder):
    """Test repeated values() calls and de-duplicated fieldnames()"""
    builder.insert('users').fieldnames(['a', 'b']).fieldnames(['b', 'c'])
    builder.values([1, 2, 3]).values((4, 5, 6))
    t = list(builder.get_bindings())
    assert builder.clauses['fieldnames'] == ['a', 'b', 'c']
    assert builder.get() == (f'INSERT INTO `users` (a, b, c) VALUES '
                             f'({t[0]}, {t[1]}, {t[2]}), ({t[3]}, {t[4]}, {t[5]});')


def test_values_with_types(builder):
    """Test per-position bind types are recorded"""
    builder.insert('users').values(['1', 2], ['str', 'int'])
    tok1, tok2 = builder.get_bindings()
    assert builder.get_binding_types() == {tok1: 'str', tok2: 'int'}


def test_binding_types_absent_without_typed_values(builder):
    """Test get_binding_types() is None when nothing was typed"""
    builder.insert('users').values(['x'])
    assert builder.get_binding_types() is None


def test_update_shape(builder):
    """Test UPDATE with SET mapping; None values are skipped"""
    sql = builder.update('users').set({'name': 'bob', 'age': None}).where('id', '=', 1).get()
    tok_name, tok_id = builder.get_bindings()
    assert sql == f'UPDATE `users` SET `name` = {tok_name} WHERE `id` = {tok_id};'
    assert builder.get_bindings() == {tok_name: 'bob', tok_id: 1}


def test_update_without_set_fails_softly(builder):
    """Test UPDATE without SET assignments builds nothing"""
    assert not builder.update('users').where('id', '=', 1).get()


def test_update_with_limit(builder):
    """Test UPDATE carries the limit clause"""
    sql = builder.update('users').set('active', 0).limit(5).get()
    (tok,) = builder.get_bindings()
    assert sql == f'UPDATE `users` SET `active` = {tok} LIMIT 5;'


def test_delete_shape(builder):
    """Test DELETE FROM with WHERE and LIMIT"""
    sql = builder.delete('users').where('id', '=', 1).limit(1).get()
    (tok,) = builder.get_bindings()
    assert sql == f'DELETE FROM `users` WHERE `id` = {tok} LIMIT 1;'


def test_shape_lock_first_writer_wins(builder):
    """Test later shape calls are ignored"""
    builder.select('id').update('users').delete('users').select('other')
    assert builder.shape is Shape.SELECT
    assert builder.clauses['update'] is None
    assert builder.clauses['select'] == ['id']


def test_add_select_ignores_lock(builder):
    """Test add_select extends the select list after the lock"""
    sql = builder.select('id').add_select('name', 'email').from_('users').get()
    assert sql == 'SELECT id, name, email FROM `users`;'


def test_from_with_alias_and_join(builder):
    """Test aliases in FROM and in the inner join"""
    sql = builder.select('*').from_('users u').join('preferences p', 'u.id', 'p.user_id').get()
    assert sql == 'SELECT * FROM `users` `u` INNER JOIN `preferences` `p` ON `p`.`user_id` = `u`.`id`;'


def test_left_and_right_join_use_plain_quoting(builder):
    """Test left/right joins wrap names whole"""
    sql = (builder.select('*').from_('users')
           .right_join('teams', 'users.team_id', 'teams.id')
           .left_join('orders', 'users.id', 'orders.user_id').get())
    assert sql == ('SELECT * FROM `users` '
                   'RIGHT JOIN `teams` ON `teams.id` = `users.team_id` '
                   'LEFT JOIN `orders` ON `orders.user_id` = `users.id`;')
    assert builder.statistics['joins'] == 2


def test_joins_keep_call_order(builder):
    """Test an inner join that depends on an earlier left join is emitted after it"""
    sql = builder.select('*').from_('a').left_join('b', 'aid', 'bid').join('c', 'b.id', 'c.bid').get()
    assert sql == 'SELECT * FROM `a` LEFT JOIN `b` ON `bid` = `aid` INNER JOIN `c` ON `c`.`bid` = `b`.`id`;'


def test_blank_from_source_skipped(builder):
    """Test empty or whitespace-only sources never reach FROM"""
    assert builder.select('1').from_('', '   ').get() == 'SELECT 1;'
    assert builder.reset().select('*').from_('', 'users').get() == 'SELECT * FROM `users`;'


def test_group_having_order(builder):
    """Test GROUP BY, HAVING and ORDER BY placement"""
    sql = (builder.select('dept', 'COUNT(*) AS total').from_('emp').group_by('dept')
           .having('total', '>', 5).or_having('total', '<', 2)
           .order_by('dept', 'desc').order_by('name', 'sideways', 'emp').get())
    hi, lo = builder.get_bindings()
    assert sql == (f'SELECT dept, COUNT(*) AS total FROM `emp` GROUP BY `dept` '
                   f'HAVING `total` > {hi} OR `total` < {lo} ORDER BY `dept` DESC, `emp`.`name` ASC;')


def test_group_by_with_table(builder):
    """Test group_by with a table qualifier"""
    builder.select('*').from_('emp').group_by('dept', 'emp')
    assert builder.get() == 'SELECT * FROM `emp` GROUP BY `emp`.`dept`;'


def test_limit_page_conversion(builder):
    """Test page numbers become row offsets"""
    builder.select('*').from_('t').limit(10, 3, True)
    assert builder.clauses['limit'] == '10, 20'
    assert builder.get_limit() == 10
    assert builder.get() == 'SELECT * FROM `t` LIMIT 10, 20;'


def test_limit_raw_offset(builder):
    """Test as_page=False keeps the offset as given"""
    builder.select('*').from_('t').limit(10, 3, as_page=False)
    assert builder.clauses['limit'] == '10, 3'


@pytest.mark.parametrize('args', [('10',), (-1,), (10, '2'), (True,), (2.5,)])
def test_malformed_limit_is_ignored(builder, args):
    """Test malformed limits leave the clause untouched"""
    builder.select('*').from_('t').limit(*args)
    assert builder.clauses['limit'] is None
    assert builder.get_limit() is None
    assert builder.get() == 'SELECT * FROM `t`;'


def test_get_applies_limit(builder):
    """Test get(limit) sets the limit before building"""
    assert builder.select('*').from_('t').get(5) == 'SELECT * FROM `t` LIMIT 5;'
    assert builder.get_limit() == 5


def test_build_is_idempotent(builder):
    """Test repeated builds give identical output"""
    builder.select('*').from_('t').where('a', '=', 1).like('b', 'x').limit(3)
    assert builder.build() == builder.build()


def test_reset_law(builder, mask_tokens):
    """Test reset() then the same chain matches a fresh builder"""
    def chain(b):
        return b.select('id').from_('users u').where('a', '=', 1).between('age', 1, 9).order_by('id').get()

    builder.update('other').set('x', 1)
    builder.reset()
    assert builder.shape is None
    assert builder.get_bindings() == {}
    assert all(v == 0 for v in builder.statistics.values())
    assert builder.query_id == 'test'
    assert mask_tokens(chain(builder)) == mask_tokens(chain(StatementBuilder()))


def test_nothing_to_build_returns_none():
    """Test an unshaped builder builds nothing"""
    assert StatementBuilder().from_('t').where('a', '=', 1).build() is None


def test_clauses_of_other_shapes_are_ignored(builder):
    """Test SET entries do not leak into a SELECT"""
    builder.select('*').from_('t').set('a', 1)
    assert builder.get() == 'SELECT * FROM `t`;'


def test_statistics_count_registrations(builder):
    """Test each registration increments its counter once"""
    (builder.select('*').from_('t').where('a', '=', 1).or_where('b', '=', 2)
     .between('c', 1, 2).not_like('d', 'x').having('e', '=', 1).join('u', 't.id', 'u.tid'))
    assert builder.statistics == {'joins': 1, 'where': 2, 'between': 1, 'like': 1, 'having': 1}


def test_postgres_dialect_quotes_with_double_quotes():
    """Test the dialect picks the identifier quote character"""
    b = StatementBuilder(dialect='postgresql')
    sql = b.select('*').from_('public.users').like('name', 'bo').get()
    assert sql == 'SELECT * FROM "public"."users" WHERE "name" LIKE \'%bo%\';'


def test_missing_lexicon_keyword_leaves_gap():
    """Test an incomplete lexicon degrades instead of raising"""
    class NoWhere(Lexicon):
        keywords = {k: v for k, v in Lexicon.keywords.items() if k != 'where'}

    b = StatementBuilder(lexicon=NoWhere)
    sql = b.select('*').from_('t').where('a', '=', 1).get()
    (tok,) = b.get_bindings()
    assert 'WHERE' not in sql
    assert sql == f'SELECT * FROM `t`  `a` = {tok};'


def test_quote_helpers(builder):
    """Test quote and quote_dotted on the builder"""
    assert builder.quote('users', 'id') == '`users`.`id`'
    assert builder.quote_dotted('users.id') == '`users`.`id`'
    assert builder.quote_dotted('id') == '`id`'
