import lxml.etree as etree
import pytest

from tal.tal_datatypes import TemplateError
from tal.tal_language import TAL_NAMESPACE, RepeatItem, TALLanguage
from tal.tal_template import Template


def render(body, data=None):
    tree = Template(f'<div xmlns:tal="{TAL_NAMESPACE}">{body}</div>').process(data)
    etree.cleanup_namespaces(tree)
    return etree.tostring(tree.getroot(), encoding="unicode")


class User:
    def __init__(self, name):
        self._name = name

    def name(self):
        return self._name


def test_tags_follow_tal_precedence():
    assert TALLanguage().tags == ["define", "condition", "repeat", "content", "replace", "attributes", "omit-tag"]


def test_content_text():
    assert render('<p tal:content="title">placeholder <b>x</b></p>', {"title": "a < b"}) == \
        "<div><p>a &lt; b</p></div>"


def test_content_undefined_clears():
    assert render('<p tal:content="missing">placeholder</p>') == "<div><p/></div>"


def test_content_structure():
    assert render('<p tal:content="structure html"/>', {"html": "one <b>two</b> three"}) == \
        "<div><p>one <b>two</b> three</p></div>"


def test_content_structure_must_be_well_formed():
    with pytest.raises(TemplateError):
        render('<p tal:content="structure html"/>', {"html": "<b>"})


def test_replace():
    assert render('<p>a <span tal:replace="name">x</span> c</p>', {"name": "b"}) == "<div><p>a b c</p></div>"
    assert render('<p>a <span tal:replace="missing">x</span> c</p>') == "<div><p>a  c</p></div>"
    assert render('<p tal:replace="structure html"/>', {"html": "<i>x</i><i>y</i>"}) == \
        "<div><i>x</i><i>y</i></div>"


def test_condition():
    data = {"yes": True, "no": []}
    assert render('<a tal:condition="yes"/><b tal:condition="no"/><c tal:condition="not:no"/>', data) == \
        "<div><a/><c/></div>"


def test_define_local_and_global():
    body = ('<section tal:define="x string:one; global y string:two">'
            '<p tal:content="x"/></section>'
            '<p tal:content="x | string:none"/><p tal:content="y"/>')
    # 'string:none' is a path alternative here, so it stays undefined
    assert render(body) == "<div><section><p>one</p></section><p/><p>two</p></div>"


def test_define_with_escaped_semicolon():
    assert render('<p tal:define="x string:a;; b" tal:content="x"/>') == "<div><p>a; b</p></div>"


def test_define_precedes_condition_and_content():
    assert render('<p tal:condition="flag" tal:content="flag" tal:define="flag string:on"/>') == \
        "<div><p>on</p></div>"


def test_repeat():
    data = {"users": [User("Henson"), User("Workshop")]}
    body = '<ul><li tal:repeat="user users" tal:content="user/name"/></ul>'
    assert render(body, data) == "<div><ul><li>Henson</li><li>Workshop</li></ul></div>"


def test_repeat_variables():
    body = ('<i tal:repeat="x xs" tal:attributes="class string:${repeat/x/number}-${repeat/x/odd}"'
            ' tal:content="x"/>')
    assert render(body, {"xs": ["a", "b"]}) == '<div><i class="1-False">a</i><i class="2-True">b</i></div>'


def test_repeat_keeps_surrounding_text():
    body = '<ul>\n<li tal:repeat="x xs" tal:content="x"/>\n</ul>'
    assert render(body, {"xs": [1, 2]}) == "<div><ul>\n<li>1</li><li>2</li>\n</ul></div>"


def test_repeat_empty_or_missing_removes():
    assert render('<a tal:repeat="x xs"/><b tal:repeat="x missing"/>', {"xs": []}) == "<div/>"


def test_nested_repeat_and_conditions_inside_copies():
    body = '<p tal:repeat="row rows"><b tal:repeat="cell row"><i tal:condition="cell" tal:content="cell"/></b></p>'
    assert render(body, {"rows": [[1, 0], [2]]}) == \
        "<div><p><b><i>1</i></b><b/></p><p><b><i>2</i></b></p></div>"


def test_condition_is_evaluated_before_repeat():
    body = '<b tal:repeat="cell cells" tal:condition="cell"/>'
    assert render(body, {"cells": [1, 2]}) == "<div/>"


def test_repeat_binding_is_local_to_copies():
    body = '<a tal:repeat="x xs"/><b tal:content="x | fallback"/>'
    assert render(body, {"xs": [1], "fallback": "none"}) == "<div><a/><b>none</b></div>"


def test_attributes():
    body = '<a href="old" title="t" tal:attributes="href url; title missing; data-n string:${n}"/>'
    assert render(body, {"url": "http://example.com/", "n": 3}) == \
        '<div><a href="http://example.com/" data-n="3"/></div>'


def test_attributes_with_namespace_prefix():
    body = '<a tal:attributes="xml:lang string:en"/>'
    assert render(body) == '<div><a xml:lang="en"/></div>'
    with pytest.raises(TemplateError):
        render('<a tal:attributes="nope:lang string:en"/>')


def test_omit_tag():
    body = '<p>a <span tal:omit-tag="">b <i tal:content="c"/></span> d</p>'
    assert render(body, {"c": "C"}) == "<div><p>a b <i>C</i> d</p></div>"


def test_omit_tag_false_keeps_element():
    assert render('<span tal:omit-tag="no">x</span>', {"no": 0}) == "<div><span>x</span></div>"


def test_omit_tag_of_empty_element():
    assert render('<p>a<span tal:omit-tag=""/>b</p>') == "<div><p>ab</p></div>"


def test_malformed_arguments():
    with pytest.raises(TemplateError):
        render('<p tal:repeat="onlyname"/>')
    with pytest.raises(TemplateError):
        render('<p tal:define="global"/>')


def test_repeat_item():
    item = RepeatItem(0, 3)
    assert (item.index(), item.number(), item.start(), item.end(), item.even(), item.odd()) == \
        (0, 1, True, False, True, False)
    assert RepeatItem(2, 3).end()
    assert RepeatItem(2, 3).length() == 3


def test_repeat_over_a_non_sequence():
    with pytest.raises(TemplateError, match="needs a sequence"):
        render('<i tal:repeat="x n"/>', {"n": 5})
