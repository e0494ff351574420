"""Tests for user template rendering."""

from datetime import date

import pytest

from pitchmatch.campaigns import MessageRenderer, TemplateRenderError
from tests.helpers import make_contact, make_opportunity


@pytest.fixture
def renderer():
    return MessageRenderer()


def test_render_contact_fields(renderer):
    contact = make_contact(last_name="Doe", company="Acme", title="CEO")
    context = renderer.build_context(contact)

    result = renderer.render("{{ first_name }} {{ last_name }}, {{ title }} at {{ company }}", context)

    assert result == "Jane Doe, CEO at Acme"


def test_context_without_opportunity(renderer):
    context = renderer.build_context(make_contact(industry=" Tech "))
    assert context["industry"] == "Tech"
    assert "journalist_name" not in context


def test_context_with_opportunity(renderer):
    opportunity = make_opportunity(
        journalist_name="Sam", publication="Wired", subject="Robots", deadline=date(2026, 2, 1)
    )
    context = renderer.build_context(make_contact(), opportunity)

    assert context["journalist_name"] == "Sam"
    assert context["publication"] == "Wired"
    assert context["topic"] == "Robots"
    assert context["deadline"] == "2026-02-01"


def test_missing_values_render_empty(renderer):
    context = renderer.build_context(make_contact(company=None))
    assert renderer.render("[{{ company }}][{{ not_a_field }}]", context) == "[][]"


def test_syntax_error_raises(renderer):
    with pytest.raises(TemplateRenderError, match="Template rendering failed"):
        renderer.render("Hello {{ first_name", {})


def test_render_message_collapses_subject(renderer):
    message = renderer.render_message(
        "Quick idea\nfor {{ first_name }} ", "Hi {{ first_name }},\n\nBody", make_contact()
    )
    assert message == {"subject": "Quick idea for Jane", "body": "Hi Jane,\n\nBody"}


def test_render_message_with_opportunity(renderer):
    message = renderer.render_message(
        "Re: {{ topic }}", "{{ journalist_name }} at {{ publication }}", make_contact(),
        make_opportunity(journalist_name="Sam", publication="Wired", subject="Robots"),
    )
    assert message["subject"] == "Re: Robots"
    assert message["body"] == "Sam at Wired"
