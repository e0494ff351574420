"""Rendering of user-authored email templates with Jinja2.

Templates are written by users, so they run in a sandboxed environment.
Unknown variables render as empty strings rather than failing the whole
campaign.
"""

import logging
from typing import Any, Dict, Optional

from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment

from pitchmatch.domain.models import Contact, Opportunity

from .exceptions import TemplateRenderError

logger = logging.getLogger(__name__)


class MessageRenderer:
    """Renders subject and body strings against a contact and optional lead.

    Available variables: ``first_name``, ``last_name``, ``email``,
    ``company``, ``title``, ``industry`` and, with a lead, ``journalist_name``,
    ``publication``, ``topic`` and ``deadline``.
    """

    def __init__(self):
        self.env = SandboxedEnvironment(autoescape=False, keep_trailing_newline=True)

    @staticmethod
    def build_context(contact: Contact, opportunity: Optional[Opportunity] = None) -> Dict[str, Any]:
        context = {
            "first_name": contact.first_name or "",
            "last_name": contact.last_name or "",
            "email": contact.email,
            "company": contact.company or "",
            "title": contact.title or "",
            "industry": (contact.industry or "").strip(),
        }
        if opportunity is not None:
            context.update(
                {
                    "journalist_name": opportunity.journalist_name,
                    "publication": opportunity.publication or "",
                    "topic": opportunity.subject or "",
                    "deadline": opportunity.deadline.isoformat() if opportunity.deadline else "",
                }
            )
        return context

    def render(self, source: str, context: Dict[str, Any]) -> str:
        """Render one template string.

        Raises:
            TemplateRenderError: On syntax errors or sandbox violations
        """
        try:
            return self.env.from_string(source).render(context)
        except TemplateError as e:
            logger.warning(
                f"Failed to render template: {e}",
                extra={"event": "template.render_failed", "error_type": type(e).__name__},
            )
            raise TemplateRenderError(f"Template rendering failed: {e}") from e

    def render_message(
        self, subject: str, body: str, contact: Contact, opportunity: Optional[Opportunity] = None
    ) -> Dict[str, str]:
        """Render a subject/body pair. The subject is collapsed to one line."""
        context = self.build_context(contact, opportunity)
        rendered_subject = self.render(subject, context).strip().replace("\n", " ")
        return {"subject": rendered_subject, "body": self.render(body, context)}
