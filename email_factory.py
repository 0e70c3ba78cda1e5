from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError
import os
import logging
from typing import Any, Dict, NamedTuple, Optional

from errors import ConfigError, UpstreamError
from models.preference import MealSlot
from models.recipe import Recipe
from senders.base_sender import BaseSender
from senders.log_sender import LogSender
from senders.smtp_sender import SMTPSender

logger = logging.getLogger("recipe_service")

RECIPE_TEMPLATE_FOLDER = "recipe_email"


class RenderedEmail(NamedTuple):
    subject: str
    html_body: str
    text_body: str


class EmailFactory:
    def __init__(self, template_dir: str):
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=lambda name: bool(name) and name.endswith(".html.j2"),
            undefined=StrictUndefined,
        )

    def get_sender(self, provider: str, credentials_json: Dict[str, Any]) -> BaseSender:
        provider = provider.lower()
        if provider == "smtp":
            return SMTPSender(credentials_json)
        elif provider == "log":
            return LogSender(credentials_json)
        else:
            raise ConfigError(f"Unsupported mail provider: {provider}")

    def render_template(self, folder: str, template_name: str, context: dict) -> str:
        """
        folder: template folder under the template dir
        template_name: subject.txt, body.html.j2, body.txt.j2
        """
        template_path = f"{folder}/{template_name}"
        logger.debug(f"Loading template: {template_path}")
        try:
            template = self.env.get_template(template_path)
            return template.render(context)
        except TemplateError as e:
            logger.error(f"Failed to render template {template_path}: {e}")
            raise UpstreamError(f"Template {template_path} failed: {e}")

    def render_recipe_email(self, recipe: Recipe, slot: Optional[MealSlot] = None) -> RenderedEmail:
        context = {
            "recipe": recipe,
            "slot_label": slot.value.title() if slot else None,
        }
        return RenderedEmail(
            subject=self.render_template(RECIPE_TEMPLATE_FOLDER, "subject.txt", context).strip(),
            html_body=self.render_template(RECIPE_TEMPLATE_FOLDER, "body.html.j2", context),
            text_body=self.render_template(RECIPE_TEMPLATE_FOLDER, "body.txt.j2", context),
        )
