import logging
import os
from dataclasses import dataclass

from fastapi import Request

from config import Settings
from email_factory import EmailFactory
from errors import ConfigError
from executor.recipe_mail_executor import RecipeMailExecutor
from generator.recipe_generator import RecipeGenerator
from senders.mailer import Mailer
from stores.firestore_client import create_firestore_client
from stores.preference_store import PreferenceStore
from stores.recipe_store import RecipeStore
from stores.recipient_store import RecipientStore

logger = logging.getLogger("recipe_service")

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")


@dataclass
class Services:
    recipe_store: RecipeStore
    recipient_store: RecipientStore
    preference_store: PreferenceStore
    mailer: Mailer
    email_factory: EmailFactory
    generator: RecipeGenerator
    executor: RecipeMailExecutor


def build_services(settings: Settings) -> Services:
    """Creates the single Firestore client and every collaborator that shares it."""
    client = create_firestore_client(settings.firebase_credentials, settings.firebase_project_id)

    email_factory = EmailFactory(TEMPLATE_DIR)
    sender = email_factory.get_sender(settings.mail_provider, settings.smtp.model_dump())
    mailer = Mailer(sender, from_email=settings.mail_from, from_name=settings.mail_from_name)

    recipe_store = RecipeStore(client)
    recipient_store = RecipientStore(client)
    preference_store = PreferenceStore(client)

    return Services(
        recipe_store=recipe_store,
        recipient_store=recipient_store,
        preference_store=preference_store,
        mailer=mailer,
        email_factory=email_factory,
        generator=RecipeGenerator(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            count=settings.recipe_count,
        ),
        executor=RecipeMailExecutor(recipe_store, recipient_store, preference_store, mailer, email_factory),
    )


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise ConfigError("Services requested before application startup")
    return services
