import logging
from typing import Any, Dict, Iterable

from email_factory import EmailFactory
from errors import NotFoundError, UpstreamError, ValidationError
from models.preference import MealSlot
from senders.mailer import Mailer
from stores.preference_store import PreferenceStore
from stores.recipe_store import RecipeStore
from stores.recipient_store import RecipientStore
from utils.email_utils import is_valid_email, normalize_email

logger = logging.getLogger("recipe_service")


class RecipeMailExecutor:
    """Picks a random stored recipe and mails it to a set of recipients."""

    def __init__(
        self,
        recipe_store: RecipeStore,
        recipient_store: RecipientStore,
        preference_store: PreferenceStore,
        mailer: Mailer,
        email_factory: EmailFactory,
    ):
        self.recipe_store = recipe_store
        self.recipient_store = recipient_store
        self.preference_store = preference_store
        self.mailer = mailer
        self.email_factory = email_factory

    async def _pick_recipe(self):
        # An empty recipe store is a server-side failure for the send endpoints
        try:
            return await self.recipe_store.random_recipe()
        except NotFoundError as e:
            logger.error(f"Cannot send email, no recipe available: {e.message}")
            raise UpstreamError(f"No recipe available: {e.message}", "Failed to fetch recipe")

    async def send_to_all(self, receivers: Iterable[str]) -> int:
        """
        Merges `receivers` into the recipient set, then mails every stored
        recipient. The request list adds to the stored set, it never replaces it.
        """
        all_emails = await self.recipient_store.add_recipients(receivers)
        if not all_emails:
            raise NotFoundError("No recipients found")

        recipe = await self._pick_recipe()
        email = self.email_factory.render_recipe_email(recipe)

        logger.info("=" * 80)
        logger.info(f"SENDING '{recipe.title}' TO {len(all_emails)} RECIPIENTS")
        logger.info("=" * 80)
        return await self.mailer.send(all_emails, email.subject, email.html_body, email.text_body)

    async def send_single(self, address: str) -> None:
        address = normalize_email(address)
        if not address:
            raise ValidationError("Email is required")
        if not is_valid_email(address):
            raise ValidationError("Invalid email address")

        await self.recipient_store.add_recipients([address])
        recipe = await self._pick_recipe()
        email = self.email_factory.render_recipe_email(recipe)

        logger.info(f"Sending '{recipe.title}' to {address}")
        await self.mailer.send([address], email.subject, email.html_body, email.text_body)

    async def send_for_slot(self, slot: MealSlot) -> Dict[str, Any]:
        """
        Mails one random recipe to everyone who opted in to `slot`.
        Failures are logged per recipient and never abort the batch.
        """
        summary = {"slot": slot.value, "total": 0, "succeeded": 0, "failed": 0}

        emails = await self.preference_store.opted_in(slot)
        summary["total"] = len(emails)
        if not emails:
            logger.info(f"No recipients opted in to {slot.value}. Nothing to send.")
            return summary

        try:
            recipe = await self.recipe_store.random_recipe()
        except NotFoundError:
            logger.warning(f"No recipes stored. Skipping {slot.value} send for {len(emails)} recipients.")
            summary["failed"] = len(emails)
            return summary

        email = self.email_factory.render_recipe_email(recipe, slot)

        logger.info("=" * 80)
        logger.info(f"{slot.value.upper()} SEND: '{recipe.title}' to {len(emails)} recipients")
        logger.info("=" * 80)

        for address in emails:
            # send_one logs and swallows per-recipient failures
            if await self.mailer.send_one(address, email.subject, email.html_body, email.text_body):
                summary["succeeded"] += 1
            else:
                summary["failed"] += 1

        logger.info(
            f"{slot.value.upper()} SEND COMPLETE. Total: {summary['total']}, "
            f"Succeeded: {summary['succeeded']}, Failed: {summary['failed']}"
        )
        return summary
