import pytest
from unittest.mock import AsyncMock, MagicMock

from errors import NotFoundError, SendError
from executor.recipe_mail_executor import RecipeMailExecutor
from models.preference import MealPreference, MealSlot
from senders.mailer import Mailer
from stores.preference_store import PreferenceStore
from stores.recipe_store import RecipeStore
from stores.recipient_store import RecipientStore


# --- Mailer ---

@pytest.mark.asyncio
async def test_mailer_sends_one_message_per_recipient(sender):
    mailer = Mailer(sender, from_email="recipes@example.com")
    delivered = await mailer.send(["a@example.com", "b@example.com"], "Subject", "<p>hi</p>", "hi")

    assert delivered == 2
    assert [m["to"] for m in sender.sent] == ["a@example.com", "b@example.com"]


@pytest.mark.asyncio
async def test_mailer_continues_past_failure_and_reports_it(sender):
    sender.fail_for = {"a@example.com"}
    mailer = Mailer(sender, from_email="recipes@example.com")

    with pytest.raises(SendError) as exc_info:
        await mailer.send(["a@example.com", "b@example.com", "c@example.com"], "Subject", "<p>hi</p>")

    assert exc_info.value.failed == ["a@example.com"]
    assert [m["to"] for m in sender.sent] == ["b@example.com", "c@example.com"]


@pytest.mark.asyncio
async def test_mailer_treats_sender_exception_as_failure():
    broken = MagicMock()
    broken.send = AsyncMock(side_effect=[ConnectionError("reset by peer"), True])
    mailer = Mailer(broken, from_email="recipes@example.com")

    with pytest.raises(SendError) as exc_info:
        await mailer.send(["a@example.com", "b@example.com"], "Subject", "<p>hi</p>")

    assert exc_info.value.failed == ["a@example.com"]
    assert broken.send.await_count == 2


# --- Meal slot sends ---

@pytest.fixture
def executor(firestore_db, sender, email_factory):
    mailer = Mailer(sender, from_email="recipes@example.com")
    return RecipeMailExecutor(
        RecipeStore(firestore_db),
        RecipientStore(firestore_db),
        PreferenceStore(firestore_db),
        mailer,
        email_factory,
    )


@pytest.mark.asyncio
async def test_send_for_slot_only_mails_opted_in(executor, sender, sample_recipe):
    await executor.recipe_store.add_recipes([sample_recipe])
    await executor.preference_store.set_preference(MealPreference(email="a@example.com", breakfast=True))
    await executor.preference_store.set_preference(MealPreference(email="b@example.com", dinner=True))

    summary = await executor.send_for_slot(MealSlot.BREAKFAST)

    assert summary == {"slot": "breakfast", "total": 1, "succeeded": 1, "failed": 0}
    assert [m["to"] for m in sender.sent] == ["a@example.com"]
    assert sender.sent[0]["subject"] == "🍽️ Your Breakfast Recipe for Today!"


@pytest.mark.asyncio
async def test_send_for_slot_logs_and_continues_per_recipient(executor, sender, sample_recipe):
    await executor.recipe_store.add_recipes([sample_recipe])
    for email in ("a@example.com", "b@example.com", "c@example.com"):
        await executor.preference_store.set_preference(MealPreference(email=email, lunch=True))
    sender.fail_for = {"b@example.com"}

    summary = await executor.send_for_slot(MealSlot.LUNCH)

    assert summary["succeeded"] == 2
    assert summary["failed"] == 1
    assert sorted(m["to"] for m in sender.sent) == ["a@example.com", "c@example.com"]


@pytest.mark.asyncio
async def test_send_for_slot_without_subscribers(executor, sender, sample_recipe):
    await executor.recipe_store.add_recipes([sample_recipe])
    summary = await executor.send_for_slot(MealSlot.DINNER)
    assert summary["total"] == 0
    assert sender.sent == []


@pytest.mark.asyncio
async def test_send_for_slot_without_recipes_does_not_raise(executor, sender):
    await executor.preference_store.set_preference(MealPreference(email="a@example.com", dinner=True))
    summary = await executor.send_for_slot(MealSlot.DINNER)
    assert summary == {"slot": "dinner", "total": 1, "succeeded": 0, "failed": 1}
    assert sender.sent == []


@pytest.mark.asyncio
async def test_send_to_all_with_nothing_stored_is_not_found(executor):
    with pytest.raises(NotFoundError):
        await executor.send_to_all([])


# --- Email rendering ---

def test_recipe_email_lists_ingredients_and_steps_in_order(email_factory, sample_recipe):
    email = email_factory.render_recipe_email(sample_recipe)

    assert email.subject == "🍽️ Your Random Recipe for Today!"
    assert "<!DOCTYPE html>" in email.html_body
    positions = [email.html_body.index(f"<li>{item}</li>") for item in sample_recipe.ingredients]
    assert positions == sorted(positions)
    positions = [email.html_body.index(f"<li>{step}</li>") for step in sample_recipe.instructions]
    assert positions == sorted(positions)
    assert "1. Boil the pasta." in email.text_body


def test_recipe_email_escapes_html(email_factory, sample_recipe):
    recipe = sample_recipe.model_copy(update={"description": "<script>alert(1)</script>"})
    email = email_factory.render_recipe_email(recipe)
    assert "<script>" not in email.html_body
    assert "&lt;script&gt;" in email.html_body
