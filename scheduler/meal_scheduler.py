import asyncio
import logging
from datetime import time, tzinfo
from typing import Dict, List

from executor.recipe_mail_executor import RecipeMailExecutor
from models.preference import MealSlot
from scheduler.daily_trigger import SAFETY_DELAY_SECONDS, DailyTrigger

logger = logging.getLogger("recipe_service")


class MealScheduler:
    """One independent DailyTrigger task per meal slot."""

    def __init__(
        self,
        executor: RecipeMailExecutor,
        meal_times: Dict[MealSlot, time],
        tz: tzinfo,
        safety_delay: float = SAFETY_DELAY_SECONDS,
    ):
        self.executor = executor
        self.triggers: List[DailyTrigger] = [
            DailyTrigger(slot.value, at, tz, self._callback_for(slot), safety_delay=safety_delay)
            for slot, at in meal_times.items()
        ]
        self.tasks: List[asyncio.Task] = []

    def _callback_for(self, slot: MealSlot):
        async def run_slot():
            logger.info(f"Cron: Sending {slot.value.title()} Recipes")
            await self.executor.send_for_slot(slot)
        return run_slot

    def start(self):
        if self.tasks:
            return
        for trigger in self.triggers:
            self.tasks.append(asyncio.create_task(trigger.start(), name=f"meal-trigger-{trigger.name}"))
        logger.info(f"Meal scheduler started with {len(self.tasks)} triggers.")

    async def stop(self):
        for trigger in self.triggers:
            trigger.stop()
        # A trigger may be in the middle of a send; don't wait for it
        for task in self.tasks:
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks = []
        logger.info("Meal scheduler stopped.")
