import sys
import argparse
import asyncio
import logging
import pathlib

# Ensure we are in the correct directory regardless of how this is called
SCRIPT_DIR = str(pathlib.Path(__file__).parent.absolute())
sys.path.insert(0, SCRIPT_DIR)

from dotenv import load_dotenv
load_dotenv()

from config import Settings
from dependencies import build_services
from errors import ServiceError
from models.preference import MealSlot
from recipe_loader import RecipeLoader

logger = logging.getLogger("recipe_service")


async def send_slot(slot: MealSlot) -> int:
    services = build_services(Settings.from_env())
    summary = await services.executor.send_for_slot(slot)
    print(f"{slot.value}: {summary['succeeded']}/{summary['total']} sent, {summary['failed']} failed")
    return 0 if summary["failed"] == 0 else 1


async def import_recipes(path: str) -> int:
    recipes = RecipeLoader().load(path)
    services = build_services(Settings.from_env())
    written = await services.recipe_store.add_recipes(recipes)
    print(f"Imported {written} recipes from {path}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="One-off recipe mailer tasks.")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send-slot", help="Send today's recipe for a meal slot right now.")
    send.add_argument("slot", choices=[s.value for s in MealSlot])

    imp = sub.add_parser("import-recipes", help="Bulk import recipes from a JSON or CSV file.")
    imp.add_argument("path")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        if args.command == "send-slot":
            return asyncio.run(send_slot(MealSlot(args.slot)))
        return asyncio.run(import_recipes(args.path))
    except ServiceError as e:
        logger.error(f"{args.command} failed: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
