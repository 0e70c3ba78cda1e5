from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import List
import contextlib
import json
import logging
import os

from dotenv import load_dotenv

from config import Settings
from dependencies import Services, build_services, get_services
from errors import NotFoundError, ServiceError, ValidationError
from generator.recipe_generator import validate_ingredients
from models.preference import MealPreference
from models.recipe import Recipe
from models.requests import EmailRequest, IngredientsRequest, MealPreferenceRequest, SingleEmailRequest
from scheduler.meal_scheduler import MealScheduler
from utils.email_utils import is_valid_email, normalize_email

# Load environment variables from .env file
load_dotenv()

# Configure logging to file and console
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
    handlers=[
        logging.FileHandler(os.getenv("LOG_FILE", "recipe_service.log")),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger("recipe_service")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=" * 80)
    logger.info("RECIPE SERVICE STARTING")
    logger.info("=" * 80)

    # Missing secrets raise ConfigError here and abort startup
    settings = Settings.from_env()
    app.state.services = build_services(settings)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = MealScheduler(app.state.services.executor, settings.meal_times, settings.schedule_timezone)
        scheduler.start()
    else:
        logger.info("Meal scheduler disabled (SCHEDULER_ENABLED=false).")
    app.state.scheduler = scheduler

    try:
        yield
    finally:
        if scheduler:
            await scheduler.stop()
        logger.info("RECIPE SERVICE STOPPED")


app = FastAPI(title="Recipe Mailer", lifespan=lifespan)


@app.middleware("http")
async def cors(request: Request, call_next):
    # Preflight never reaches a route
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    try:
        response = await call_next(request)
    except Exception:
        # Anything not mapped to a ServiceError still answers with CORS headers
        logger.exception(f"{request.method} {request.url.path} failed unexpectedly")
        return PlainTextResponse("Internal server error", status_code=500, headers=CORS_HEADERS)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return PlainTextResponse(exc.public_message, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"{request.method} {request.url.path} invalid body: {exc.errors()}")
    return PlainTextResponse("Invalid request body", status_code=400)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return PlainTextResponse("Invalid request method", status_code=405, headers=exc.headers)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def _read_receivers(request: Request) -> List[str]:
    """The receiver list is optional; an unreadable body means "no new receivers"."""
    try:
        payload = EmailRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, PydanticValidationError) as e:
        logger.info(f"Invalid request body, fetching stored emails: {e}")
        return []
    return payload.receivers or []


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.put("/send-email")
async def send_email(request: Request, services: Services = Depends(get_services)):
    receivers = await _read_receivers(request)
    logger.info(f"RECEIVED SEND REQUEST with {len(receivers)} new receiver(s)")
    await services.executor.send_to_all(receivers)
    return PlainTextResponse("Emails sent successfully!")


@app.post("/send-single-email")
async def send_single_email(payload: SingleEmailRequest, services: Services = Depends(get_services)):
    await services.executor.send_single(payload.email or "")
    return PlainTextResponse("Email sent successfully!")


@app.api_route("/register-meal-preference", methods=["POST", "PUT"])
async def register_meal_preference(payload: MealPreferenceRequest, services: Services = Depends(get_services)):
    email = normalize_email(payload.email)
    if not email:
        raise ValidationError("Email is required")
    if not is_valid_email(email):
        raise ValidationError("Invalid email address")

    preference = MealPreference(email=email, breakfast=payload.breakfast, lunch=payload.lunch, dinner=payload.dinner)
    await services.preference_store.set_preference(preference)
    logger.info(f"Saved meal preference for {email}: breakfast={preference.breakfast}, lunch={preference.lunch}, dinner={preference.dinner}")
    return PlainTextResponse("Meal preference saved successfully!")


@app.post("/add-recipe")
async def add_recipes(recipes: List[Recipe], services: Services = Depends(get_services)):
    await services.recipe_store.add_recipes(recipes)
    return PlainTextResponse("Recipes added successfully!")


@app.get("/get-all-recipes", response_model=List[Recipe])
async def get_all_recipes(services: Services = Depends(get_services)):
    try:
        return await services.recipe_store.list_recipes()
    except NotFoundError:
        return []


@app.post("/generate-recipes", response_model=List[Recipe])
async def generate_recipes(payload: IngredientsRequest, services: Services = Depends(get_services)):
    ingredients = validate_ingredients(payload.ingredients)
    return await services.generator.generate(ingredients)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8080")))
