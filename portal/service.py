"""HTTP API for accounts, contact messages and the prediction proxy."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List

from fastapi import Body, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from .accounts import AccountService
from .config import Settings, load_settings
from .contacts import ContactService
from .database import DocumentStore, create_store
from .errors import DuplicateAccountError, InvalidCredentialsError, UpstreamError
from .models import Contact
from .prediction import PredictionClient
from .security import PasswordHasher

logger = logging.getLogger("insurance_portal.service")


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    message: str
    name: str


class ContactView(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    name: str
    email: str
    message: str
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")


def _contact_to_view(contact: Contact) -> ContactView:
    return ContactView(
        id=contact.id,
        name=contact.name,
        email=contact.email,
        message=contact.message,
        created_at=contact.created_at,
        updated_at=contact.updated_at,
    )


def _json_message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def register_api_routes(
    app: FastAPI,
    *,
    accounts: AccountService,
    contacts: ContactService,
    predictor: PredictionClient,
    store: DocumentStore,
) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    @app.get("/healthz")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok", "database": "connected" if store.ping() else "degraded"}

    @app.post(
        "/api/contact",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    def submit_contact(request: ContactRequest):
        try:
            contacts.submit(request.name, request.email, request.message)
        except Exception:
            logger.exception("Error saving contact message")
            return _json_message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error saving contact message.")
        return MessageResponse(message="Contact message saved successfully.")

    @app.get("/api/contact", response_model=List[ContactView])
    def list_contacts():
        try:
            stored = contacts.list_all()
        except Exception:
            logger.exception("Error fetching contact messages")
            return _json_message(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Error fetching contact messages."
            )
        return [_contact_to_view(contact) for contact in stored]

    @app.post(
        "/api/signup",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    def signup(request: SignupRequest):
        try:
            accounts.register(
                request.first_name,
                request.last_name,
                request.email,
                request.password,
            )
        except DuplicateAccountError:
            return _json_message(status.HTTP_400_BAD_REQUEST, "User already exists")
        except Exception:
            logger.exception("Error registering user")
            return _json_message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error registering user.")
        return MessageResponse(message="User registered successfully")

    @app.post("/api/login", response_model=LoginResponse)
    def login(request: LoginRequest):
        try:
            user = accounts.authenticate(request.email, request.password)
        except InvalidCredentialsError:
            return _json_message(status.HTTP_401_UNAUTHORIZED, "Invalid email or password")
        except Exception:
            logger.exception("Error logging in")
            return _json_message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error logging in.")
        return LoginResponse(message="Login successful", name=user.first_name)

    @app.post("/predict")
    async def predict(payload: Dict[str, Any] = Body(...)):
        try:
            result = await predictor.predict(payload)
        except UpstreamError:
            logger.exception("Error calling prediction service at %s", predictor.url)
            return _json_message(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "Error processing prediction request"
            )
        return JSONResponse(content=result)


def create_app(
    *,
    settings: Settings | None = None,
    store: DocumentStore | None = None,
    hasher: PasswordHasher | None = None,
    predictor: PredictionClient | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the insurance portal."""

    app_settings = settings or load_settings()
    app_store = store or create_store(app_settings)
    app_hasher = hasher or PasswordHasher(rounds=app_settings.bcrypt_rounds)
    app_predictor = predictor or PredictionClient(
        app_settings.prediction_url,
        timeout=app_settings.prediction_timeout,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await run_in_threadpool(app_store.connect)
        try:
            yield
        finally:
            await app_predictor.aclose()
            app_store.close()
            logger.info("Shut down insurance portal API")

    app = FastAPI(
        title="Insurance Portal API",
        version="0.1.0",
        description="Accounts, contact messages and insurance-charge predictions.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(app_settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    accounts = AccountService(app_store, app_hasher)
    contacts = ContactService(app_store)

    app.state.settings = app_settings
    app.state.store = app_store
    app.state.accounts = accounts
    app.state.contacts = contacts
    app.state.predictor = app_predictor

    register_api_routes(
        app,
        accounts=accounts,
        contacts=contacts,
        predictor=app_predictor,
        store=app_store,
    )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        logger.info("Rejected invalid request body for %s: %s", request.url.path, fields)
        return _json_message(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    return app


__all__ = ["create_app", "register_api_routes"]
