"""Dependency injection utilities for API endpoints.

Services are built once in ``create_application`` and kept on
``app.state``; these helpers hand them to route functions.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates

from travel_diary.core.config import Settings
from travel_diary.services.media_storage import MediaStorage
from travel_diary.services.title_generator import TitleGenerator
from travel_diary.services.travel_store import TravelStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_travel_store(request: Request) -> TravelStore:
    return request.app.state.travel_store


def get_media_storage(request: Request) -> MediaStorage:
    return request.app.state.media_storage


def get_title_generator(request: Request) -> TitleGenerator:
    return request.app.state.title_generator


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Store = Annotated[TravelStore, Depends(get_travel_store)]
Media = Annotated[MediaStorage, Depends(get_media_storage)]
Titles = Annotated[TitleGenerator, Depends(get_title_generator)]
Templates = Annotated[Jinja2Templates, Depends(get_templates)]
