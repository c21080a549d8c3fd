"""Aggregate all API sub-routers."""

from fastapi import APIRouter

from . import public, snippets

api_router = APIRouter()

api_router.include_router(snippets.router)
api_router.include_router(public.router)
