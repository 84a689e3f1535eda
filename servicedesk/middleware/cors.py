"""CORS middleware configuration"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from servicedesk.config import Settings


def setup_cors(app: FastAPI, settings: Settings):
    """
    Allow the dashboard frontend origins to call the API

    Args:
        app: FastAPI application instance
        settings: Settings holding the allowed origins
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
