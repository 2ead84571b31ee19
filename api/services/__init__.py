"""Workflows used by the blueprints; instances live in app.extensions."""
from flask import current_app


def get_service(name: str):
    return current_app.extensions[name]
