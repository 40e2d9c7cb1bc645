# API Module - FastAPI REST endpoints
#
# User registration/login, and encrypted records: cards, login/password
# pairs, notes, binary files.

from .main import create_app, start_api_server

__all__ = ["create_app", "start_api_server"]
