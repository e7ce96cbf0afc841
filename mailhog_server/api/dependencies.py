"""
FastAPI dependencies shared by the API routers.
"""

from fastapi import Request

from mailhog_server.bootstrap import Config


def get_config(request: Request) -> Config:
    """
    Dependency returning the Config the application was created with.

    Tests can replace it through app.dependency_overrides.
    """
    return request.app.state.config
