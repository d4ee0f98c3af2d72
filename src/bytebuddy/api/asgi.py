"""ASGI entrypoint; settings come from the environment and `.env` files."""

from bytebuddy.api.app import create_app
from bytebuddy.config import Settings
from bytebuddy.containers import build_container

settings = Settings()
app = create_app(build_container(settings))
