"""ASGI entrypoint for the movie voting API."""

from movie_voting.api.app import create_app
from movie_voting.containers import build_container

app = create_app(build_container())
