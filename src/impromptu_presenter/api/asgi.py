"""ASGI entrypoint for the impromptu presenter API."""

from impromptu_presenter.api.app import create_app
from impromptu_presenter.containers import build_container

app = create_app(build_container())
