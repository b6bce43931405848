"""
pages.py

Responsibility: Set up the top level pages of the mobile client.

Three pages are registered:
- `loading`: the loading overlay, available from the start
- `password`: the unlock page, emits the lifecycle events below
- `app`: the main application page (holds every sub page)

Password page events and what they trigger:
- `loading`       -> loading page overlays the screen
- `loadingDone`   -> loading page hides
- `passwordReady` -> the app page element becomes visible under the password page
- `passwordDone`  -> the app page is fully shown; the password page is left as it is
"""

from __future__ import annotations

import logging
import traceback
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Element:
    """The root display element of a page."""

    def __init__(self) -> None:
        self.visible = False

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False


class Page:
    def __init__(self, name: str) -> None:
        self.name = name
        self.element = Element()
        self.overlaid = False
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self._handlers[event].append(handler)

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, ())):
            handler(*args)

    @property
    def visible(self) -> bool:
        return self.element.visible

    def show(self) -> None:
        self.overlaid = False
        self.element.show()

    def hide(self) -> None:
        self.overlaid = False
        self.element.hide()

    def overlay(self) -> None:
        """Show on top of whatever is currently displayed."""
        self.overlaid = True
        self.element.show()


class LoadingPage(Page):
    def __init__(self) -> None:
        super().__init__("loading")


class PasswordPage(Page):
    def __init__(self) -> None:
        super().__init__("password")


class AppPage(Page):
    def __init__(self) -> None:
        super().__init__("app")


def _log_alert(message: str, title: str) -> None:
    logger.error("%s: %s", title, message)


def _log_report(err: BaseException) -> None:
    logger.debug("page error reported: %r", err)


class DefaultPages:
    """
    Registry of the top level pages.

    `alert(message, title)` shows an error to the user and `report_error(err)`
    forwards it to analytics; both default to logging.
    """

    def __init__(
        self,
        loading: Page | None = None,
        password_factory: Callable[[], Page] = PasswordPage,
        app_factory: Callable[[], Page] = AppPage,
        *,
        alert: Callable[[str, str], None] = _log_alert,
        report_error: Callable[[BaseException], None] = _log_report,
    ) -> None:
        self._password_factory = password_factory
        self._app_factory = app_factory
        self._alert = alert
        self._report_error = report_error
        self.pages: dict[str, Page | None] = {
            "loading": loading if loading is not None else LoadingPage(),
            "password": None,
            "app": None,
        }

    def _start(self, key: str, factory: Callable[[], Page]) -> None:
        try:
            self.pages[key] = factory()
        except Exception as err:  # noqa: BLE001 - surfaced through alert and report_error
            logger.exception("Error starting %s page", key)
            details = "".join(traceback.format_exception(type(err), err, err.__traceback__))
            self._alert(f"{err}<br />{details}", f"Error starting {key} page")
            self._report_error(err)

    def init(self) -> None:
        self._start("password", self._password_factory)
        self._start("app", self._app_factory)

        password = self.pages["password"]
        if password is None:
            logger.warning("password page unavailable, page events not wired")
            return

        password.on("loading", self._on_loading)
        password.on("loadingDone", self._on_loading_done)
        password.on("passwordReady", self._on_password_ready)
        password.on("passwordDone", self._on_password_done)

    def _on_loading(self) -> None:
        loading = self.pages["loading"]
        if loading is not None:
            loading.overlay()

    def _on_loading_done(self) -> None:
        loading = self.pages["loading"]
        if loading is not None:
            loading.hide()

    def _on_password_ready(self) -> None:
        # Only the element: transparent parts of the password page show the app beneath.
        app = self.pages["app"]
        if app is not None:
            app.element.show()

    def _on_password_done(self) -> None:
        app = self.pages["app"]
        if app is not None:
            app.show()

    def show(self, key: str | None) -> None:
        page = self.pages.get(key) if key else None
        if page is not None:
            page.show()
