"""Best-effort side effects (emails, cache revalidation) run after commit.

Workflow functions queue effects on a ``SideEffects`` instance instead of
performing them inline. The HTTP layer flushes the queue from a FastAPI
background task once the response is sent, so a slow or failing channel
never blocks or fails the transition that produced it. A retry policy, if
ever needed, belongs in ``flush``.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import BackgroundTasks

from app.mail import mailer
from app.mail.templates import EmailContent
from app.services import revalidation

logger = logging.getLogger(__name__)


@dataclass
class _Effect:
    label: str
    func: Callable[..., Any]
    args: tuple
    kwargs: dict


def _deliver_email(to: str, content: EmailContent) -> None:
    result = mailer.send_email(to, content.subject, content.html, content.text)
    if not result.ok:
        logger.warning("Email '%s' to %s was not delivered", content.subject, to)


class SideEffects:
    """Per-request queue of fire-and-forget actions."""

    def __init__(self) -> None:
        self._pending: list[_Effect] = []
        self.emails: list[tuple[str, EmailContent]] = []

    def defer(self, label: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self._pending.append(_Effect(label, func, args, kwargs))

    def email(self, to: Optional[str], content: EmailContent) -> None:
        if not to:
            logger.debug("No recipient for '%s', email skipped", content.subject)
            return
        self.emails.append((to, content))
        self.defer(f"email:{content.subject}", _deliver_email, to, content)

    def revalidate(self, *paths: str) -> None:
        for path in paths:
            self.defer(f"revalidate:{path}", revalidation.revalidate_path, path)

    @property
    def pending(self) -> list[str]:
        return [effect.label for effect in self._pending]

    def flush(self) -> int:
        """Run every queued effect; returns how many failed."""
        effects, self._pending = self._pending, []
        failures = 0
        for effect in effects:
            try:
                effect.func(*effect.args, **effect.kwargs)
            except Exception:
                failures += 1
                logger.exception("Side effect %s failed", effect.label)
        if failures:
            logger.warning("%d of %d side effects failed", failures, len(effects))
        return failures


def get_side_effects(background_tasks: BackgroundTasks) -> SideEffects:
    """FastAPI dependency: the queue is flushed after the response is sent."""
    effects = SideEffects()
    background_tasks.add_task(effects.flush)
    return effects
