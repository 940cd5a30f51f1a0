"""
auth/mailer.py -- Outbound email boundary (stub).

Email delivery is an external collaborator. LogMailer records that a message
would have been sent; swap in a real transport by passing any object with
the same two methods to AuthService / AccountService.

Reset and invitation links contain bearer secrets, so the link itself is
only written at DEBUG level -- useful in local development, silent in
production log configurations.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("inkwell.auth.mailer")


class LogMailer:
    def send_password_reset(self, email: str, link: str) -> None:
        logger.info("Password reset email queued for %s", email)
        logger.debug("Password reset link for %s: %s", email, link)

    def send_invitation(self, email: str, link: str) -> None:
        logger.info("Invitation email queued for %s", email)
        logger.debug("Invitation link for %s: %s", email, link)
