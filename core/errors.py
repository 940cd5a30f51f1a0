"""
core/errors.py -- Domain error kinds shared by every service layer.

Each error carries a machine-readable code, a human message, and the HTTP
status the transport layer should answer with. Services raise these;
api/main.py renders them into the standard ErrorResponse envelope. Nothing
below api/ ever builds an HTTP response itself.

Enumeration-sensitive flows (login, forgot-password) deliberately reuse one
error/message for several underlying conditions -- do not split them.

Layer rule: core/ is the kernel. No imports from api/, auth/, or content/.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for all expected, client-facing failures."""

    code: str = "internal_error"
    message: str = "An unexpected error occurred."
    status_code: int = 500

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class EmailExists(AppError):
    code = "email_exists"
    message = "Email already exists."
    status_code = 409


class InvalidCredentials(AppError):
    code = "invalid_credentials"
    message = "Invalid credentials."
    status_code = 401


class InvalidRefreshToken(AppError):
    code = "invalid_refresh_token"
    message = "Invalid refresh token."
    status_code = 401


class RefreshTokenExpired(AppError):
    code = "refresh_token_expired"
    message = "Refresh token expired."
    status_code = 401


class InvalidResetToken(AppError):
    code = "invalid_reset_token"
    message = "Invalid or expired reset token."
    status_code = 400


class ResetTokenExpired(AppError):
    code = "reset_token_expired"
    message = "Reset token expired."
    status_code = 400


class InvalidToken(AppError):
    """Access token failed verification. Signature, format and expiry
    failures are intentionally indistinguishable."""

    code = "invalid_token"
    message = "Invalid or expired token."
    status_code = 401


class InvalidPassword(AppError):
    code = "invalid_password"
    message = "Current password is incorrect."
    status_code = 401


class Forbidden(AppError):
    code = "forbidden"
    message = "Insufficient permissions."
    status_code = 403


class UserNotFound(AppError):
    code = "user_not_found"
    message = "User not found."
    status_code = 404


class InvalidRole(AppError):
    code = "invalid_role"
    message = "Unknown role."
    status_code = 400


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class CategoryNotFound(AppError):
    code = "category_not_found"
    message = "Category not found."
    status_code = 404


class ParentNotFound(AppError):
    code = "parent_not_found"
    message = "Parent category not found."
    status_code = 404


class SlugExists(AppError):
    code = "slug_exists"
    message = "Category slug already exists."
    status_code = 409


class InvalidSlug(AppError):
    code = "invalid_slug"
    message = "Category slug must contain at least one letter or digit."
    status_code = 400


class CircularReference(AppError):
    code = "circular_reference"
    message = "Category hierarchy cannot contain a cycle."
    status_code = 400


class InvalidArticleAction(AppError):
    code = "invalid_article_action"
    message = "Invalid article action."
    status_code = 400


class ArticleNotFound(AppError):
    code = "article_not_found"
    message = "Article not found."
    status_code = 404


class CommentNotFound(AppError):
    code = "comment_not_found"
    message = "Comment not found."
    status_code = 404


# ---------------------------------------------------------------------------
# Generic store failures -- wrap SQLAlchemyError without leaking internals
# ---------------------------------------------------------------------------


class CreateFailed(AppError):
    code = "create_failed"
    message = "Failed to create record."


class UpdateFailed(AppError):
    code = "update_failed"
    message = "Failed to update record."


class DeleteFailed(AppError):
    code = "delete_failed"
    message = "Failed to delete record."


class FetchFailed(AppError):
    code = "fetch_failed"
    message = "Failed to fetch records."
