"""Authorization policy for admin-only operations."""

from collections.abc import Callable

AdminPolicy = Callable[[str], bool]


def email_admin_policy(admin_email: str) -> AdminPolicy:
    """Return a policy granting admin to one email, compared case-insensitively."""
    expected = admin_email.strip().lower()

    def is_admin(email: str) -> bool:
        return email.lower() == expected

    return is_admin
