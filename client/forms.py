"""
client/forms.py -- Form checks run before any network call.

Each validator returns {field: message} for every failing field; an empty
dict means the form may be submitted. The server repeats the checks that
matter, so these exist for fast feedback, not for enforcement.
"""

from __future__ import annotations

import re

# Same shape the server accepts: something@domain.tld
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")


def validate_register_form(
    full_name: str,
    email: str,
    username: str,
    password: str,
    confirm_password: str,
) -> dict[str, str]:
    errors: dict[str, str] = {}

    if not full_name.strip():
        errors["full_name"] = "Full name is required"

    if not email.strip():
        errors["email"] = "Email is required"
    elif not _EMAIL_PATTERN.match(email.strip()):
        errors["email"] = "Please enter a valid email"

    if not username.strip():
        errors["username"] = "Username is required"
    elif len(username.strip()) < 3:
        errors["username"] = "Username must be at least 3 characters"
    elif "@" in username:
        errors["username"] = "Username cannot contain @"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < 6:
        errors["password"] = "Password must be at least 6 characters"

    if not confirm_password:
        errors["confirm_password"] = "Please confirm your password"
    elif password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    return errors


def validate_login_form(identifier: str, password: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not identifier.strip():
        errors["identifier"] = "Username or email is required"
    if not password:
        errors["password"] = "Password is required"
    return errors
