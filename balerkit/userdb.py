"""User accounts kept in SQLite, with sign-up and log-in checks."""

from __future__ import annotations

import logging
import os
import sqlite3

logger = logging.getLogger(__name__)

DEFAULT_PATH = "users.db"


class SignUpError(Exception):
    """Registration was refused."""


class LoginError(Exception):
    """Log-in was refused."""


class UserDatabase:
    """Table of usernames and their passwords."""

    def __init__(self, path: str | os.PathLike = DEFAULT_PATH) -> None:
        self.path = os.fspath(path)
        self._conn = sqlite3.connect(self.path)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS users (username TEXT PRIMARY KEY, password TEXT)"
            )
        logger.debug("database path: %s", self.path)

    def __enter__(self) -> UserDatabase:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def user_exists(self, username: str) -> bool:
        row = self._conn.execute(
            "SELECT username FROM users WHERE username = ?", (username,)
        ).fetchone()
        return row is not None

    def insert_user(self, username: str, password: str) -> bool:
        """Add a user; False when the username is taken."""
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT INTO users (username, password) VALUES (?, ?)",
                    (username, password),
                )
        except sqlite3.IntegrityError:
            return False
        return True

    def verify_credentials(self, username: str, password: str) -> bool:
        row = self._conn.execute(
            "SELECT * FROM users WHERE username = ? AND password = ?",
            (username, password),
        ).fetchone()
        return row is not None

    def close(self) -> None:
        self._conn.close()


def sign_up(db: UserDatabase, username: str, password: str, confirm: str) -> None:
    """Register a user after checking the form."""
    if not username or not password or not confirm:
        raise SignUpError("Field is Empty")
    if db.user_exists(username):
        raise SignUpError("Username already exists")
    if confirm != password:
        raise SignUpError("Passwords dont match")
    if not db.insert_user(username, confirm):
        raise SignUpError("Username already exists")


def log_in(db: UserDatabase, username: str, password: str) -> bool:
    """Check a log-in; True on success, LoginError otherwise."""
    if not username or not password:
        raise LoginError("Please enter both username and password")
    if not db.user_exists(username):
        raise LoginError("User not found, please SignUp")
    if not db.verify_credentials(username, password):
        raise LoginError("Incorrect username or password")
    return True