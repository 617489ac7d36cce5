import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError

from byteletters.domain.errors import HashingError

DEFAULT_BCRYPT_ROUNDS = 12
BCRYPT_MIN_ROUNDS = 4
BCRYPT_MAX_ROUNDS = 31
BCRYPT_MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher:
    """Password hasher backed by bcrypt with a configurable cost factor."""

    scheme = "bcrypt"

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        if not BCRYPT_MIN_ROUNDS <= rounds <= BCRYPT_MAX_ROUNDS:
            raise HashingError(
                f"bcrypt rounds must be between {BCRYPT_MIN_ROUNDS} and "
                f"{BCRYPT_MAX_ROUNDS}, got {rounds}"
            )
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        if not password:
            raise HashingError("Password must not be empty")

        try:
            encoded = password.encode("utf-8")
        except UnicodeEncodeError as e:
            raise HashingError("Password is not valid UTF-8 text") from e

        # bcrypt ignores (or, in newer releases, rejects) input past 72 bytes
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            raise HashingError(
                f"Password exceeds {BCRYPT_MAX_PASSWORD_BYTES} bytes, the bcrypt input limit"
            )

        try:
            hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError) as e:
            raise HashingError(f"bcrypt failed to hash password: {e}") from e
        return hashed.decode("ascii")

    def verify_password(self, plain: str, hashed: str) -> bool:
        if not plain or not hashed:
            return False
        try:
            return bool(bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("ascii")))
        except (ValueError, UnicodeEncodeError):
            return False


class Argon2PasswordHasher:
    scheme = "argon2"

    def __init__(self) -> None:
        self.ph = PasswordHasher()

    def hash_password(self, password: str) -> str:
        if not password:
            raise HashingError("Password must not be empty")
        try:
            return str(self.ph.hash(password))
        except UnicodeEncodeError as e:
            raise HashingError("Password is not valid UTF-8 text") from e
        except Argon2HashingError as e:
            raise HashingError(f"argon2 failed to hash password: {e}") from e

    def verify_password(self, password: str, hash_str: str) -> bool:
        if not password or not hash_str:
            return False
        try:
            self.ph.verify(hash_str, password)
            return True
        except (VerificationError, InvalidHashError, UnicodeEncodeError):
            return False


def build_password_hasher(
    scheme: str, bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
) -> BcryptPasswordHasher | Argon2PasswordHasher:
    if scheme == "bcrypt":
        return BcryptPasswordHasher(rounds=bcrypt_rounds)
    if scheme == "argon2":
        return Argon2PasswordHasher()
    raise HashingError(f"Unknown password hashing scheme: {scheme}")
