"""User model definition."""

from datetime import datetime

from utils.passwords import hash_password, verify_password

from . import db


ROLES = ("user", "admin")
DEFAULT_ROLE = "user"


class User(db.Model):
    """Represents an account that can sign in."""

    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    )

    id = db.Column(db.Integer, primary_key=True)
    fullname = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.String(16),
        nullable=False,
        default=DEFAULT_ROLE,
        server_default=db.text("'user'"),
    )
    is_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return verify_password(self.password_hash, password)

    def mark_verified(self) -> None:
        self.is_verified = True

    def to_identity(self) -> dict[str, object]:
        """Snapshot stored in the session; never includes the hash."""

        return {
            "id": self.id,
            "fullname": self.fullname,
            "email": self.email,
            "role": self.role,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
