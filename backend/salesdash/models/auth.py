from __future__ import annotations

from ..extensions import db
from salesdash.time_utils import to_utc_z


ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
VALID_ROLES = (ROLE_ADMIN, ROLE_CUSTOMER)


class Profile(db.Model):
    """
    User accounts for authentication and attribution.

    role is either "admin" (implicitly holds every capability) or "customer"
    (capabilities come from the user's UserPermission row).

    date_format and dark_mode are the user's display preferences; they are
    read into a DisplayPreferences value per request instead of being kept
    as global state.
    """
    __tablename__ = "profiles"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_profiles_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    first_name = db.Column(db.String(64), nullable=True)
    last_name = db.Column(db.String(64), nullable=True)
    role = db.Column(db.String(16), nullable=False, default=ROLE_CUSTOMER)

    date_format = db.Column(db.String(16), nullable=False, default="MM/DD/YYYY")
    dark_mode = db.Column(db.Boolean, nullable=False, default=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def display_name(self) -> str:
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or self.email

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "date_format": self.date_format,
            "dark_mode": self.dark_mode,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }


class SessionToken(db.Model):
    """
    Opaque bearer tokens.

    SECURITY NOTES:
    - Tokens stored hashed in database (SHA-256)
    - Absolute and idle timeouts (see Config)
    - Revocable on logout
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user_active", "user_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False, index=True)

    # Token hash (never store plaintext tokens!)
    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)

    user = db.relationship("Profile", backref=db.backref("sessions", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }


PERMISSION_FLAGS = (
    "can_add_customers",
    "can_edit_customers",
    "can_delete_customers",
    "can_add_sales",
    "can_edit_sales",
    "can_delete_sales",
    "can_add_salesdetails",
    "can_edit_salesdetails",
    "can_delete_salesdetails",
)


class UserPermission(db.Model):
    """
    Per-user capability flags for non-admin users.

    A user without a row holds no capabilities. Stored flags are ignored for
    administrators.
    """
    __tablename__ = "user_permissions"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_user_permissions_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=False, index=True)

    can_add_customers = db.Column(db.Boolean, nullable=False, default=False)
    can_edit_customers = db.Column(db.Boolean, nullable=False, default=False)
    can_delete_customers = db.Column(db.Boolean, nullable=False, default=False)
    can_add_sales = db.Column(db.Boolean, nullable=False, default=False)
    can_edit_sales = db.Column(db.Boolean, nullable=False, default=False)
    can_delete_sales = db.Column(db.Boolean, nullable=False, default=False)
    can_add_salesdetails = db.Column(db.Boolean, nullable=False, default=False)
    can_edit_salesdetails = db.Column(db.Boolean, nullable=False, default=False)
    can_delete_salesdetails = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("Profile", backref=db.backref("permission_flags", uselist=False, lazy=True))

    def flags(self) -> dict[str, bool]:
        return {flag: bool(getattr(self, flag)) for flag in PERMISSION_FLAGS}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            **self.flags(),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
