"""Authentication blueprint: signup, OTP verification, signin and sessions."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request, session

from storage import OtpStore, get_user_store
from utils.auth_guards import SESSION_USER_KEY, current_identity
from utils.errors import (
    ConflictError,
    ForbiddenError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from utils.mailer import MailDeliveryError, OtpMailer
from utils.passwords import burn_password_check
from utils.request_validation import mask_email, normalize_email, parse_json_request

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_OTP = "Invalid or expired OTP"
RESEND_ACK = "If the account exists and is unverified, a new code was sent"

auth_bp = Blueprint("auth", __name__)


def _otp_store() -> OtpStore:
    return current_app.extensions["otp_store"]


def _otp_mailer() -> OtpMailer:
    return current_app.extensions["otp_mailer"]


def _dispatch_code(email: str, fullname: str) -> bool:
    """Issue a fresh code for ``email`` and try to deliver it."""

    code = _otp_store().issue(email)
    try:
        _otp_mailer().send_code(email, code, fullname)
    except MailDeliveryError:
        current_app.logger.exception("Could not deliver OTP to %s", mask_email(email))
        return False
    return True


@auth_bp.route("/signup", methods=["POST"])
def signup() -> tuple:
    """Create an unverified account and send it a verification code."""
    payload = parse_json_request(request, required_keys=("fullname", "email", "password"))
    fullname = payload["fullname"].strip()
    email = normalize_email(payload["email"])
    password = payload["password"]

    users = get_user_store()
    if users.find_by_email(email) is not None:
        raise ConflictError("Email already registered")

    user = users.insert(fullname, email, password)
    current_app.logger.info("Signup for %s (user %s)", mask_email(email), user.id)

    otp_sent = _dispatch_code(email, fullname)

    return (
        jsonify({"message": "Signup successful", "user_id": user.id, "otp_sent": otp_sent}),
        HTTPStatus.OK,
    )


@auth_bp.route("/verify-otp", methods=["POST"])
def verify_otp() -> tuple:
    """Consume a pending code and mark the matching account verified."""
    payload = parse_json_request(request, required_keys=("email", "otp"))
    email = normalize_email(payload["email"])

    users = get_user_store()
    otp_store = _otp_store()
    claimed = otp_store.claim(email, payload["otp"])
    if claimed is None:
        current_app.logger.info("OTP rejected for %s", mask_email(email))
        raise ValidationError(INVALID_OTP)

    try:
        verified = users.mark_verified(email)
    except StoreError:
        # the code stays usable for a retry
        otp_store.restore(email, claimed)
        raise
    if not verified:
        raise ValidationError(INVALID_OTP)

    current_app.logger.info("Email verified for %s", mask_email(email))
    return jsonify({"message": "Email verified successfully"}), HTTPStatus.OK


@auth_bp.route("/resend-otp", methods=["POST"])
def resend_otp() -> tuple:
    """Replace the pending code for an unverified account.

    The response is the same whether or not the account exists.
    """
    payload = parse_json_request(request, required_keys=("email",))
    email = normalize_email(payload["email"])

    user = get_user_store().find_by_email(email)
    if user is not None and not user.is_verified:
        _dispatch_code(email, user.fullname)

    return jsonify({"message": RESEND_ACK}), HTTPStatus.OK


@auth_bp.route("/signin", methods=["POST"])
def signin() -> tuple:
    """Check credentials and open a session holding the user's identity."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    email = normalize_email(payload["email"])
    password = payload["password"]

    user = get_user_store().find_by_email(email)
    if user is None:
        burn_password_check(password)
        current_app.logger.info("Signin failed for %s", mask_email(email))
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not user.check_password(password):
        current_app.logger.info("Signin failed for %s", mask_email(email))
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if current_app.config.get("REQUIRE_VERIFIED_EMAIL") and not user.is_verified:
        raise ForbiddenError("Email not verified")

    session.clear()
    session.regenerate()
    session.permanent = True
    session[SESSION_USER_KEY] = user.to_identity()

    return (
        jsonify({"message": "Signed in", "fullname": user.fullname, "role": user.role}),
        HTTPStatus.OK,
    )


@auth_bp.route("/signout", methods=["POST"])
def signout() -> tuple:
    """Destroy the current session; succeeds without one too."""
    session.clear()
    return jsonify({"message": "Signed out"}), HTTPStatus.OK


@auth_bp.route("/auth/me", methods=["GET"])
def me() -> tuple:
    """Report the session identity without touching the credential store."""
    identity = current_identity()
    if identity is None:
        return jsonify({"authenticated": False}), HTTPStatus.OK
    return jsonify({"authenticated": True, "user": identity}), HTTPStatus.OK
