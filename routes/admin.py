"""Administrator-only routes."""

from __future__ import annotations

from flask import Blueprint, jsonify

from utils.auth_guards import admin_required

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/secure-check", methods=["GET"])
@admin_required
def secure_check():
    """Confirm that the caller holds an admin session."""

    return jsonify({"ok": True, "message": "Admin access granted"})
