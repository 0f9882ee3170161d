import logging
from typing import Optional
from uuid import uuid4

from flask import Flask, jsonify, redirect, render_template, request, session, url_for

from mortgage_split.preview import (
    DealRecord,
    SplitPreview,
    preview_auto_split,
    preview_manual_split,
)
from mortgage_split.utils import decimal_from_str, parse_iso_date, parse_optional_date
from mortgage_split_web.config import Settings
from mortgage_split_web.split_store import SplitStore, create_store

logger = logging.getLogger("mortgage_split.web")

FREQUENCY_OPTIONS = {
    "monthly": "Monthly (12/year)",
    "semimonthly": "Semi-monthly (24/year)",
    "biweekly": "Bi-weekly (26/year)",
}


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _optional_decimal(form, name: str):
    value = (form.get(name) or "").strip()
    return decimal_from_str(value) if value else None


def _optional_int(form, name: str) -> Optional[int]:
    value = (form.get(name) or "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid whole number for {name}: {value}") from exc


def _form_to_deal(form) -> DealRecord:
    return DealRecord(
        nickname=(form.get("nickname") or "").strip(),
        original_loan_amount=_optional_decimal(form, "original_loan_amount"),
        interest_rate=_optional_decimal(form, "interest_rate"),
        loan_term_months=_optional_int(form, "loan_term_months"),
        close_date=parse_optional_date(form.get("close_date")),
        first_payment_date=parse_optional_date(form.get("first_payment_date")),
        payment_frequency=form.get("payment_frequency") or "monthly",
        rental_monthly_taxes=_optional_decimal(form, "rental_monthly_taxes"),
        rental_monthly_insurance=_optional_decimal(form, "rental_monthly_insurance"),
    )


def _run_preview(form, settings: Settings) -> SplitPreview:
    """Compute the preview requested by a submitted form or JSON body."""
    amount = _optional_decimal(form, "amount")
    if amount is None or amount <= 0:
        raise ValueError("Amount must be a positive number.")
    mode = form.get("mode", "auto")
    deal = _form_to_deal(form)
    if mode == "manual":
        return preview_manual_split(
            amount,
            _optional_decimal(form, "interest") or 0,
            _optional_decimal(form, "escrow") or 0,
            deal.nickname or "Unknown",
        )
    payment_date = parse_iso_date(form.get("payment_date") or "")
    return preview_auto_split(deal, payment_date, amount, tolerance=settings.split_tolerance)


def create_app(settings: Optional[Settings] = None, store: Optional[SplitStore] = None) -> Flask:
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)

    app = Flask(__name__)
    app.config["ASSET_VERSION"] = settings.asset_version
    app.secret_key = settings.secret_key
    split_store = store or create_store(settings.database_url, settings.max_saved_per_user)
    app.extensions["split_store"] = split_store

    @app.route("/", methods=["GET", "POST"])
    def index():
        preview = None
        error = None
        action = "preview"
        form = request.form if request.method == "POST" else {}

        user_token = _ensure_user_token()

        if request.method == "POST":
            action = request.form.get("action", "preview")
            try:
                preview = _run_preview(request.form, settings)
                if action == "save":
                    split_store.save_preview(
                        user_token, preview, parse_optional_date(request.form.get("payment_date"))
                    )
            except ValueError as exc:
                logger.info("Rejected split form: %s", exc)
                error = str(exc)

        saved_splits = split_store.saved_previews(user_token)
        return render_template(
            "index.html",
            form=form,
            preview=preview,
            error=error,
            frequency_options=FREQUENCY_OPTIONS,
            asset_version=app.config["ASSET_VERSION"],
            saved_splits=saved_splits,
            last_action=action,
        )

    @app.post("/api/split")
    def api_split():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "Expected a JSON object"}), 400
        fields = {k: ("" if v is None else str(v)) for k, v in payload.items()}
        try:
            preview = _run_preview(fields, settings)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(preview.as_dict())

    @app.post("/splits/remove")
    def remove_split():
        split_id = request.form.get("split_id")
        user_token = session.get("user_token")
        split_store.remove_preview(user_token, split_id)
        return redirect(url_for("index"))

    @app.post("/splits/clear")
    def clear_splits():
        user_token = session.get("user_token")
        split_store.clear_previews(user_token)
        return redirect(url_for("index"))

    return app


if __name__ == "__main__":
    print("Starting mortgage split preview app...")
    _settings = Settings()
    create_app(_settings).run(host="0.0.0.0", port=8710, debug=_settings.debug)
