import logging
import os

import click
from flask import Flask, jsonify, request

from amort_calc.data_models import DEFAULT_SAFETY_MARGIN, CorrectionPolicy
from amort_calc.engine import compute_schedule
from amort_calc.formatter import schedule_to_dict
from amort_calc.main import build_parameters_from_options
from amort_calc.tr_history import DEFAULT_AVERAGE_WINDOW

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["TR_HISTORY_PATH"] = os.environ.get("TR_HISTORY_PATH")
app.config["TR_AVERAGE_WINDOW"] = int(os.environ.get("TR_AVERAGE_WINDOW", DEFAULT_AVERAGE_WINDOW))
app.config["SCHEDULE_MAX_ROWS"] = int(os.environ.get("SCHEDULE_MAX_ROWS", "0"))
app.config["MAX_TERM_MONTHS"] = int(os.environ.get("MAX_TERM_MONTHS", "600"))
app.config["MAX_SAFETY_MARGIN"] = int(os.environ.get("MAX_SAFETY_MARGIN", "240"))


def parse_form_list(value) -> list[str]:
    """Accept a list of strings or a comma/newline separated string of entries."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    parts = [p.strip() for p in str(value).replace("\n", ",").split(",")]
    return [p for p in parts if p]


def _bounded_int(payload: dict, key: str, default: int, limit: int) -> int:
    value = int(payload.get(key, default))
    if value > limit:
        raise ValueError(f"{key} cannot exceed {limit}; got {value}")
    return value


def _payload_to_parameters(payload: dict):
    use_tr = bool(payload.get("tr_enabled")) and app.config["TR_HISTORY_PATH"]
    return build_parameters_from_options(
        principal=str(payload.get("principal", "")),
        rate=str(payload.get("rate", "")),
        rate_type=payload.get("rate_type", "monthly"),
        term=_bounded_int(payload, "term", 0, app.config["MAX_TERM_MONTHS"]),
        system=str(payload.get("system", "price")),
        fee=str(payload["fee"]) if payload.get("fee") else None,
        start_date=payload.get("start_date") or None,
        extra=tuple(parse_form_list(payload.get("extras"))),
        monthly_extra=str(payload["monthly_extra"]) if payload.get("monthly_extra") else None,
        tr_file=app.config["TR_HISTORY_PATH"] if use_tr else None,
        tr_window=app.config["TR_AVERAGE_WINDOW"],
        projected_tr=str(payload["projected_tr"]) if payload.get("projected_tr") else None,
        policy=payload.get("policy", CorrectionPolicy.COMPOUND_INSTALLMENT.value),
        safety_margin=_bounded_int(
            payload, "safety_margin", DEFAULT_SAFETY_MARGIN, app.config["MAX_SAFETY_MARGIN"]
        ),
    )


def _error(message: str, status: int = 400):
    return jsonify({"error": message}), status


@app.get("/api/health")
def health():
    return jsonify({"status": "ok", "tr_history": bool(app.config["TR_HISTORY_PATH"])})


@app.post("/api/schedule")
def schedule():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("Request body must be a JSON object")
    try:
        params = _payload_to_parameters(payload)
        result = compute_schedule(params)
    except (click.ClickException, ValueError, TypeError, ArithmeticError) as exc:
        message = exc.format_message() if isinstance(exc, click.ClickException) else str(exc)
        logger.info("Rejected schedule request: %s", message)
        return _error(message)

    data = schedule_to_dict(result, params.term)
    max_rows = app.config["SCHEDULE_MAX_ROWS"]
    if max_rows and len(data["schedule"]) > max_rows:
        data["summary"]["truncated"] = len(data["schedule"]) - max_rows
        data["schedule"] = data["schedule"][:max_rows]
    return jsonify(data)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting amortization API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
