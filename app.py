import logging
from datetime import date
from typing import Dict

from flask import Flask, jsonify, request

from models.aggregation import dashboard_summary, last_7_days_series
from models.animals import all_animals, animal_name, delete_animal, save_animal
from models.chart import bar_chart
from models.customers import (
    all_customers,
    customer_monthly_estimate,
    delete_customer,
    get_customer,
    save_customer,
)
from models.expenses import all_expenses, delete_expense, save_expense, sorted_expenses
from models.milk import all_milk, delete_milk_entry, milk_for_date, save_milk_entry, sorted_milk
from models.reports import build_report
from utils.errors import ParseFailed, ValidationFailed, to_number
from utils.file_manager import RecordStore, load_config, read_json, validate_config_update, write_json

LOG = logging.getLogger(__name__)


def _error(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


def _number_arg(name: str, default):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return to_number(raw)
    except ParseFailed:
        raise ValidationFailed(f"{name} must be a finite number")


def _json_object() -> Dict:
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationFailed("Expected a JSON object")
    return data


def create_app(data_dir=None) -> Flask:
    cfg = load_config(data_dir)
    logging.basicConfig(level=cfg["logging"]["level"])
    store = RecordStore(data_dir, key_prefix=cfg["storage"]["key_prefix"])

    app = Flask(__name__)
    app.config["STORE"] = store
    app.config["DATA_DIR"] = data_dir

    def rate() -> float:
        return float(load_config(data_dir)["pricing"]["milk_rate_per_liter"])

    @app.errorhandler(ValidationFailed)
    def validation_failed(exc):
        return _error(str(exc), 400)

    # -------- Dashboard --------
    @app.get("/dashboard")
    def dashboard():
        return jsonify({"ok": True, "dashboard": dashboard_summary(store, date.today())})

    @app.get("/charts/milk")
    def milk_chart():
        chart_cfg = load_config(data_dir)["chart"]
        width = _number_arg("width", chart_cfg["width"])
        height = _number_arg("height", chart_cfg["height"])
        ratio = _number_arg("ratio", chart_cfg["pixel_ratio"])
        series = last_7_days_series(all_milk(store), date.today())
        commands = bar_chart(series, width, height, ratio)
        return jsonify({
            "ok": True,
            "series": [{"label": label, "value": value} for label, value in series],
            "commands": [c.to_dict() for c in commands],
        })

    # -------- Reports --------
    @app.get("/reports/<month>")
    def monthly_report(month):
        report = build_report(month, all_milk(store), all_expenses(store), rate())
        return jsonify({"ok": True, "report": report.to_dict()})

    # -------- Animals --------
    @app.get("/animals")
    def animals_get():
        return jsonify({"ok": True, "animals": [a.to_dict() for a in all_animals(store)]})

    @app.post("/animals")
    def animals_post():
        data = _json_object()
        data.pop("id", None)
        animal = save_animal(store, data)
        return jsonify({"ok": True, "animal": animal.to_dict()}), 201

    @app.put("/animals/<animal_id>")
    def animals_put(animal_id):
        data = _json_object()
        animal = save_animal(store, {**data, "id": animal_id})
        if animal is None:
            return _error(f"Unknown animal: {animal_id}", 404)
        return jsonify({"ok": True, "animal": animal.to_dict()})

    @app.delete("/animals/<animal_id>")
    def animals_delete(animal_id):
        if not delete_animal(store, animal_id):
            return _error(f"Unknown animal: {animal_id}", 404)
        return jsonify({"ok": True})

    # -------- Milk --------
    @app.get("/milk")
    def milk_get():
        day = request.args.get("date")
        entries = milk_for_date(store, day) if day else all_milk(store)
        animals = all_animals(store)
        rows = [{**m.to_dict(), "animal": animal_name(animals, m.animal_id)} for m in sorted_milk(entries)]
        return jsonify({"ok": True, "milk": rows})

    @app.post("/milk")
    def milk_post():
        data = _json_object()
        entry = save_milk_entry(store, data, date.today())
        return jsonify({"ok": True, "entry": entry.to_dict()}), 201

    @app.delete("/milk/<entry_id>")
    def milk_delete(entry_id):
        if not delete_milk_entry(store, entry_id):
            return _error(f"Unknown milk entry: {entry_id}", 404)
        return jsonify({"ok": True})

    # -------- Customers --------
    @app.get("/customers")
    def customers_get():
        rows = [{**c.to_dict(), "monthlyEstimate": customer_monthly_estimate(c)} for c in all_customers(store)]
        return jsonify({"ok": True, "customers": rows})

    @app.get("/customers/<customer_id>")
    def customers_get_one(customer_id):
        customer = get_customer(store, customer_id)
        if customer is None:
            return _error(f"Unknown customer: {customer_id}", 404)
        return jsonify({"ok": True, "customer": {
            **customer.to_dict(), "monthlyEstimate": customer_monthly_estimate(customer)}})

    @app.post("/customers")
    def customers_post():
        data = _json_object()
        data.pop("id", None)
        customer = save_customer(store, data)
        return jsonify({"ok": True, "customer": customer.to_dict()}), 201

    @app.put("/customers/<customer_id>")
    def customers_put(customer_id):
        data = _json_object()
        customer = save_customer(store, {**data, "id": customer_id})
        if customer is None:
            return _error(f"Unknown customer: {customer_id}", 404)
        return jsonify({"ok": True, "customer": customer.to_dict()})

    @app.delete("/customers/<customer_id>")
    def customers_delete(customer_id):
        if not delete_customer(store, customer_id):
            return _error(f"Unknown customer: {customer_id}", 404)
        return jsonify({"ok": True})

    # -------- Expenses --------
    @app.get("/expenses")
    def expenses_get():
        rows = [e.to_dict() for e in sorted_expenses(all_expenses(store))]
        return jsonify({"ok": True, "expenses": rows})

    @app.post("/expenses")
    def expenses_post():
        data = _json_object()
        expense = save_expense(store, data, date.today())
        return jsonify({"ok": True, "expense": expense.to_dict()}), 201

    @app.delete("/expenses/<expense_id>")
    def expenses_delete(expense_id):
        if not delete_expense(store, expense_id):
            return _error(f"Unknown expense: {expense_id}", 404)
        return jsonify({"ok": True})

    # -------- Admin --------
    @app.get("/config")
    def config_get():
        return jsonify({"ok": True, "config": load_config(data_dir)})

    @app.post("/config")
    def config_update():
        changed = validate_config_update(_json_object())
        cfg = read_json("config.json", data_dir)
        for k, v in changed.items():
            cfg[k] = {**(cfg.get(k) or {}), **v}
        write_json("config.json", cfg, data_dir)
        if "level" in changed.get("logging", {}):
            logging.getLogger().setLevel(changed["logging"]["level"])
        return jsonify({"ok": True, "changed": changed, "config": load_config(data_dir)})

    @app.post("/reset")
    def reset_all():
        store.clear()
        LOG.info("Cleared all collections")
        return jsonify({"ok": True})

    return app


if __name__ == "__main__":
    # Running directly: start Flask dev server
    create_app().run(host="127.0.0.1", port=5000, debug=True)
