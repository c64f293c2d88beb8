from __future__ import annotations

from flask import Flask, request

from ..common.validators import to_int
from ..common.web import api_view, current_caller, json_body, ok
from ..container import Container
from .model import EARNING_FIELDS, DEDUCTION_FIELDS, PayrollRecord

# JSON body key -> PayrollComponents field
_AMOUNT_KEYS = {
    "basicSalary": "basic_salary",
    "houseRentAllowance": "house_rent_allowance",
    "medicalAllowance": "medical_allowance",
    "conveyanceAllowance": "conveyance_allowance",
    "specialAllowance": "special_allowance",
    "providentFund": "provident_fund",
    "professionalTax": "professional_tax",
    "incomeTax": "income_tax",
}
_JSON_KEY = {field: key for key, field in _AMOUNT_KEYS.items()}


def _amounts_from(body: dict) -> dict:
    return {field: body[key] for key, field in _AMOUNT_KEYS.items() if key in body}


def payroll_to_dict(r: PayrollRecord) -> dict:
    c = r.components
    data = {
        "id": r.payroll_id,
        "userId": r.user_id,
        "month": r.month_name,
        "monthNumber": r.month,
        "year": r.year,
    }
    for field in EARNING_FIELDS + DEDUCTION_FIELDS:
        data[_JSON_KEY[field]] = getattr(c, field)
    data.update(
        {
            "grossSalary": r.gross_salary,
            "netSalary": r.net_salary,
            "remarks": r.remarks,
            "updatedAt": r.updated_at,
        }
    )
    return data


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_list")
    @api_view
    def list_payroll():
        raw_user = request.args.get("userId")
        records = container.payroll_service.list(
            current_caller(),
            user_id=to_int(raw_user, "userId") if raw_user else None,
            month=request.args.get("month") or None,
            year=request.args.get("year") or None,
            limit=request.args.get("limit"),
            offset=request.args.get("offset"),
        )
        return ok([payroll_to_dict(r) for r in records])

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="payroll_get")
    @api_view
    def get_payroll(payroll_id: int):
        return ok(payroll_to_dict(container.payroll_service.get_by_id(current_caller(), payroll_id)))

    @app.route("/api/payroll", methods=["POST"], endpoint="payroll_upsert")
    @api_view
    def upsert_payroll():
        caller = current_caller()
        body = json_body()
        record = container.payroll_service.upsert(
            caller,
            user_id=body.get("userId"),
            month=body.get("month"),
            year=body.get("year"),
            amounts=_amounts_from(body),
            remarks=body.get("remarks"),
        )
        return ok(payroll_to_dict(record), 201, message="Payroll saved")

    @app.route("/api/payroll/<int:payroll_id>", methods=["PUT"], endpoint="payroll_update")
    @api_view
    def update_payroll(payroll_id: int):
        caller = current_caller()
        body = json_body()
        changes = _amounts_from(body)
        if "remarks" in body:
            changes["remarks"] = body["remarks"]
        record = container.payroll_service.update(caller, payroll_id, changes)
        return ok(payroll_to_dict(record), message="Payroll updated")
