import pytest

from quartermaster.domain.forms import (
    AssetForm,
    AssignmentForm,
    ExpenditureForm,
    PasswordChangeForm,
    PurchaseForm,
    TransferForm,
    UserForm,
)
from quartermaster.exceptions import FormValidationError


def errors_for(schema, data):
    with pytest.raises(FormValidationError) as exc:
        schema.parse_form(data)
    return exc.value.errors


def test_asset_required_fields_reported_together():
    errors = errors_for(AssetForm, {"name": "", "type": "", "base": "", "openingBalance": ""})
    assert errors == {
        "name": "Name is required",
        "type": "Type is required",
        "base": "Base is required",
        "openingBalance": "Opening balance is required",
    }


def test_asset_opening_balance_cannot_be_negative():
    errors = errors_for(AssetForm, {"name": "Humvee", "type": "Vehicle", "base": "Base Alpha", "openingBalance": -1})
    assert errors == {"openingBalance": "Opening balance must be at least 0"}


def test_asset_payload_uses_wire_names():
    form = AssetForm.parse_form({"name": "Humvee", "type": "Vehicle", "base": "Base Alpha", "openingBalance": 4})
    assert form.to_payload() == {"name": "Humvee", "type": "Vehicle", "base": "Base Alpha", "openingBalance": 4}


def test_purchase_quantity_and_cost_rules():
    base = {
        "assetName": "Rifle",
        "assetType": "Weapon",
        "base": "Base Alpha",
        "supplier": "Tech Defense Systems",
        "purchaseDate": "2024-03-01",
    }
    errors = errors_for(PurchaseForm, {**base, "quantity": 1.5, "unitCost": 0})
    assert errors["quantity"] == "Quantity must be a whole number"
    assert errors["unitCost"] == "Unit cost must be positive"

    form = PurchaseForm.parse_form({**base, "quantity": 3, "unitCost": 250.5, "invoiceNumber": ""})
    assert (form.quantity, form.unit_cost) == (3, 250.5)
    assert form.to_payload()["purchaseDate"] == "2024-03-01"


def test_transfer_needs_distinct_bases():
    errors = errors_for(
        TransferForm,
        {"asset": "a-1", "fromBase": "Base Alpha", "toBase": "Base Alpha", "quantity": 2},
    )
    assert errors == {"toBase": "Destination base must differ from source base"}


def test_assignment_nested_personnel_fields():
    data = {
        "asset": "a-1",
        "base": "Base Alpha",
        "quantity": 1,
        "assignedTo": {"name": "J. Doe", "rank": "", "id": ""},
        "purpose": "Patrol",
        "startDate": "2024-03-01",
        "endDate": "",
    }
    errors = errors_for(AssignmentForm, data)
    assert errors == {"assignedTo.rank": "Rank is required", "assignedTo.id": "ID is required"}

    data["assignedTo"] = {"name": "J. Doe", "rank": "Sgt", "id": "S-100"}
    form = AssignmentForm.parse_form(data)
    assert form.end_date is None
    assert form.to_payload()["assignedTo"] == {"name": "J. Doe", "rank": "Sgt", "id": "S-100"}


def expenditure(**overrides):
    data = {
        "asset": "a-1",
        "base": "Base Alpha",
        "quantity": 10,
        "reason": "Maintenance",
        "expendedBy": {"name": "J. Doe", "rank": "Sgt", "id": "S-100"},
        "expenditureDate": "2024-03-01",
    }
    data.update(overrides)
    return data


def test_expenditure_operation_name_only_for_operations_and_training():
    assert ExpenditureForm.parse_form(expenditure()).operation_name is None
    errors = errors_for(ExpenditureForm, expenditure(reason="Training", operationName=" "))
    assert errors == {"operationName": "Operation/Training name is required"}
    form = ExpenditureForm.parse_form(expenditure(reason="Operation", operationName="Desert Wind"))
    assert form.operation_name == "Desert Wind"


def test_user_form_rules():
    errors = errors_for(
        UserForm,
        {"username": "ab", "password": "123", "email": "nope", "fullName": "A B", "role": "BaseCommander"},
    )
    assert errors == {
        "username": "Username must be at least 3 characters",
        "password": "Password must be at least 6 characters",
        "email": "Email is invalid",
        "assignedBase": "Assigned base is required for this role",
    }

    admin = UserForm.parse_form(
        {"username": "root", "password": "secret1", "email": "root@example.mil", "fullName": "Root", "role": "Admin"}
    )
    assert admin.assigned_base is None


def test_password_change_must_match():
    errors = errors_for(
        PasswordChangeForm,
        {"currentPassword": "old", "newPassword": "longenough", "confirmPassword": "different"},
    )
    assert errors == {"confirmPassword": "Passwords must match"}
    errors = errors_for(PasswordChangeForm, {"currentPassword": "old", "newPassword": "short", "confirmPassword": "short"})
    assert errors == {"newPassword": "Password must be at least 8 characters"}
