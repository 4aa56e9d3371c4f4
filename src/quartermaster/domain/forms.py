"""
Declarative form schemas.

Each schema lists its required fields (wire path -> label) and any
cross-field rules; pydantic handles types and bounds. `parse_form` collects
every field error at once, keyed by wire field path (``assignedTo.name``),
and raises FormValidationError. Nothing here talks to the backend.
"""
import re
from datetime import date
from typing import Any, ClassVar, Mapping, Optional

from pydantic import Field, ValidationError, ValidationInfo, field_validator

from quartermaster.domain.models import Role, WireModel
from quartermaster.exceptions import FormValidationError

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _error_message(err: dict) -> str:
    msg = str(err.get("msg", "Invalid value"))
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


class FormSchema(WireModel):
    required: ClassVar[dict[str, str]] = {}

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any, info: ValidationInfo) -> Any:
        # Empty inputs for optional fields (dates, numbers) mean "not given".
        field = cls.model_fields.get(info.field_name)
        if isinstance(value, str) and not value.strip() and field is not None and field.default is None:
            return None
        return value

    @classmethod
    def check(cls, data: Mapping[str, Any]) -> dict[str, str]:
        """Cross-field rules; returns wire path -> message."""
        return {}

    @classmethod
    def parse_form(cls, data: Mapping[str, Any]):
        errors: dict[str, str] = {}
        for path, label in cls.required.items():
            if _is_blank(_lookup(data, path)):
                errors[path] = f"{label} is required"
        errors.update({k: v for k, v in cls.check(data).items() if k not in errors})

        try:
            model = cls.model_validate(dict(data))
        except ValidationError as exc:
            for err in exc.errors():
                key = ".".join(str(part) for part in err["loc"]) or "__all__"
                errors.setdefault(key, _error_message(err))
            raise FormValidationError(errors)

        if errors:
            raise FormValidationError(errors)
        return model

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def _positive_int(value: Any, label: str) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{label} must be a whole number")
    if int(value) <= 0:
        raise ValueError(f"{label} must be positive")
    return int(value)


class LoginForm(FormSchema):
    required: ClassVar[dict[str, str]] = {"username": "Username", "password": "Password"}

    username: str = ""
    password: str = ""


class AssetForm(FormSchema):
    required: ClassVar[dict[str, str]] = {
        "name": "Name",
        "type": "Type",
        "base": "Base",
        "openingBalance": "Opening balance",
    }

    name: str = ""
    type: str = ""
    base: str = ""
    opening_balance: Optional[int] = 0

    @field_validator("opening_balance")
    @classmethod
    def _non_negative(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("Opening balance must be at least 0")
        return value


class PurchaseForm(FormSchema):
    required: ClassVar[dict[str, str]] = {
        "assetName": "Asset name",
        "assetType": "Asset type",
        "base": "Base",
        "supplier": "Supplier",
        "quantity": "Quantity",
        "unitCost": "Unit cost",
        "purchaseDate": "Purchase date",
    }

    asset_name: str = ""
    asset_type: str = ""
    base: str = ""
    supplier: str = ""
    quantity: Optional[float] = None
    unit_cost: Optional[float] = None
    purchase_date: Optional[date] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, value: Optional[float]) -> Optional[int]:
        return None if value is None else _positive_int(value, "Quantity")

    @field_validator("unit_cost")
    @classmethod
    def _unit_cost(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("Unit cost must be positive")
        return value


class TransferForm(FormSchema):
    required: ClassVar[dict[str, str]] = {
        "asset": "Asset",
        "fromBase": "Source base",
        "toBase": "Destination base",
        "quantity": "Quantity",
    }

    asset: str = ""
    from_base: str = ""
    to_base: str = ""
    quantity: Optional[float] = None
    transfer_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, value: Optional[float]) -> Optional[int]:
        return None if value is None else _positive_int(value, "Quantity")

    @classmethod
    def check(cls, data: Mapping[str, Any]) -> dict[str, str]:
        src, dst = data.get("fromBase"), data.get("toBase")
        if src and dst and src == dst:
            return {"toBase": "Destination base must differ from source base"}
        return {}


class PersonnelForm(FormSchema):
    name: str = ""
    rank: str = ""
    id: str = ""


class AssignmentForm(FormSchema):
    required: ClassVar[dict[str, str]] = {
        "asset": "Asset",
        "base": "Base",
        "quantity": "Quantity",
        "assignedTo.name": "Name",
        "assignedTo.rank": "Rank",
        "assignedTo.id": "ID",
        "purpose": "Purpose",
        "startDate": "Start date",
    }

    asset: str = ""
    base: str = ""
    quantity: Optional[float] = None
    assigned_to: PersonnelForm = Field(default_factory=PersonnelForm)
    purpose: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, value: Optional[float]) -> Optional[int]:
        return None if value is None else _positive_int(value, "Quantity")


class ExpenditureForm(FormSchema):
    required: ClassVar[dict[str, str]] = {
        "asset": "Asset",
        "base": "Base",
        "quantity": "Quantity",
        "reason": "Reason",
        "expendedBy.name": "Name",
        "expendedBy.rank": "Rank",
        "expendedBy.id": "ID",
        "expenditureDate": "Expenditure date",
    }
    named_reasons: ClassVar[frozenset[str]] = frozenset({"Operation", "Training"})

    asset: str = ""
    base: str = ""
    quantity: Optional[float] = None
    reason: str = ""
    expended_by: PersonnelForm = Field(default_factory=PersonnelForm)
    expenditure_date: Optional[date] = None
    operation_name: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, value: Optional[float]) -> Optional[int]:
        return None if value is None else _positive_int(value, "Quantity")

    @classmethod
    def check(cls, data: Mapping[str, Any]) -> dict[str, str]:
        if data.get("reason") in cls.named_reasons and _is_blank(data.get("operationName")):
            return {"operationName": "Operation/Training name is required"}
        return {}


class UserForm(FormSchema):
    required: ClassVar[dict[str, str]] = {
        "username": "Username",
        "password": "Password",
        "email": "Email",
        "fullName": "Full name",
    }

    username: str = ""
    password: str = ""
    email: str = ""
    full_name: str = ""
    role: Role = Role.LOGISTICS_OFFICER
    assigned_base: Optional[str] = None

    @classmethod
    def check(cls, data: Mapping[str, Any]) -> dict[str, str]:
        errors: dict[str, str] = {}
        username = str(data.get("username") or "").strip()
        if username and len(username) < 3:
            errors["username"] = "Username must be at least 3 characters"
        password = str(data.get("password") or "").strip()
        if password and len(password) < 6:
            errors["password"] = "Password must be at least 6 characters"
        email = str(data.get("email") or "").strip()
        if email and not _EMAIL_RE.search(email):
            errors["email"] = "Email is invalid"
        if data.get("role", Role.LOGISTICS_OFFICER.value) != Role.ADMIN.value and _is_blank(data.get("assignedBase")):
            errors["assignedBase"] = "Assigned base is required for this role"
        return errors


class PasswordChangeForm(FormSchema):
    required: ClassVar[dict[str, str]] = {
        "currentPassword": "Current password",
        "newPassword": "New password",
        "confirmPassword": "Confirm password",
    }

    current_password: str = ""
    new_password: str = ""
    confirm_password: str = ""

    @classmethod
    def check(cls, data: Mapping[str, Any]) -> dict[str, str]:
        errors: dict[str, str] = {}
        new = data.get("newPassword") or ""
        if new and len(new) < 8:
            errors["newPassword"] = "Password must be at least 8 characters"
        confirm = data.get("confirmPassword") or ""
        if confirm and confirm != new:
            errors["confirmPassword"] = "Passwords must match"
        return errors
