"""Request-body parsing shared by the JSON endpoints and the CSV importer."""
from datetime import date, datetime
from decimal import Decimal

from .errors import ValidationError
from .models import BUDGET_PERIODS, TRANSACTION_TYPES

CENT = Decimal("0.01")
# Numeric(12, 2) columns hold at most ten integer digits
MAX_AMOUNT = Decimal("1e10")
DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d", "%d/%m/%Y"]


def parse_date(value):
    """Parse a calendar date; ISO timestamps keep only their date part."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    s = str(value).strip().split("T")[0]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_amount(value):
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
            return None
        return amount.quantize(CENT)
    except ArithmeticError:
        return None


def parse_tags(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if isinstance(value, (list, tuple)):
        return [str(t).strip() for t in value if str(t).strip()]
    raise ValidationError("Tags must be a list of strings")


def clean_transaction_fields(data, partial=False):
    """Validate a transaction body. With ``partial`` only present keys are checked."""
    cleaned = {}

    if not partial:
        if not data.get("description") or not data.get("transaction_date") or not data.get("type"):
            raise ValidationError("Description, date, and type are required")

    if "description" in data:
        description = (data.get("description") or "").strip()
        if not description:
            raise ValidationError("Description is required")
        cleaned["description"] = description

    if not partial or "amount" in data:
        amount = parse_amount(data.get("amount"))
        if amount is None:
            raise ValidationError("Valid amount is required")
        cleaned["amount"] = amount

    if "transaction_date" in data:
        on_date = parse_date(data.get("transaction_date"))
        if on_date is None:
            raise ValidationError("Invalid date format")
        cleaned["date"] = on_date

    if "type" in data:
        if data.get("type") not in TRANSACTION_TYPES:
            raise ValidationError("Type must be income or expense")
        cleaned["type"] = data["type"]

    if "category_id" in data:
        category_id = data.get("category_id")
        if category_id in (None, ""):
            cleaned["category_id"] = None
        else:
            try:
                cleaned["category_id"] = int(category_id)
            except (TypeError, ValueError):
                raise ValidationError("Invalid category ID")

    if "payment_method" in data:
        cleaned["payment_method"] = data.get("payment_method") or None

    if "tags" in data:
        cleaned["tags"] = parse_tags(data.get("tags"))

    return cleaned


def clean_budget_fields(data, partial=False):
    """Validate amount/period/category_id of a budget body.

    Period defaults to monthly on create. Raises ``ValidationError``.
    """
    cleaned = {}

    if not partial or "category_id" in data:
        try:
            cleaned["category_id"] = int(data.get("category_id"))
        except (TypeError, ValueError):
            raise ValidationError("Category and amount are required")

    if not partial or "amount" in data:
        if data.get("amount") in (None, ""):
            raise ValidationError("Category and amount are required")
        amount = parse_amount(data.get("amount"))
        if amount is None or amount <= 0:
            raise ValidationError("Valid amount is required")
        cleaned["amount"] = amount

    if not partial or "period" in data:
        period = data.get("period")
        if period is None and not partial:
            period = "monthly"
        if period not in BUDGET_PERIODS:
            raise ValidationError("Period must be weekly, monthly, or yearly")
        cleaned["period"] = period

    return cleaned
