# =========================================================
# POS ERROR TAXONOMY
#
# Services raise these; main.py maps them to JSON responses.
# Every error carries a machine-readable code and, for the
# checkout workflow, the stage that failed.
# =========================================================

from decimal import Decimal


class PosError(Exception):
    code = "pos_error"
    status_code = 400

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def context(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        body = {"detail": self.message, "error": self.code}
        if self.stage:
            body["stage"] = self.stage
        body.update(self.context())
        return body


class ValidationError(PosError):
    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, field: str | None = None, stage: str | None = None):
        super().__init__(message, stage=stage)
        self.field = field

    def context(self) -> dict:
        return {"field": self.field} if self.field else {}


class NotFoundError(PosError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id, stage: str | None = None):
        super().__init__(f"{entity} not found", stage=stage)
        self.entity = entity
        self.entity_id = entity_id

    def context(self) -> dict:
        return {"entity": self.entity, "id": self.entity_id}


class InsufficientStockError(PosError):
    code = "insufficient_stock"
    status_code = 409

    def __init__(
        self,
        product_id: int,
        product_name: str | None,
        requested: int,
        available: int,
        stage: str | None = None,
    ):
        label = product_name or f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {label}: requested {requested}, available {available}",
            stage=stage,
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available

    def context(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "requested": self.requested,
            "available": self.available,
        }


class InconsistentTotalsError(PosError):
    code = "inconsistent_totals"
    status_code = 400

    def __init__(self, field: str, expected: Decimal, received: Decimal, stage: str | None = None):
        super().__init__(
            f"Supplied {field} {received} does not match computed {expected}",
            stage=stage,
        )
        self.field = field
        self.expected = expected
        self.received = received

    def context(self) -> dict:
        return {
            "field": self.field,
            "expected": str(self.expected),
            "received": str(self.received),
        }


class StoreError(PosError):
    code = "store_error"
    status_code = 500

    def __init__(self, message: str = "Unable to complete the request", stage: str | None = None):
        super().__init__(message, stage=stage)
