# backend/remitos/core/errors.py
"""
Domain error taxonomy.

Every service raises one of these; they are HTTPException subclasses so the
routers let them through untouched and the global handler in main.py turns
them into the failure envelope with a machine readable ``reason``.
"""
from __future__ import annotations
from typing import Optional

from fastapi import HTTPException, status


class DomainError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    reason: str = "domain_error"
    default_detail: str = "Request could not be processed."

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=type(self).status_code, detail=detail or self.default_detail)


# ---- ValidationError: bad input, never retried ----
class ValidationError(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    reason = "validation_error"
    default_detail = "Invalid input."


class EmptyDescription(ValidationError):
    reason = "empty_description"
    default_detail = "Description is required."


class EmptyCode(ValidationError):
    reason = "empty_code"
    default_detail = "Code is required."


class EmptyName(ValidationError):
    reason = "empty_name"
    default_detail = "Name is required."


class EmptyItems(ValidationError):
    reason = "empty_items"
    default_detail = "A note needs at least one item."


class InvalidQuantity(ValidationError):
    reason = "invalid_quantity"
    default_detail = "Quantities must be non-negative integers."


class NoValidRows(ValidationError):
    reason = "no_valid_rows"
    default_detail = "The order has no row with a positive quantity for a known branch."


# ---- ConflictError: catalog invariants ----
class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    reason = "conflict"
    default_detail = "Conflicting state."


class DuplicateCode(ConflictError):
    reason = "duplicate_code"
    default_detail = "Code already linked to a product."


class CodeCapExceeded(ConflictError):
    reason = "code_cap_exceeded"
    default_detail = "A product holds at most 3 codes."


# ---- NotFoundError ----
class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    reason = "not_found"
    default_detail = "Not found."


class BranchNotFound(NotFoundError):
    reason = "branch_not_found"
    default_detail = "Branch not found."


class ProductNotFound(NotFoundError):
    reason = "product_not_found"
    default_detail = "Product not found."


class NoteNotFound(NotFoundError):
    reason = "note_not_found"
    default_detail = "Delivery note not found."


class OrderNotFound(NotFoundError):
    reason = "order_not_found"
    default_detail = "Order not found."


class InvalidIndex(NotFoundError):
    reason = "invalid_index"
    default_detail = "Line index out of range."


class UnknownCode(NotFoundError):
    """Scan code bound to no product; link or create one and scan again."""
    reason = "unknown_code"
    default_detail = "Code not found."


class NotInNote(NotFoundError):
    """Product exists but is not part of this shipment."""
    status_code = status.HTTP_400_BAD_REQUEST
    reason = "not_in_note"
    default_detail = "Product is not listed in this delivery note."


# ---- StateError: transitions that do not apply ----
class StateError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    reason = "state_error"
    default_detail = "Operation not allowed in the current state."


class NotFullyMatched(StateError):
    reason = "not_fully_matched"
    default_detail = "Received quantities do not match; close with discrepancy instead."


class InvalidAction(StateError):
    status_code = status.HTTP_400_BAD_REQUEST
    reason = "invalid_action"
    default_detail = "Action must be 'ok' or 'discrepancy'."


# ---- PersistenceError: the mutation was not committed ----
class PersistenceError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    reason = "persistence_failed"
    default_detail = "State could not be saved."


class DocumentError(DomainError):
    """Rendering or storing the note PDF failed; the note itself is saved."""
    status_code = status.HTTP_502_BAD_GATEWAY
    reason = "document_failed"
    default_detail = "Delivery note document could not be generated."
