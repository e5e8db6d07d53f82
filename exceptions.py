"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


class DnsProviderError(Exception):
    """
    Raised by any DNSProvider implementation when a DNS API call fails.

    Covers transport failures, non-2xx responses and ClouDNS bodies that
    report status "Failed". The Reconciler wraps it in the operation-specific
    error (CreateFailed, ReadFailed, ...) before it reaches the caller.
    """


class ConfigurationError(Exception):
    """
    Raised when the provider credentials are not usable.

    Exactly one of auth_id / sub_auth_id must be set and the password must be
    non-empty. Fatal: no Reconciler can be constructed.
    """


# ---------------------------------------------------------------------------
# Caller-input validation, detected before any network call
# ---------------------------------------------------------------------------


class MissingRequiredField(ValueError):
    """
    Raised when a record lacks a field its type requires (MX priority,
    SRV priority/weight/port) or an update is attempted without an id.
    """

    def __init__(self, record_type: str, field_name: str) -> None:
        super().__init__(f"{record_type} record requires '{field_name}'")
        self.record_type = record_type
        self.field_name = field_name


class MalformedIdentifier(ValueError):
    """
    Raised when an import identifier is not of the form "zone/recordID".
    """


class RecordTypeChange(ValueError):
    """
    Raised when an update would change a record's type, which ClouDNS
    cannot do in place. The caller has to delete and re-create the record.
    """

    def __init__(self, record_id: str, current_type: str, desired_type: str) -> None:
        super().__init__(
            f"Record {record_id} is {current_type}; changing it to {desired_type} needs delete + create"
        )
        self.record_id = record_id
        self.current_type = current_type
        self.desired_type = desired_type


# ---------------------------------------------------------------------------
# Reconciliation outcomes
# ---------------------------------------------------------------------------


class ReconcileError(Exception):
    """
    Base class for failures surfaced by the Reconciler.
    """


class CreateFailed(ReconcileError):
    """
    Raised when the provider rejects the create call. Never retried, since a
    second create could leave a duplicate behind.
    """


class ReadFailed(ReconcileError):
    """
    Raised when a zone listing cannot be fetched or decoded.
    """


class UpdateFailed(ReconcileError):
    """
    Raised when the provider rejects the update call. The caller's last
    confirmed record is left untouched.
    """


class DeleteFailed(ReconcileError):
    """
    Raised when the provider rejects the destroy call.
    """


class ConfirmationTimeout(ReconcileError):
    """
    Raised when a created record does not appear in the zone listing within
    the confirmation window. The record may still exist remotely.
    """

    def __init__(self, zone: str, record_id: str, timeout: float) -> None:
        super().__init__(
            f"Record {record_id} in {zone} not visible after {timeout:g}s"
        )
        self.zone = zone
        self.record_id = record_id


class ConfirmationCancelled(ReconcileError):
    """
    Raised when the caller cancels the confirmation poll. The record was
    created and may or may not be visible yet; it is not rolled back.
    """

    def __init__(self, zone: str, record_id: str) -> None:
        super().__init__(f"Confirmation of record {record_id} in {zone} cancelled")
        self.zone = zone
        self.record_id = record_id


class DeleteNotObserved(ReconcileError):
    """
    Raised when the destroy call succeeded but the record is still listed.
    """


class ImportRecordNotFound(ReconcileError):
    """
    Raised when an import target is absent from its zone listing.
    """
