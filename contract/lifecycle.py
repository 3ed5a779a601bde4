"""
Contract state rules, kept free of the session so they can be tested alone.
"""
from __future__ import annotations
from typing import Optional, Sequence

from .models import Contract, ContractStatus

TERMINAL = frozenset({ContractStatus.expired, ContractStatus.terminated})


def check_can_activate(contract_number: str, status: ContractStatus) -> Optional[str]:
    """Rejection message, or None when the contract may be activated."""
    if status == ContractStatus.active:
        return f"Contract {contract_number} is already active"
    if status in TERMINAL:
        return f"Cannot activate {status.value} contract"
    return None


def validate_activation(contract: Contract, locations: Sequence, schedules: Sequence) -> list[str]:
    errors: list[str] = []
    if not locations:
        errors.append("Contract must have at least one location")
    if not schedules:
        errors.append("Contract must have at least one shift schedule")
    if contract.start_date > contract.end_date:
        errors.append("Contract start date must be before end date")
    return errors


def expire_contract_status(status: ContractStatus) -> tuple[ContractStatus, bool]:
    """
    Returns ``(new_status, cascade)``. ``cascade`` is True only on the first
    transition into ``expired``; repeat sweeps see False and publish nothing.
    """
    if status == ContractStatus.expired:
        return ContractStatus.expired, False
    return ContractStatus.expired, True
