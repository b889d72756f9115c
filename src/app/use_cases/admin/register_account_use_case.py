"""
Use Case: Register Account

Creates a login for a pharmacy staff member or platform operator.
"""

import asyncio
import logging
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from src.app.services.audit_logger import AuditLogger
from src.app.services.credentials import CredentialVerifier
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    Account,
    AccountRole,
    AccountStatus,
    AuditAction,
    AuditCategory,
    SystemRole,
)
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class RegisterAccountResponse(BaseModel):
    account_id: str
    email: str
    role: str
    tenant_id: Optional[str] = None
    warnings: List[str] = []


class RegisterAccountUseCase:
    """
    Use case for account registration.

    Business Rules:
    - Email is normalized to lowercase; duplicates (any case) are a CONFLICT
    - Platform roles (super_admin, operations) have no tenant
    - Tenant roles require an existing tenant
    - Password stored as bcrypt hash
    - The role label is backed by a direct assignment of the matching
      system role, so permission resolution sees it

    Business Logic:
    1. Validate role/tenant combination
    2. Check email uniqueness
    3. Hash password and create account
    4. Assign system role
    5. Audit and commit
    """

    def __init__(self, uow: UnitOfWork, credentials: CredentialVerifier):
        self.uow = uow
        self.credentials = credentials

    async def execute(
        self,
        email: str,
        password: str,
        role: str,
        tenant_id: Optional[UUID] = None,
        full_name: Optional[str] = None,
        max_devices: Optional[int] = None,
        inactivity_timeout_minutes: Optional[int] = None,
    ) -> Result[RegisterAccountResponse]:
        try:
            system_role = SystemRole(role)
        except ValueError:
            return Return.err(Error("VALIDATION_ERROR", f"Unknown role: {role}"))

        if system_role.is_global and tenant_id is not None:
            return Return.err(Error("VALIDATION_ERROR", "Platform roles cannot belong to a tenant"))
        if not system_role.is_global and tenant_id is None:
            return Return.err(Error("VALIDATION_ERROR", "Tenant roles require a tenant_id"))
        if max_devices is not None and max_devices < 1:
            return Return.err(Error("VALIDATION_ERROR", "max_devices must be positive"))
        if inactivity_timeout_minutes is not None and inactivity_timeout_minutes < 1:
            return Return.err(
                Error("VALIDATION_ERROR", "inactivity_timeout_minutes must be positive")
            )

        normalized_email = email.strip().lower()

        async with self.uow:
            if tenant_id is not None:
                tenant = await self.uow.tenants.get_by_id(tenant_id)
                if tenant is None:
                    return Return.err(Error("NOT_FOUND", "Tenant not found"))

            existing = await self.uow.accounts.get_by_email(normalized_email)
            if existing is not None:
                return Return.err(Error("CONFLICT", "Email already registered"))

            role_row = await self.uow.roles.get_by_name(system_role.value)
            if role_row is None:
                return Return.err(Error("NOT_FOUND", f"Role {system_role.value} is not seeded"))

            password_hash = await asyncio.to_thread(self.credentials.hash, password)
            account = Account(
                email=normalized_email,
                password_hash=password_hash,
                full_name=full_name,
                status=AccountStatus.active,
                role=system_role,
                tenant_id=tenant_id,
                max_devices=max_devices,
                inactivity_timeout_minutes=inactivity_timeout_minutes,
            )
            await self.uow.accounts.create(account)

            await self.uow.assignments.save_account_role(
                AccountRole(account_id=account.id, role_id=role_row.id, tenant_id=tenant_id)
            )

            audit = AuditLogger(self.uow)
            await audit.record(
                AuditCategory.auth,
                AuditAction.created,
                tenant_id=tenant_id,
                subject_account_id=account.id,
                metadata={"email": account.email, "role": system_role.value},
            )

            await self.uow.commit()
            logger.info("Account %s registered with role %s", account.id, system_role.value)

            return Return.ok(
                RegisterAccountResponse(
                    account_id=str(account.id),
                    email=account.email,
                    role=system_role.value,
                    tenant_id=str(tenant_id) if tenant_id else None,
                    warnings=audit.warnings,
                )
            )
