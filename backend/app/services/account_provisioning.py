# backend/app/services/account_provisioning.py
"""
Access account provisioning.

Every intern discovered by an import must be able to sign in, so the
identity resolver asks this service to make sure a matching directory
account exists. Accounts are matched by email address.

Behavior:
- Intern without email -> warning logged, nothing created
- Account with that email exists -> returned unchanged
- Otherwise -> INTERN account created with an empty password, the intern's
  name and the intern code as trainee id

Failures here never fail an import row on their own: an intern without an
email simply has no account yet.

Usage:
    from app.services.account_provisioning import AccountProvisioningService

    provisioner = AccountProvisioningService()
    account = provisioner.ensure_account(db, intern)
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import AccountRole, AuthUser, Intern

logger = logging.getLogger(__name__)


class AccountProvisioningService:
    """Creates and looks up directory accounts for interns."""

    def ensure_account(self, db: Session, intern: Intern) -> AuthUser | None:
        """
        Make sure an access account exists for the intern.

        Args:
            db: Database session (the caller owns the transaction)
            intern: Intern that needs an account

        Returns:
            The existing or newly created account, or None when the intern
            has no email address
        """
        if not intern.email:
            logger.warning(
                f"Intern {intern.intern_code} has no email, skipping account provisioning"
            )
            return None

        existing = self.find_account(db, intern)
        if existing is not None:
            logger.debug(f"Account already exists for {intern.email}")
            return existing

        account = AuthUser(
            email=intern.email,
            password="",
            role=AccountRole.INTERN,
            name=intern.name,
            trainee_id=intern.intern_code,
        )
        db.add(account)
        db.flush()

        logger.info(f"Created INTERN account for {intern.intern_code} ({intern.email})")
        return account

    def find_account(self, db: Session, intern: Intern) -> AuthUser | None:
        """Return the account registered under the intern's email, if any."""
        if not intern.email:
            return None
        stmt = select(AuthUser).where(AuthUser.email == intern.email)
        return db.scalar(stmt)
