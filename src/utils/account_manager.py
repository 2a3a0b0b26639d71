"""Provider account management utilities."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from core.exceptions import AccountNotFoundError
from models.account import AccountModel
from schemas.account import Account, UpdateAccountRequest
from utils.converters import model_to_account

logger = logging.getLogger(__name__)


class AccountManager:
    """Manages provider accounts linked to users."""

    def __init__(self, db: Session):
        self.db = db

    def _get_model(self, provider: str, provider_account_id: str) -> Optional[AccountModel]:
        return (
            self.db.query(AccountModel)
            .filter(
                AccountModel.provider == provider,
                AccountModel.provider_account_id == provider_account_id,
            )
            .first()
        )

    def find(self, provider: str, provider_account_id: str) -> Optional[Account]:
        model = self._get_model(provider, provider_account_id)
        if model:
            return model_to_account(model)
        return None

    def list_for_user(self, user_id: str) -> List[Account]:
        models = (
            self.db.query(AccountModel)
            .filter(AccountModel.user_id == user_id)
            .order_by(AccountModel.created_at.asc())
            .all()
        )
        return [model_to_account(m) for m in models]

    def update(
        self,
        provider: str,
        provider_account_id: str,
        patch: UpdateAccountRequest,
    ) -> Account:
        """Apply a partial update to a provider account.

        Args:
            provider: Identity provider name.
            provider_account_id: The user's identifier at the provider.
            patch: Fields to change; unset fields are left alone.

        Returns:
            The updated Account.

        Raises:
            AccountNotFoundError: If no such account exists.
        """
        model = self._get_model(provider, provider_account_id)
        if not model:
            raise AccountNotFoundError(provider, provider_account_id)

        for key, value in patch.model_dump(exclude_unset=True).items():
            setattr(model, key, value)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated account: %s:%s", provider, provider_account_id)
        return model_to_account(model)
