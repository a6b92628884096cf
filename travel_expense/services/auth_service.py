"""
Authentication Service
Resolves the authenticated principal attached to each call
"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from travel_expense.config.database import get_db
from travel_expense.models.user import User
from travel_expense.utils.security import decode_token
from travel_expense.utils.logger import setup_logger

logger = setup_logger()

bearer_scheme = HTTPBearer(auto_error=False)


class AuthService:
    """Authorization boundary; tokens are issued by the identity provider"""

    def resolve_user(self, db: Session, token: str) -> Optional[User]:
        """
        Load the active user a token refers to

        Args:
            db: Database session
            token: Bearer token

        Returns:
            User: Active user or None
        """
        payload = decode_token(token)
        if payload is None:
            return None

        user_id = payload.get("sub")
        if user_id is None:
            return None

        try:
            user = db.query(User).filter(User.id == int(user_id)).first()
        except (TypeError, ValueError):
            return None

        if not user or not user.is_active:
            return None

        return user

    async def get_current_user(
        self,
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        db: Session = Depends(get_db)
    ) -> User:
        """
        Get current authenticated user from the bearer token and record
        its id on the request for the access log

        Raises:
            HTTPException: If the token is missing, invalid, or the user is inactive
        """
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

        if credentials is None:
            raise credentials_exception

        user = self.resolve_user(db, credentials.credentials)
        if user is None:
            raise credentials_exception

        request.state.principal_id = user.id
        return user


# Create singleton instance
auth_service = AuthService()
