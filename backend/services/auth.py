"""
Supabase Authentication Service
Verifies JWTs issued to admin users
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any
import os
from supabase import create_client, Client


class SupabaseAuthService:
    """Supabase JWT verification"""

    def __init__(self):
        self.supabase_url = os.getenv("SUPABASE_URL")
        self.supabase_key = os.getenv("SUPABASE_ANON_KEY")

        if not all([self.supabase_url, self.supabase_key]):
            raise ValueError("Supabase credentials not configured")

        self.client: Client = create_client(self.supabase_url, self.supabase_key)

    def verify_jwt(self, token: str) -> Dict[str, Any]:
        """
        Verify Supabase JWT token and return user data

        Args:
            token: JWT token from Authorization header

        Returns:
            Dict with user_id, email and role. The role comes from
            app_metadata, which only the service role can write.

        Raises:
            HTTPException: If token is invalid or expired
        """
        try:
            if token.startswith("Bearer "):
                token = token[7:]

            response = self.client.auth.get_user(token)
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Token verification failed: {str(e)}"
            )

        if not response or not response.user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token"
            )

        app_metadata = response.user.app_metadata or {}
        return {
            "user_id": response.user.id,
            "email": response.user.email,
            "role": app_metadata.get("role", "user"),
        }


# Global instance
_auth_service: Optional[SupabaseAuthService] = None


def get_auth_service() -> SupabaseAuthService:
    """Get or create auth service singleton"""
    global _auth_service
    if _auth_service is None:
        _auth_service = SupabaseAuthService()
    return _auth_service
