"""Bearer-token verification.

Tokens are issued by the external identity provider as signed JWTs. The
only claim the marketplace relies on is ``sub``, the provider's user id.
"""

import structlog
from jose import ExpiredSignatureError, JWTError, jwt

from shared.config import Settings
from shared.errors import Unauthorized

logger = structlog.get_logger(__name__)


class TokenVerifier:
    def __init__(self, settings: Settings) -> None:
        self.secret_key = settings.auth_secret_key
        self.algorithm = settings.auth_algorithm
        self.issuer = settings.auth_issuer

    def verify(self, token: str) -> str:
        """Return the external user id carried by ``token``."""
        options = {"verify_aud": False, "verify_iss": self.issuer is not None}
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options=options,
            )
        except ExpiredSignatureError as exc:
            raise Unauthorized("token has expired") from exc
        except JWTError as exc:
            logger.info("Rejected bearer token", reason=str(exc))
            raise Unauthorized("invalid token") from exc

        subject = claims.get("sub")
        if not subject:
            raise Unauthorized("token has no subject")
        return subject
