"""
Shared module for common utilities of the REST API.

CLEAN ARCHITECTURE STRUCTURE:
- shared.security: Authentication, authorization, rate limiting
  - auth.py: Session JWT signing/verification, bearer/cookie token lookup
  - password.py: Bcrypt hashing
  - rate_limit.py: slowapi limiter for login and public endpoints

- shared.infrastructure: Database and request correlation
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and logging filter

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging, security audit log
  - constants.py: Roles, OrderStatus, transitions

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input validation, SSRF prevention
  - colors.py: Brand colors and contrast text
  - schemas.py / admin_schemas.py: Pydantic schemas

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, resolve_session_token
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, OrderStatus
    from shared.utils.exceptions import NotFoundError, ForbiddenError
    from shared.utils.validators import validate_image_url
"""
