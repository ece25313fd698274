"""
Shared module for ambient code used by the QC API and the CLI.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Audit fields, key kinds, limits, error messages

- shared.infrastructure: Database and request context
  - db.py: Async engine wrapper with named-parameter statements
  - correlation.py: X-Request-ID propagation

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - health.py: Health check helpers
  - validators.py: Input sanitizing and LIKE escaping

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.constants import KeyKind, Limits
    from shared.infrastructure.db import get_database
    from shared.utils.exceptions import NotFoundError, ValidationError
    from shared.utils.validators import escape_like_pattern
"""
