"""
QueryValidator - keeps event store access read-only.

Blocks:
- Data modification (DELETE, UPDATE, INSERT, MERGE)
- Schema changes (DROP, CREATE, ALTER, TRUNCATE)
- Permission changes (GRANT, REVOKE)
"""

from __future__ import annotations

import re


class QueryValidator:
    """
    Validates SQL and identifiers before they reach the event store.

    Analytics only ever aggregate, so any write or DDL keyword in a
    statement is treated as a bug or an injection and rejected.
    """

    BLOCKED_PATTERNS = [
        (r"\bDROP\s+", "DROP statements are not allowed"),
        (r"\bDELETE\s+", "DELETE statements are not allowed"),
        (r"\bTRUNCATE\s+", "TRUNCATE statements are not allowed"),
        (r"\bUPDATE\s+", "UPDATE statements are not allowed"),
        (r"\bINSERT\s+", "INSERT statements are not allowed"),
        (r"\bMERGE\s+", "MERGE statements are not allowed"),
        (r"\bCREATE\s+", "CREATE statements are not allowed"),
        (r"\bALTER\s+", "ALTER statements are not allowed"),
        (r"\bGRANT\s+", "GRANT statements are not allowed"),
        (r"\bREVOKE\s+", "REVOKE statements are not allowed"),
    ]

    @classmethod
    def validate(cls, sql: str) -> bool:
        """
        Validate that a SQL statement is read-only.

        Args:
            sql: SQL query string

        Returns:
            True if the statement is allowed

        Raises:
            ValueError: If the statement contains a blocked pattern
        """
        for pattern, message in cls.BLOCKED_PATTERNS:
            if re.search(pattern, sql, re.IGNORECASE):
                raise ValueError(f"Query validation failed: {message}")
        return True

    @classmethod
    def sanitize_identifier(cls, identifier: str) -> str:
        """
        Sanitize a dataset/table/column identifier to prevent injection.

        Raises:
            ValueError: If identifier contains invalid characters
        """
        if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", identifier or ""):
            raise ValueError(f"Invalid identifier: {identifier}")
        return identifier

    @classmethod
    def validate_project_id(cls, project_id: str) -> str:
        """
        Validate a GCP project ID (lowercase letters, digits, hyphens).

        Raises:
            ValueError: If the project ID is malformed
        """
        if not re.match(r"^[a-z][a-z0-9-]{5,29}$", project_id or ""):
            raise ValueError(f"Invalid project ID: {project_id}")
        return project_id
