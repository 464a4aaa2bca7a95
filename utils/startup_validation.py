"""
Startup Validation Module

Checks backend configuration before the app starts serving:
1. Configuration validation - fail fast on missing critical settings in production
2. Database reachability
3. Session secret strength
4. Structured startup logging
"""

import os
import sys
import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import create_engine, text

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    name: str
    passed: bool
    message: str
    severity: str = "error"  # error, warning, info
    remediation: Optional[str] = None


@dataclass
class StartupReport:
    """Startup validation report."""
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    environment: str = "unknown"
    validations: List[ValidationResult] = field(default_factory=list)
    ready_for_production: bool = False

    def add_validation(self, result: ValidationResult):
        self.validations.append(result)

    def has_critical_failures(self) -> bool:
        return any(v.severity == "error" and not v.passed for v in self.validations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "environment": self.environment,
            "ready_for_production": self.ready_for_production,
            "validations": [
                {
                    "name": v.name,
                    "passed": v.passed,
                    "message": v.message,
                    "severity": v.severity,
                    "remediation": v.remediation
                }
                for v in self.validations
            ],
            "summary": {
                "total_validations": len(self.validations),
                "passed": sum(1 for v in self.validations if v.passed),
                "failed": sum(1 for v in self.validations if not v.passed),
            }
        }


class StartupValidator:
    """
    Validates:
    1. Required environment variables
    2. Database connectivity
    3. Session secret strength
    """

    REQUIRED_ENV_VARS = [
        ("SESSION_SECRET", "Session signing key for login cookies"),
        ("DATABASE_URL", "SQLAlchemy connection string for the todos table"),
    ]

    MIN_SECRET_LENGTH = 32

    def __init__(self):
        self.report = StartupReport()
        self.report.environment = os.getenv("FLASK_ENV", "development")

    def is_production(self) -> bool:
        return self.report.environment == "production"

    def validate_required_env_vars(self) -> None:
        """Check all required environment variables are set."""
        for var_name, description in self.REQUIRED_ENV_VARS:
            if os.getenv(var_name):
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=True,
                    message=f"{var_name} is configured",
                ))
            else:
                # Development falls back to defaults; only production requires them
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=not self.is_production(),
                    message=f"Missing required: {var_name}",
                    severity="error" if self.is_production() else "warning",
                    remediation=f"Set {var_name} environment variable. {description}"
                ))

    def validate_database_connection(self) -> None:
        """Test database connectivity."""
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=True,
                message="DATABASE_URL not configured, using local SQLite",
                severity="info"
            ))
            return

        try:
            engine = create_engine(database_url)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            engine.dispose()

            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=True,
                message="Database connection successful",
            ))
        except Exception as e:
            self.report.add_validation(ValidationResult(
                name="db:connection",
                passed=False,
                message=f"Database connection failed: {str(e)[:100]}",
                severity="error",
                remediation="Check DATABASE_URL and ensure the database is reachable"
            ))

    def validate_secret_key_strength(self) -> None:
        """Validate session secret key meets security requirements."""
        secret = os.getenv("SESSION_SECRET", "")

        if not secret:
            # Already reported by validate_required_env_vars
            return

        if len(secret) < self.MIN_SECRET_LENGTH:
            self.report.add_validation(ValidationResult(
                name="security:session_secret",
                passed=not self.is_production(),
                message=f"SESSION_SECRET too short ({len(secret)} chars, need {self.MIN_SECRET_LENGTH}+)",
                severity="error" if self.is_production() else "warning",
                remediation=f"Use at least {self.MIN_SECRET_LENGTH} characters for SESSION_SECRET"
            ))
        else:
            self.report.add_validation(ValidationResult(
                name="security:session_secret",
                passed=True,
                message="SESSION_SECRET meets length requirements",
            ))

    def run_all_validations(self) -> StartupReport:
        """Run all validation checks and return the report."""
        logger.info(f"Startup validation (environment: {self.report.environment})")

        self.validate_required_env_vars()
        self.validate_database_connection()
        self.validate_secret_key_strength()

        self.report.ready_for_production = not self.report.has_critical_failures()

        summary = self.report.to_dict()["summary"]
        logger.info(f"Validations: {summary['passed']}/{summary['total_validations']} passed")

        for v in self.report.validations:
            if not v.passed and v.severity == "error":
                logger.error(f"  - {v.name}: {v.message}")
                if v.remediation:
                    logger.error(f"    Fix: {v.remediation}")
            elif v.severity == "warning" and v.remediation:
                logger.warning(f"  - {v.name}: {v.message}")

        return self.report

    def fail_if_not_ready(self) -> None:
        """
        Fail fast if critical validations fail in production.

        In development, log warnings but continue.
        """
        if not self.report.ready_for_production:
            if self.is_production():
                logger.critical("Application cannot start - critical configuration missing")
                sys.exit(1)
            else:
                logger.warning("Development mode: continuing despite validation failures")


def run_startup_validation() -> StartupReport:
    """
    Run startup validation; exits in production if not ready.
    """
    validator = StartupValidator()
    report = validator.run_all_validations()
    validator.fail_if_not_ready()
    return report
