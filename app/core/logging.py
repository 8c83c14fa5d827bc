"""
Structured logging configuration for ledger auditing and monitoring
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from fastapi import Request

from app.core.currency import format_currency

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the application"""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


class LedgerAuditLogger:
    """Custom logger for ledger audit events"""

    def __init__(self, name: str = "ledger.audit"):
        self.logger = logging.getLogger(name)

    def _emit(self, event: Dict[str, Any]) -> None:
        event.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        severity = event.get("severity", "INFO")
        message = json.dumps(event, default=str)
        if severity == "ERROR":
            self.logger.error(message)
        elif severity == "WARNING":
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_transaction_recorded(self, transaction) -> None:
        """Log a newly appended transaction"""
        self._emit({
            "event_type": "transaction_recorded",
            "transaction_id": transaction.id,
            "patient_id": transaction.patient_id,
            "type": transaction.type,
            "amount": transaction.amount,
            "currency": transaction.currency,
            "amount_display": format_currency(transaction.amount, transaction.currency),
            "status": transaction.status,
            "recorded_by": transaction.recorded_by,
            "severity": "INFO",
        })

    def log_transaction_updated(
        self,
        transaction,
        changes: Dict[str, Any],
        previous_status: Optional[str] = None,
    ) -> None:
        """Log mutations of status, notes or authorizer"""
        self._emit({
            "event_type": "transaction_updated",
            "transaction_id": transaction.id,
            "patient_id": transaction.patient_id,
            "previous_status": previous_status,
            "changes": changes,
            "authorized_by": transaction.authorized_by,
            "severity": "WARNING" if "status" in changes else "INFO",
        })

    def log_validation_failed(self, operation: str, errors: List[Dict[str, str]]) -> None:
        """Log rejected ledger input"""
        self._emit({
            "event_type": "validation_failed",
            "operation": operation,
            "errors": errors,
            "severity": "INFO",
        })

    def log_api_access(
        self,
        request: Request,
        response_status: int,
        processing_time: float
    ) -> None:
        """Log API access for monitoring"""
        self._emit({
            "event_type": "api_access",
            "method": request.method,
            "url": str(request.url),
            "ip_address": get_client_ip(request),
            "user_agent": request.headers.get("user-agent"),
            "response_status": response_status,
            "processing_time_ms": round(processing_time * 1000, 2),
            "severity": "ERROR" if response_status >= 500 else "INFO",
        })


# Global audit logger instance
audit_logger = LedgerAuditLogger()


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request"""
    # Check for forwarded headers (behind proxy)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fallback to direct connection
    return request.client.host if request.client else "unknown"
