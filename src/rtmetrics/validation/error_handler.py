"""
Asynchronous error handling for the collector's control loops.

Each loop tick runs inside ``AsyncErrorHandler.error_context`` so that a
failed tick is logged with structured context and counted, but never stops
the loop that scheduled it.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, AsyncGenerator, Dict, List, Optional

from .exceptions import ErrorSeverity


class AsyncErrorType(Enum):
    """Types of async errors."""
    COLLECTION_ERROR = "collection_error"
    IDLE_MONITOR_ERROR = "idle_monitor_error"
    UNKNOWN_ERROR = "unknown_error"


@dataclass
class AsyncErrorContext:
    """Context information for async errors."""
    error_type: AsyncErrorType
    severity: ErrorSeverity
    component: str
    operation: str
    timestamp: datetime
    task_name: Optional[str] = None


class AsyncErrorHandler:
    """
    Centralized async error handling with structured logging.

    This class provides:
    - Structured error logging with context
    - Per-type error counters and a bounded history
    - An async context manager for wrapping loop iterations
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_history_size: int = 100):
        """
        Initialize the async error handler.

        Args:
            logger: Optional logger instance, defaults to module logger
            max_history_size: Number of error contexts kept for summaries
        """
        self.logger = logger or logging.getLogger(__name__)
        self.error_history: List[AsyncErrorContext] = []
        self.error_counts: Dict[AsyncErrorType, int] = {}
        self.max_history_size = max_history_size
        self._lock = asyncio.Lock()

    async def handle_error(
        self,
        error: Exception,
        context: AsyncErrorContext,
        reraise: bool = True,
    ) -> None:
        """
        Record and log an error.

        Args:
            error: The exception that occurred
            context: Error context information
            reraise: Whether to reraise the exception after logging

        Raises:
            The original exception if reraise=True
        """
        async with self._lock:
            self.error_counts[context.error_type] = self.error_counts.get(context.error_type, 0) + 1
            self.error_history.append(context)
            if len(self.error_history) > self.max_history_size:
                self.error_history.pop(0)

        self._log_error(error, context)

        if reraise:
            raise error

    @asynccontextmanager
    async def error_context(
        self,
        component: str,
        operation: str,
        error_type: AsyncErrorType = AsyncErrorType.UNKNOWN_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        reraise: bool = True,
    ) -> AsyncGenerator[None, None]:
        """
        Async context manager for error handling.

        Usage:
            async with error_handler.error_context("collector", "collect_stats", reraise=False):
                await collector.collect_stats()
        """
        try:
            yield
        except Exception as e:
            current_task = asyncio.current_task()
            context = AsyncErrorContext(
                error_type=error_type,
                severity=severity,
                component=component,
                operation=operation,
                timestamp=datetime.now(),
                task_name=current_task.get_name() if current_task else None,
            )
            await self.handle_error(e, context, reraise=reraise)

    async def get_error_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all errors handled.

        Returns:
            Dictionary containing error statistics and recent errors
        """
        async with self._lock:
            recent_errors = self.error_history[-10:]

            return {
                'total_errors': sum(self.error_counts.values()),
                'error_counts': {k.value: v for k, v in self.error_counts.items()},
                'recent_errors': [
                    {
                        'error_type': ctx.error_type.value,
                        'severity': ctx.severity.value,
                        'component': ctx.component,
                        'operation': ctx.operation,
                        'timestamp': ctx.timestamp.isoformat(),
                        'task_name': ctx.task_name,
                    }
                    for ctx in recent_errors
                ]
            }

    def _log_error(self, error: Exception, context: AsyncErrorContext) -> None:
        log_level = {
            ErrorSeverity.DEBUG: logging.DEBUG,
            ErrorSeverity.INFO: logging.INFO,
            ErrorSeverity.WARNING: logging.WARNING,
            ErrorSeverity.ERROR: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL
        }.get(context.severity, logging.ERROR)

        log_data = {
            'error_type': context.error_type.value,
            'component': context.component,
            'operation': context.operation,
            'task_name': context.task_name,
            'exception_type': type(error).__name__,
        }

        if context.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self.logger.log(
                log_level,
                f"Async error in {context.component}.{context.operation}: {error}",
                extra=log_data,
                exc_info=True
            )
        else:
            self.logger.log(
                log_level,
                f"Async {context.severity.value} in {context.component}.{context.operation}: {error}",
                extra=log_data
            )
            # Tracebacks for degraded ticks only at debug level.
            self.logger.debug("Traceback for the error above:", exc_info=error)
