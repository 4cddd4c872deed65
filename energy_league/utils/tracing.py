import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

F = TypeVar('F', bound=Callable[..., Any])

# Span currently open in this context (request, thread or task)
current_span: ContextVar[Optional['TraceSpan']] = ContextVar(
    'current_span', default=None
)

logger = logging.getLogger(__name__)


@dataclass
class TraceSpan:
    '''A timed section of work with metadata, nested under its parent.'''

    name: str
    start_time: float = field(default_factory=time.perf_counter)
    end_time: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    parent: Optional['TraceSpan'] = None
    children: list['TraceSpan'] = field(default_factory=list)
    failed: bool = False

    @property
    def duration_ms(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time) * 1000

    def finish(self) -> None:
        self.end_time = time.perf_counter()
        metadata_str = ', '.join(f'{k}={v}' for k, v in self.metadata.items())
        outcome = 'failed' if self.failed else 'ok'
        parent = f' (parent: {self.parent.name})' if self.parent else ''
        logger.debug(
            f'{self.name}: {self.duration_ms:.2f}ms {outcome}{parent} [{metadata_str}]'
        )


@contextmanager
def trace_span(
    name: str, metadata: Optional[Dict[str, Any]] = None
) -> Iterator[TraceSpan]:
    '''Time a block of work and log it when it ends.

    Example:
        with trace_span('moderation.approve', {'activity_id': 7}):
            workflow.approve_activity(7, moderator_id=2)
    '''
    parent = current_span.get()
    span = TraceSpan(name=name, metadata=dict(metadata or {}), parent=parent)
    if parent:
        parent.children.append(span)

    token = current_span.set(span)
    try:
        yield span
    except Exception:
        span.failed = True
        raise
    finally:
        span.finish()
        current_span.reset(token)


def traced(name: str) -> Callable[[F], F]:
    '''Decorator form of trace_span for service methods.'''

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            with trace_span(name):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def add_span_metadata(key: str, value: Any) -> None:
    '''Attach metadata to the innermost open span, if any.'''
    span = current_span.get()
    if span:
        span.metadata[key] = value
