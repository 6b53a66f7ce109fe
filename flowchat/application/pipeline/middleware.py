"""
Middleware pipeline.

A stage receives the turn's context and ``call_next``, the rest of the
pipeline. It may pass the result through, transform it, short-circuit
without calling ``call_next``, or change the context first. ``call_next``
can be used at most once per turn.

Stages are kept in an ordered, named list so callers can insert their own
stages before or after any existing one.
"""
from typing import Any, Callable, Dict, List, Tuple
import inspect
import structlog

from flowchat.domain.errors import ConfigurationError, FlowContractError
from flowchat.domain.flow.context import ConversationContext

logger = structlog.get_logger(__name__)

Handler = Callable[[ConversationContext], Any]
StageFunction = Callable[[ConversationContext, Handler], Any]


class CallNext:
    """Single-use handle on the rest of the pipeline"""

    def __init__(self, app: Handler, stage: str):
        self.app = app
        self.stage = stage
        self.called = False

    def __call__(self, context: ConversationContext) -> Any:
        if self.called:
            raise FlowContractError(f"stage '{self.stage}' called the rest of the pipeline more than once")
        self.called = True
        return self.app(context)


class Middleware:
    """Base class for pipeline stages"""

    name = "middleware"

    def __init__(self, app: Handler, **options):
        self.app = app
        self.options = options

    def __call__(self, context: ConversationContext) -> Any:
        return self.dispatch(context, CallNext(self.app, self.name))

    def dispatch(self, context: ConversationContext, call_next: Handler) -> Any:
        return call_next(context)


class FunctionMiddleware(Middleware):
    """Adapts a plain ``fn(context, call_next)`` into a stage"""

    def __init__(self, app: Handler, func: StageFunction, name: str):
        super().__init__(app)
        self.func = func
        self.name = name

    def dispatch(self, context: ConversationContext, call_next: Handler) -> Any:
        return self.func(context, call_next)


class MiddlewareStack:
    """Ordered, named list of stages that builds into a single handler"""

    def __init__(self, name: str = "pipeline"):
        self.name = name
        self._stages: List[Tuple[str, Any, Dict[str, Any]]] = []

    def use(self, name: str, middleware: Any, **options) -> "MiddlewareStack":
        """Append a stage (innermost so far)"""

        self._check_new(name)
        self._stages.append((name, middleware, options))
        return self

    def insert_before(self, target: str, name: str, middleware: Any, **options) -> "MiddlewareStack":
        self._check_new(name)
        self._stages.insert(self.index(target), (name, middleware, options))
        return self

    def insert_after(self, target: str, name: str, middleware: Any, **options) -> "MiddlewareStack":
        self._check_new(name)
        self._stages.insert(self.index(target) + 1, (name, middleware, options))
        return self

    def replace(self, name: str, middleware: Any, **options) -> "MiddlewareStack":
        """Swap the stage registered under ``name`` keeping its position"""

        self._stages[self.index(name)] = (name, middleware, options)
        return self

    def configure(self, name: str, **options) -> "MiddlewareStack":
        """Merge ``options`` into the constructor options of a stage"""

        position = self.index(name)
        stage_name, middleware, current = self._stages[position]
        self._stages[position] = (stage_name, middleware, {**current, **options})
        return self

    def remove(self, name: str) -> "MiddlewareStack":
        del self._stages[self.index(name)]
        return self

    def index(self, name: str) -> int:
        for position, (stage_name, _, _) in enumerate(self._stages):
            if stage_name == name:
                return position
        raise ConfigurationError(f"no stage named '{name}' in {self.name}")

    @property
    def names(self) -> List[str]:
        return [stage_name for stage_name, _, _ in self._stages]

    def __contains__(self, name: str) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self._stages)

    def build(self, endpoint: Handler) -> Handler:
        """Wrap ``endpoint`` so the first stage in the list runs outermost"""

        handler = endpoint
        for name, middleware, options in reversed(self._stages):
            handler = self._wrap(name, middleware, handler, options)

        logger.debug("Middleware stack built", stack=self.name, stages=self.names)
        return handler

    @staticmethod
    def _wrap(name: str, middleware: Any, handler: Handler, options: Dict[str, Any]) -> Handler:
        if isinstance(middleware, MiddlewareStack):
            return middleware.build(handler)
        if inspect.isclass(middleware) and issubclass(middleware, Middleware):
            stage = middleware(handler, **options)
            stage.name = name
            return stage
        if callable(middleware):
            return FunctionMiddleware(handler, middleware, name)
        raise ConfigurationError(f"stage '{name}' is not a middleware")

    def _check_new(self, name: str):
        if name in self.names:
            raise ConfigurationError(f"stage '{name}' is already registered in {self.name}")
